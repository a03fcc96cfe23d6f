#!/usr/bin/env python3
"""Page and revision records decoded from query responses."""

from dataclasses import dataclass, field
from typing import Optional

from scripto.responses import get_dict, get_field, get_int, get_list, get_str


@dataclass
class Revision:
    """A single page revision."""

    revid: int
    timestamp: Optional[str] = None
    user: Optional[str] = None
    parentid: Optional[int] = None
    minor: bool = False
    size: Optional[int] = None
    comment: Optional[str] = None
    parsedcomment: Optional[str] = None
    content: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: dict) -> "Revision":
        # Content lives in the main slot on current MediaWiki, at the top
        # level on older releases.
        content = get_str(data, "slots", "main", "content", default=None)
        if content is None:
            content = get_str(data, "content", default=None)
        return cls(
            revid=get_int(data, "revid"),
            timestamp=get_str(data, "timestamp", default=None),
            user=get_str(data, "user", default=None),
            parentid=get_int(data, "parentid", default=None),
            minor=bool(get_field(data, "minor", default=False)),
            size=get_int(data, "size", default=None),
            comment=get_str(data, "comment", default=None),
            parsedcomment=get_str(data, "parsedcomment", default=None),
            content=content,
            raw=data,
        )


@dataclass
class Page:
    """
    A page as returned by prop=info|revisions.

    pageid is None when the page does not exist yet. actions maps the
    tested rights (read, edit, createpage, ...) to whether the current
    user holds them on this page.
    """

    title: str
    pageid: Optional[int] = None
    ns: Optional[int] = None
    protection: list = field(default_factory=list)
    actions: dict = field(default_factory=dict)
    fullurl: Optional[str] = None
    lastrevid: Optional[int] = None
    revision: Optional[Revision] = None
    invalid: bool = False
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def exists(self) -> bool:
        return self.pageid is not None

    @property
    def base_timestamp(self) -> Optional[str]:
        """Timestamp of the latest revision, used to detect edit conflicts."""
        return self.revision.timestamp if self.revision else None

    def can(self, action: str) -> bool:
        return bool(self.actions.get(action, False))

    @classmethod
    def from_json(cls, data: dict) -> "Page":
        missing = bool(get_field(data, "missing", default=False))
        revisions = get_list(data, "revisions", default=[])
        return cls(
            title=get_str(data, "title"),
            pageid=None if missing else get_int(data, "pageid", default=None),
            ns=get_int(data, "ns", default=None),
            protection=get_list(data, "protection", default=[]),
            actions=get_dict(data, "actions", default={}),
            fullurl=get_str(data, "fullurl", default=None),
            lastrevid=get_int(data, "lastrevid", default=None),
            revision=Revision.from_json(revisions[0]) if revisions else None,
            invalid=bool(get_field(data, "invalid", default=False)),
            raw=data,
        )
