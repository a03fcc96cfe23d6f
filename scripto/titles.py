#!/usr/bin/env python3
"""
Title and name handling for multi-entity queries.

MediaWiki accepts up to 50 titles (or user names) per request, joined
with "|", and may answer with canonical titles in a different order.
This module validates the input lists, splits them into request-sized
chunks and maps the returned pages back onto the caller's ordering.
"""

import logging
from typing import Iterator, Sequence

from scripto.exceptions import InvalidArgumentError, TitleResolutionError
from scripto.responses import get_list, get_str

logger = logging.getLogger(__name__)

SEPARATOR = "|"
MAX_TITLES_PER_REQUEST = 50


def validate_names(names: Sequence, kind: str = "title") -> list[str]:
    """
    Check a list of titles or user names before it goes on the wire.

    Names must be strings, unique, and free of the field separator.

    Raises:
        InvalidArgumentError: on the first contract violation
    """
    if isinstance(names, str):
        raise InvalidArgumentError(f"{kind.capitalize()}s must be a list, not a string")
    names = list(names)
    for name in names:
        if not isinstance(name, str):
            raise InvalidArgumentError(f"A {kind} must be a string")
        if SEPARATOR in name:
            raise InvalidArgumentError(f"A {kind} must not contain a vertical bar")
    if len(names) != len(set(names)):
        raise InvalidArgumentError(f"{kind.capitalize()}s must be unique")
    return names


def validate_name(name, kind: str = "title") -> str:
    return validate_names([name], kind)[0]


def chunked(items: Sequence, size: int = MAX_TITLES_PER_REQUEST) -> Iterator[list]:
    """Yield consecutive slices of at most size items."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def normalization_map(query: dict) -> dict[str, str]:
    """Build the from -> to map of the response's "normalized" list."""
    return {
        get_str(entry, "from"): get_str(entry, "to")
        for entry in get_list(query, "normalized", default=[])
    }


def resolve_pages(query: dict, titles: Sequence[str]) -> list[dict]:
    """
    Match returned page objects to requested titles.

    Args:
        query: The "query" object of one chunk's response
        titles: Titles requested in that chunk, in caller order

    Returns:
        One page object per title, in the order of titles

    Raises:
        TitleResolutionError: a title matched no page, or more than one
    """
    normalized = normalization_map(query)
    pages = get_list(query, "pages", default=[])

    resolved = []
    for title in titles:
        target = normalized.get(title, title)
        matches = [page for page in pages if get_str(page, "title") == target]
        if len(matches) != 1:
            raise TitleResolutionError(title, len(matches))
        if target != title:
            logger.debug(f'Resolved "{title}" as "{target}"')
        resolved.append(matches[0])
    return resolved
