#!/usr/bin/env python3
"""
Persistence for MediaWiki authentication cookies.

The client never touches ambient process state: it is handed a
SessionStore and calls load() once at construction, save() after a
successful login and clear() after logout.

Stores keep serialized cookies (plain dicts) so they can live in any
key-value backend. Two backends are provided:

- MemorySessionStore: process-local, handy for tests
- JsonFileSessionStore: one JSON file holding any number of named sessions

Usage:
    from scripto.session_store import JsonFileSessionStore

    store = JsonFileSessionStore("data/session.json")
    cookies = store.load()
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

from requests.cookies import RequestsCookieJar, create_cookie

DEFAULT_SESSION_NAME = "ScriptoMediawiki"

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Key-value storage for one named cookie set."""

    def load(self) -> Optional[list[dict]]:
        ...

    def save(self, cookies: list[dict]) -> None:
        ...

    def clear(self) -> None:
        ...


def serialize_cookies(jar: Iterable) -> list[dict]:
    """Convert a cookie jar into JSON-friendly dicts."""
    return [
        {
            "name": cookie.name,
            "value": cookie.value,
            "domain": cookie.domain,
            "path": cookie.path,
            "secure": bool(cookie.secure),
            "expires": cookie.expires,
        }
        for cookie in jar
    ]


def restore_cookies(jar: RequestsCookieJar, cookies: Iterable[dict]) -> int:
    """
    Seed a jar with previously serialized cookies.

    Returns:
        Number of cookies added
    """
    count = 0
    for data in cookies:
        jar.set_cookie(create_cookie(
            name=data["name"],
            value=data["value"],
            domain=data.get("domain", ""),
            path=data.get("path", "/"),
            secure=data.get("secure", False),
            expires=data.get("expires"),
        ))
        count += 1
    return count


class MemorySessionStore:
    """In-memory SessionStore; contents vanish with the process."""

    def __init__(self, name: str = DEFAULT_SESSION_NAME, cookies: Optional[list[dict]] = None):
        self.name = name
        self._data: dict[str, list[dict]] = {}
        if cookies is not None:
            self._data[name] = list(cookies)

    def load(self) -> Optional[list[dict]]:
        cookies = self._data.get(self.name)
        return list(cookies) if cookies is not None else None

    def save(self, cookies: list[dict]) -> None:
        self._data[self.name] = list(cookies)

    def clear(self) -> None:
        self._data.pop(self.name, None)


class JsonFileSessionStore:
    """
    SessionStore backed by a JSON file.

    The file maps session names to cookie lists, so several clients (or
    wikis) can share one file without clobbering each other.
    """

    def __init__(self, path: Union[str, Path], name: str = DEFAULT_SESSION_NAME):
        self.path = Path(path)
        self.name = name

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session file {self.path}")
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    def load(self) -> Optional[list[dict]]:
        cookies = self._read().get(self.name)
        return cookies if isinstance(cookies, list) else None

    def save(self, cookies: list[dict]) -> None:
        data = self._read()
        data[self.name] = list(cookies)
        self._write(data)
        logger.debug(f"Saved {len(cookies)} cookies to {self.path} [{self.name}]")

    def clear(self) -> None:
        data = self._read()
        if self.name in data:
            del data[self.name]
            self._write(data)
            logger.debug(f"Cleared session {self.name} in {self.path}")
