#!/usr/bin/env python3
"""
Configuration for the Scripto MediaWiki client.

Settings come from a JSON file (config.json at the project root by
default, or $SCRIPTO_CONFIG), with environment variables taking
precedence:

    SCRIPTO_API_URL       wiki.api_endpoint
    SCRIPTO_WIKI_NAME     wiki.name
    SCRIPTO_USER_AGENT    client.user_agent
    SCRIPTO_TIMEOUT       client.timeout_seconds
    SCRIPTO_SESSION_PATH  session.path

Credentials are never read from the file.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from scripto.exceptions import ConfigError
from scripto.session_store import DEFAULT_SESSION_NAME

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.json"


@dataclass
class WikiConfig:
    """Resolved client settings."""

    api_url: str
    wiki_name: str = "Wiki"
    user_agent: Optional[str] = None
    timeout: float = 30.0
    delay: float = 0.0
    max_continuations: Optional[int] = None
    session_store: str = "file"
    session_path: Path = PROJECT_ROOT / "data" / "session.json"
    session_name: str = DEFAULT_SESSION_NAME
    source_dir: Path = PROJECT_ROOT / "pages"
    extension: str = ".wiki"

    @property
    def wiki_id(self) -> str:
        return self.wiki_name.lower().replace(" ", "-")


def _resolve_path(value: Union[str, Path], base: Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base / path


def load_config(path: Optional[Union[str, Path]] = None) -> WikiConfig:
    """
    Load settings from a JSON file plus environment overrides.

    A missing file is fine as long as SCRIPTO_API_URL is set.

    Raises:
        ConfigError: unreadable file, bad values, or no API URL anywhere
    """
    if path is None:
        path = os.environ.get("SCRIPTO_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(path)

    data = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e

    base = path.parent
    wiki = data.get("wiki", {})
    client = data.get("client", {})
    session = data.get("session", {})
    sync = data.get("sync", {})

    api_url = os.environ.get("SCRIPTO_API_URL", wiki.get("api_endpoint"))
    if not api_url:
        raise ConfigError(f"No API endpoint: set wiki.api_endpoint in {path} or SCRIPTO_API_URL")

    try:
        timeout = float(os.environ.get("SCRIPTO_TIMEOUT", client.get("timeout_seconds", 30.0)))
        delay = float(client.get("delay_seconds", 0.0))
        max_continuations = client.get("max_continuations")
        if max_continuations is not None:
            max_continuations = int(max_continuations)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid client setting in {path}: {e}") from e

    session_path = os.environ.get("SCRIPTO_SESSION_PATH", session.get("path", "data/session.json"))

    return WikiConfig(
        api_url=api_url,
        wiki_name=os.environ.get("SCRIPTO_WIKI_NAME", wiki.get("name", "Wiki")),
        user_agent=os.environ.get("SCRIPTO_USER_AGENT", client.get("user_agent")),
        timeout=timeout,
        delay=delay,
        max_continuations=max_continuations,
        session_store=session.get("store", "file"),
        session_path=_resolve_path(session_path, base),
        session_name=session.get("name", DEFAULT_SESSION_NAME),
        source_dir=_resolve_path(sync.get("source_dir", "pages"), base),
        extension=sync.get("extension", ".wiki"),
    )
