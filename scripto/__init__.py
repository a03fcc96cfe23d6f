"""
Scripto: a MediaWiki action API client.

Provides:
- WikiApiClient: queries, conflict-aware edits, authentication, watch/protect
- SessionStore backends: MemorySessionStore, JsonFileSessionStore
- Page/Revision records and the exception hierarchy
- load_config/setup_logging for scripts built on the client
"""

from scripto.api_client import WikiApiClient
from scripto.config import WikiConfig, load_config
from scripto.exceptions import (
    ApiResponseError,
    ConfigError,
    ContinuationLimitError,
    CreateAccountError,
    DecodeError,
    EditError,
    InvalidArgumentError,
    LoginError,
    ParseError,
    ProtectError,
    QueryError,
    RequestError,
    TitleResolutionError,
    WatchError,
    WikiApiError,
)
from scripto.logging_config import setup_logging, get_log_dir
from scripto.models import Page, Revision
from scripto.session_store import JsonFileSessionStore, MemorySessionStore, SessionStore
from scripto.transport import Transport

__all__ = [
    "WikiApiClient",
    "Transport",
    "SessionStore",
    "MemorySessionStore",
    "JsonFileSessionStore",
    "Page",
    "Revision",
    "WikiConfig",
    "load_config",
    "setup_logging",
    "get_log_dir",
    "WikiApiError",
    "ConfigError",
    "InvalidArgumentError",
    "RequestError",
    "DecodeError",
    "ApiResponseError",
    "QueryError",
    "TitleResolutionError",
    "ContinuationLimitError",
    "ParseError",
    "EditError",
    "LoginError",
    "CreateAccountError",
    "WatchError",
    "ProtectError",
]
