#!/usr/bin/env python3
"""
Exception hierarchy for the Scripto MediaWiki client.

Every error raised by the package derives from WikiApiError, so callers
can catch the whole family at once or react to a specific failure.
"""

from typing import Optional


class WikiApiError(Exception):
    """Base class for all client errors."""


class ConfigError(WikiApiError):
    """Configuration is missing or malformed."""


class InvalidArgumentError(WikiApiError, ValueError):
    """The caller broke an argument contract; no request was sent."""


class RequestError(WikiApiError):
    """The HTTP exchange itself failed (non-2xx status or no connection)."""

    def __init__(self, status_line: str, status_code: Optional[int] = None):
        super().__init__(status_line)
        self.status_line = status_line
        self.status_code = status_code


class DecodeError(WikiApiError):
    """The response body was not the JSON shape the protocol promises."""


class ApiResponseError(WikiApiError):
    """The API answered, but reported a logical failure."""

    def __init__(self, info: str, code: Optional[str] = None):
        super().__init__(info)
        self.info = info
        self.code = code


class QueryError(ApiResponseError):
    pass


class TitleResolutionError(QueryError):
    """A requested title matched zero or several returned pages."""

    def __init__(self, title: str, matches: int):
        if matches:
            info = f'Title "{title}" matched {matches} returned pages'
        else:
            info = f'Title "{title}" did not match any returned page'
        super().__init__(info)
        self.title = title
        self.matches = matches


class ContinuationLimitError(QueryError):
    """The continuation loop hit its configured safety cap."""

    def __init__(self, limit: int):
        super().__init__(f"Gave up after {limit} continuation requests")
        self.limit = limit


class ParseError(ApiResponseError):
    pass


class EditError(ApiResponseError):
    pass


class LoginError(ApiResponseError):
    pass


class CreateAccountError(ApiResponseError):
    pass


class WatchError(ApiResponseError):
    pass


class ProtectError(ApiResponseError):
    pass
