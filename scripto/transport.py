#!/usr/bin/env python3
"""
HTTP transport for the MediaWiki action API.

Sends one form-encoded POST per call to a fixed endpoint and returns the
decoded JSON body. The response format is always JSON, format version 2;
caller-supplied values for those two keys are overridden.

No retries happen here. Timeouts are the only transport-level knob.

Usage:
    from scripto.transport import Transport

    transport = Transport("https://wiki.example.com/w/api.php")
    data = transport.request({"action": "query", "meta": "siteinfo"})
"""

import logging
import time
from typing import Any, Optional

import requests
from requests.cookies import RequestsCookieJar

from scripto.exceptions import DecodeError, RequestError

FIXED_PARAMS = {"format": "json", "formatversion": "2"}

# Request parameters whose values never reach the logs
SECRET_PARAMS = frozenset({
    "password",
    "retype",
    "lgpassword",
    "token",
    "logintoken",
    "createtoken",
})


def encode_params(params: dict) -> dict:
    """
    Convert Python values to MediaWiki form values.

    MediaWiki treats any present boolean parameter as true, so False and
    None drop the key entirely. Lists are joined with the field separator.
    """
    encoded = {}
    for key, value in params.items():
        if value is None or value is False:
            continue
        if value is True:
            encoded[key] = "1"
        elif isinstance(value, (list, tuple)):
            encoded[key] = "|".join(str(v) for v in value)
        else:
            encoded[key] = str(value)
    encoded.update(FIXED_PARAMS)
    return encoded


def mask_params(params: dict) -> dict:
    """Copy of params safe for logging."""
    return {k: ("***" if k in SECRET_PARAMS else v) for k, v in params.items()}


class Transport:
    """Thin wrapper around a requests.Session bound to one API endpoint."""

    def __init__(
        self,
        api_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        delay: float = 0.0,
        user_agent: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            api_url: MediaWiki API endpoint (e.g., https://wiki.example.com/w/api.php)
            session: Existing requests session (creates one if not provided)
            timeout: Request timeout in seconds
            delay: Seconds to wait before each request (0 disables)
            user_agent: Custom user agent string
            logger: Logger instance
        """
        self.api_url = api_url
        self.timeout = timeout
        self.delay = delay
        self.logger = logger or logging.getLogger("scripto.transport")

        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or "Scripto-MediaWiki-Client/1.0",
            "Accept": "application/json",
        })

    @property
    def cookies(self) -> RequestsCookieJar:
        return self.session.cookies

    def request(self, params: dict) -> Any:
        """
        POST params to the endpoint and return the JSON value tree.

        Raises:
            RequestError: connection failure or non-2xx status
            DecodeError: body is not valid JSON
        """
        data = encode_params(params)
        self.logger.debug(f"POST {self.api_url} {mask_params(data)}")

        if self.delay:
            time.sleep(self.delay)

        try:
            response = self.session.post(self.api_url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestError(f"Connection failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise RequestError(
                f"HTTP {response.status_code} {response.reason or ''}".rstrip(),
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Response from {self.api_url} is not JSON: {e}") from e
