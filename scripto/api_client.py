#!/usr/bin/env python3
"""
MediaWiki action API client.

Wraps one wiki endpoint and one persisted cookie session:

- Paginated queries drained through the continuation engine
- Multi-title queries chunked and mapped back to caller order
- Token-protected writes (edit, watch, protect) and authentication
- API error objects turned into typed exceptions

Usage:
    from scripto import WikiApiClient, JsonFileSessionStore

    client = WikiApiClient(
        api_url="https://wiki.example.com/w/api.php",
        session_store=JsonFileSessionStore("data/session.json"),
    )
    client.login("Transcriber", "secret")
    page = client.query_page("Transcription:Letter 1")
    if client.user_can(page, "edit"):
        client.edit_page(page.title, "New text")
"""

import logging
from typing import Optional, Type, Union

from scripto.continuation import query_continued, to_bound, to_revision_id
from scripto.exceptions import (
    ApiResponseError,
    CreateAccountError,
    EditError,
    InvalidArgumentError,
    LoginError,
    ParseError,
    ProtectError,
    QueryError,
    WatchError,
)
from scripto.models import Page, Revision
from scripto.responses import ApiError, ApiResult, decode_response, get_dict, get_list, get_str
from scripto.session_store import (
    JsonFileSessionStore,
    MemorySessionStore,
    SessionStore,
    restore_cookies,
    serialize_cookies,
)
from scripto.titles import chunked, resolve_pages, validate_name, validate_names
from scripto.transport import Transport

USER_PROPS = "blockinfo|groups|implicitgroups|rights|editcount|registration|emailable|gender"
ALL_USER_PROPS = "blockinfo|groups|implicitgroups|rights|editcount|registration"
TESTED_ACTIONS = "read|edit|createpage|createtalk|protect|rollback"
ANONYMOUS_USER_INFO = {"id": 0, "name": "", "anon": True}


class WikiApiClient:
    """Client for one MediaWiki API endpoint."""

    def __init__(
        self,
        api_url: str,
        session_store: Optional[SessionStore] = None,
        transport: Optional[Transport] = None,
        wiki_name: str = "Wiki",
        timeout: float = 30.0,
        delay: float = 0.0,
        user_agent: Optional[str] = None,
        max_continuations: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the client, restore the persisted session and fetch the
        site and user information snapshots.

        Args:
            api_url: MediaWiki API endpoint (e.g., https://wiki.example.com/w/api.php)
            session_store: Where authentication cookies persist between runs
                (in-memory if not provided)
            transport: HTTP transport (creates one for api_url if not provided)
            wiki_name: Human-readable wiki name for logging
            timeout: Request timeout in seconds, for the default transport
            delay: Seconds to wait before each request, for the default transport
            user_agent: Custom user agent string, for the default transport
            max_continuations: Optional cap on continuation requests per query
            logger: Logger instance (creates one if not provided)
        """
        self.api_url = api_url
        self.wiki_name = wiki_name
        self.max_continuations = max_continuations
        self.logger = logger or logging.getLogger(f"scripto.{wiki_name}")

        self.transport = transport or Transport(
            api_url,
            timeout=timeout,
            delay=delay,
            user_agent=user_agent,
            logger=self.logger,
        )
        self.session_store = session_store if session_store is not None else MemorySessionStore()

        cookies = self.session_store.load()
        if cookies:
            count = restore_cookies(self.transport.cookies, cookies)
            self.logger.debug(f"Restored {count} session cookies")

        self.site_info = self.query_site_info()
        self.user_info = self.query_user_info()

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> "WikiApiClient":
        """Build a client from a scripto.config.WikiConfig."""
        if config.session_store == "memory":
            store = MemorySessionStore(config.session_name)
        else:
            store = JsonFileSessionStore(config.session_path, config.session_name)
        return cls(
            api_url=config.api_url,
            session_store=store,
            wiki_name=config.wiki_name,
            timeout=config.timeout,
            delay=config.delay,
            user_agent=config.user_agent,
            max_continuations=config.max_continuations,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def request(self, params: dict) -> ApiResult:
        """Send one request and classify the response."""
        return decode_response(self.transport.request(params))

    def _check(self, result: ApiResult, error_class: Type[ApiResponseError], what: str) -> dict:
        if isinstance(result, ApiError):
            self.logger.warning(f"{what} failed: {result.info}")
            raise error_class(result.info, result.code)
        return result.payload

    def _fetch_token(self, token_type: str, error_class: Type[ApiResponseError]) -> str:
        result = self.request({"action": "query", "meta": "tokens", "type": token_type})
        payload = self._check(result, error_class, f"Fetching {token_type} token")
        return get_str(payload, "query", "tokens", f"{token_type}token")

    def _as_page(self, title: Union[str, Page]) -> Page:
        if isinstance(title, Page):
            return title
        if isinstance(title, str):
            return self.query_page(title)
        raise InvalidArgumentError("A title must be a string or a Page")

    # ------------------------------------------------------------------
    # Page state helpers
    # ------------------------------------------------------------------

    def page_is_created(self, title: Union[str, Page]) -> bool:
        """Does the page exist? Accepts a title or a queried Page."""
        return self._as_page(title).exists

    def user_can(self, title: Union[str, Page], action: str) -> bool:
        """
        Can the current user perform action on the page?

        Only the actions in TESTED_ACTIONS are known; anything else is False.
        """
        return self._as_page(title).can(action)

    def user_is_logged_in(self) -> bool:
        return bool(self.user_info.get("id")) if self.user_info else False

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def query_user(self, name: str) -> dict:
        users = self.query_users([validate_name(name, "name")])
        if not users:
            raise QueryError(f'No user information returned for "{name}"')
        return users[0]

    def query_users(self, names: list[str]) -> list[dict]:
        """
        Query information about named users.

        Returns:
            User info dicts, one per name; unknown users carry "missing"
        """
        names = validate_names(names, "name")
        users = []
        for chunk in chunked(names):
            result = self.request({
                "action": "query",
                "list": "users",
                "ususers": chunk,
                "usprop": USER_PROPS,
            })
            payload = self._check(result, QueryError, "User query")
            users.extend(get_list(payload, "query", "users", default=[]))
        return users

    def query_all_users(self, offset=None, limit=None) -> list[dict]:
        """
        List every registered user, then slice locally.

        Args:
            offset: Index of the first user to return (negative counts from the end)
            limit: Maximum number of users to return
        """
        offset = to_bound(offset, "offset")
        limit = to_bound(limit, "limit")
        return query_continued(
            self.request,
            {
                "action": "query",
                "list": "allusers",
                "aulimit": "max",
                "auprop": ALL_USER_PROPS,
            },
            ("query", "allusers"),
            offset=offset,
            limit=limit,
            max_continuations=self.max_continuations,
        )

    # ------------------------------------------------------------------
    # Pages and revisions
    # ------------------------------------------------------------------

    def query_page(self, title: str) -> Page:
        """Query a page, including its latest revision."""
        return self.query_pages([validate_name(title)])[0]

    def query_pages(self, titles: list[str]) -> list[Page]:
        """
        Query pages, including their latest revisions.

        Titles are sent 50 at a time. The result has one Page per title, in
        the order given, whatever order the API answers in.
        """
        return self._query_pages(titles, QueryError)

    def _query_pages(self, titles: list[str], error_class: Type[ApiResponseError]) -> list[Page]:
        titles = validate_names(titles)
        pages = []
        for number, chunk in enumerate(chunked(titles), 1):
            self.logger.debug(f"Page query chunk {number}: {len(chunk)} titles")
            result = self.request({
                "action": "query",
                "prop": "info|revisions",
                "titles": chunk,
                "inprop": "protection|url",
                "rvprop": "content|ids|flags|timestamp|comment|user",
                "rvslots": "main",
                "intestactions": TESTED_ACTIONS,
            })
            payload = self._check(result, error_class, "Page query")
            query = get_dict(payload, "query", default={})
            pages.extend(Page.from_json(page) for page in resolve_pages(query, chunk))
        return pages

    def query_revisions(self, title: str, limit=None, offset=None) -> list[Revision]:
        """
        List a page's revisions, most recent first, then slice locally.

        A page that does not exist has no revisions.
        """
        title = validate_name(title)
        limit = to_bound(limit, "limit")
        offset = to_bound(offset, "offset")
        revisions = query_continued(
            self.request,
            {
                "action": "query",
                "prop": "revisions",
                "titles": title,
                "rvprop": "ids|flags|timestamp|user|size|parsedcomment",
                "rvlimit": "max",
            },
            ("query", "pages", 0, "revisions"),
            offset=offset,
            limit=limit,
            max_continuations=self.max_continuations,
        )
        return [Revision.from_json(revision) for revision in revisions]

    def edit_page(self, title: str, text: str, summary: Optional[str] = None) -> dict:
        """
        Edit or create a page.

        The latest revision's timestamp is sent as basetimestamp so the
        server rejects the write if someone else saved in between.

        Returns:
            The "edit" result; it holds "nochange" when the text was identical
        """
        title = validate_name(title)
        if not isinstance(text, str):
            raise InvalidArgumentError("Page text must be a string")

        token = self._fetch_token("csrf", EditError)
        page = self._query_pages([title], EditError)[0]

        result = self.request({
            "action": "edit",
            "title": title,
            "text": text,
            "summary": summary,
            "token": token,
            "basetimestamp": page.base_timestamp,
        })
        payload = self._check(result, EditError, f'Edit of "{title}"')
        edit = get_dict(payload, "edit")

        status = edit.get("result")
        if status is not None and status != "Success":
            self.logger.warning(f'Edit of "{title}" returned {status}')
            raise EditError(f"Edit failed: {status}")

        if edit.get("nochange"):
            self.logger.info(f'No change to "{title}"')
        else:
            self.logger.info(f'Saved "{title}" (revision {edit.get("newrevid")})')
        return edit

    def parse_page(self, title: str) -> str:
        """Render a page's current wikitext to HTML."""
        if not isinstance(title, str):
            raise InvalidArgumentError("Page title must be a string")
        result = self.request({
            "action": "parse",
            "page": title,
            "prop": "text",
            "disablelimitreport": True,
            "disableeditsection": True,
            "disabletoc": True,
        })
        payload = self._check(result, ParseError, f'Parse of "{title}"')
        return get_str(payload, "parse", "text")

    def compare_revisions(self, from_rev_id, to_rev_id) -> str:
        """Return the HTML diff table body between two revisions."""
        from_rev = to_revision_id(from_rev_id)
        to_rev = to_revision_id(to_rev_id)

        result = self.request({"action": "compare", "fromrev": from_rev, "torev": to_rev})
        payload = self._check(result, ParseError, f"Compare of {from_rev}..{to_rev}")
        return get_str(payload, "compare", "body", default="")

    # ------------------------------------------------------------------
    # Site and user information
    # ------------------------------------------------------------------

    def query_site_info(self) -> dict:
        result = self.request({"action": "query", "meta": "siteinfo"})
        payload = self._check(result, QueryError, "Site info query")
        return get_dict(payload, "query", "general")

    def get_site_info(self) -> dict:
        """Most recently queried site information."""
        return self.site_info

    def query_user_info(self) -> dict:
        result = self.request({"action": "query", "meta": "userinfo"})
        payload = self._check(result, QueryError, "User info query")
        return get_dict(payload, "query", "userinfo")

    def get_user_info(self) -> dict:
        """Most recently queried information about the current user."""
        return self.user_info

    # ------------------------------------------------------------------
    # Accounts and authentication
    # ------------------------------------------------------------------

    def create_account(self, username: str, password: str, retype: str, email: str, realname: str) -> dict:
        """Create an account through the default authentication requests."""
        token = self._fetch_token("createaccount", CreateAccountError)
        result = self.request({
            "action": "createaccount",
            # Required by the API, unused by non-redirecting providers
            "createreturnurl": self.api_url,
            "createtoken": token,
            "username": username,
            "password": password,
            "retype": retype,
            "email": email,
            "realname": realname,
        })
        payload = self._check(result, CreateAccountError, f'Account creation for "{username}"')
        data = get_dict(payload, "createaccount")
        status = get_str(data, "status")
        if status != "PASS":
            message = data.get("message") or status
            self.logger.warning(f'Account creation for "{username}" returned {status}: {message}')
            raise CreateAccountError(message, data.get("messagecode"))

        self.logger.info(f'Created account "{username}"')
        return data

    def login(self, username: str, password: str) -> dict:
        """
        Log in and persist the resulting session cookies.

        The cached user information is refreshed afterwards.
        """
        token = self._fetch_token("login", LoginError)
        result = self.request({
            "action": "clientlogin",
            "loginreturnurl": self.api_url,
            "logintoken": token,
            "username": username,
            "password": password,
        })
        payload = self._check(result, LoginError, f'Login as "{username}"')
        data = get_dict(payload, "clientlogin")
        status = get_str(data, "status")
        if status != "PASS":
            message = data.get("message") or status
            self.logger.warning(f'Login as "{username}" returned {status}: {message}')
            raise LoginError(message, data.get("messagecode"))

        self.session_store.save(serialize_cookies(self.transport.cookies))
        self.user_info = self.query_user_info()
        self.logger.info(f'Logged in to {self.wiki_name} as "{self.user_info.get("name", username)}"')
        return data

    def logout(self) -> None:
        """
        Log out, then drop the cookies locally and in the session store.

        Local state is cleared even when the logout request fails: a failed
        token fetch or logout request is logged, and the user info snapshot
        falls back to an anonymous user if it cannot be refreshed.
        """
        try:
            result = self.request({"action": "query", "meta": "tokens", "type": "csrf"})
            if isinstance(result, ApiError):
                self.logger.warning(f"Fetching csrf token for logout failed: {result.info}")
            else:
                token = get_str(result.payload, "query", "tokens", "csrftoken")
                result = self.request({"action": "logout", "token": token})
                if isinstance(result, ApiError):
                    self.logger.warning(f"Logout request failed: {result.info}")
        finally:
            self.transport.cookies.clear()
            self.session_store.clear()
            self.user_info = dict(ANONYMOUS_USER_INFO)

        self.user_info = self.query_user_info()
        self.logger.info(f"Logged out of {self.wiki_name}")

    # ------------------------------------------------------------------
    # Watchlist and protection
    # ------------------------------------------------------------------

    def watch_page(self, title: str) -> dict:
        return self.watch_pages([validate_name(title)])[0]

    def unwatch_page(self, title: str) -> dict:
        return self.unwatch_pages([validate_name(title)])[0]

    def watch_pages(self, titles: list[str], unwatch: bool = False) -> list[dict]:
        """
        Add pages to (or remove them from) the current user's watchlist.

        Returns:
            One result dict per title as reported by the API
        """
        titles = validate_names(titles)
        if not titles:
            return []

        what = "Unwatch" if unwatch else "Watch"
        token = self._fetch_token("watch", WatchError)
        results = []
        for chunk in chunked(titles):
            result = self.request({
                "action": "watch",
                "titles": chunk,
                "unwatch": unwatch,
                "token": token,
            })
            payload = self._check(result, WatchError, what)
            results.extend(get_list(payload, "watch", default=[]))
        self.logger.info(f"{what}ed {len(titles)} pages")
        return results

    def unwatch_pages(self, titles: list[str]) -> list[dict]:
        return self.watch_pages(titles, unwatch=True)

    def protect_page(
        self,
        title: str,
        protection_type: str,
        level: str,
        expiry: str = "infinite",
        reason: Optional[str] = None,
    ) -> dict:
        """
        Protect a page.

        Args:
            title: Page title
            protection_type: "edit" for existing pages, "create" for missing ones
            level: Required group, e.g. "sysop"; "all" lifts the protection
            expiry: Expiry timestamp, or "infinite"
            reason: Log reason
        """
        return self.protect_pages([validate_name(title)], protection_type, level, expiry, reason)[0]

    def protect_pages(
        self,
        titles: list[str],
        protection_type: str,
        level: str,
        expiry: str = "infinite",
        reason: Optional[str] = None,
    ) -> list[dict]:
        """Protect several pages with one token; the API takes one title per request."""
        titles = validate_names(titles)
        for value in (protection_type, level, expiry):
            if not isinstance(value, str) or "|" in value or "=" in value:
                raise InvalidArgumentError("Protection type, level and expiry must be plain strings")
        if not titles:
            return []

        token = self._fetch_token("csrf", ProtectError)
        results = []
        for title in titles:
            result = self.request({
                "action": "protect",
                "title": title,
                "protections": f"{protection_type}={level}",
                "expiry": expiry,
                "reason": reason,
                "token": token,
            })
            payload = self._check(result, ProtectError, f'Protect of "{title}"')
            results.append(get_dict(payload, "protect"))
            self.logger.info(f'Protected "{title}": {protection_type}={level} until {expiry}')
        return results
