"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path for all tests
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from scripto.api_client import WikiApiClient
from scripto.session_store import MemorySessionStore
from scripto.transport import Transport

API_URL = "https://wiki.example.com/w/api.php"

SITE_INFO = {
    "query": {
        "general": {
            "sitename": "Test Wiki",
            "generator": "MediaWiki 1.39.0",
            "mainpage": "Main Page",
        }
    }
}

ANON_USER_INFO = {"query": {"userinfo": {"id": 0, "name": "127.0.0.1", "anon": True}}}

LOGGED_IN_USER_INFO = {"query": {"userinfo": {"id": 42, "name": "Transcriber"}}}


def mock_response(data, status_code=200, reason="OK"):
    """Fake requests.Response carrying a JSON body."""
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = data
    return response


@pytest.fixture
def temp_log_dir(tmp_path):
    """Provide a temporary directory for log files."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir


@pytest.fixture
def make_client():
    """
    Build a WikiApiClient whose HTTP session replays canned JSON bodies.

    The site info and anonymous user info responses consumed by the
    constructor are queued automatically; pass the bodies for the calls
    under test. A Mock passed in place of a body is used as-is.
    """
    def factory(*bodies, store=None, user_info=ANON_USER_INFO, **kwargs):
        transport = Transport(API_URL)
        queued = [mock_response(SITE_INFO), mock_response(user_info)]
        queued += [b if isinstance(b, Mock) else mock_response(b) for b in bodies]
        transport.session.post = Mock(side_effect=queued)
        return WikiApiClient(
            api_url=API_URL,
            session_store=store if store is not None else MemorySessionStore(),
            transport=transport,
            **kwargs,
        )
    return factory


@pytest.fixture
def sent_params():
    """Return the form data of every request a client sent after construction."""
    def collect(client, skip=2):
        calls = client.transport.session.post.call_args_list[skip:]
        return [call[1]["data"] for call in calls]
    return collect


def page_json(title, pageid=None, timestamp=None, actions=None, content="Text"):
    """A formatversion=2 page object as returned by prop=info|revisions."""
    page = {"ns": 0, "title": title, "actions": actions or {"read": True, "edit": True, "createpage": True}}
    if pageid is None:
        page["missing"] = True
        return page
    page["pageid"] = pageid
    page["lastrevid"] = pageid * 10
    page["protection"] = []
    page["revisions"] = [{
        "revid": pageid * 10,
        "parentid": 0,
        "minor": False,
        "user": "Editor",
        "timestamp": timestamp or "2024-01-01T00:00:00Z",
        "comment": "",
        "slots": {"main": {"contentmodel": "wikitext", "content": content}},
    }]
    return page


@pytest.fixture
def make_page():
    return page_json
