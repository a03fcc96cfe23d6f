"""Tests for response decoding and JSON field access."""

import pytest

from scripto.exceptions import DecodeError, QueryError
from scripto.responses import (
    ApiError,
    Continuation,
    Ok,
    decode_response,
    get_field,
    get_int,
    get_list,
    get_str,
    raise_for_error,
)


class TestDecodeResponse:
    """Tests for decode_response."""

    def test_plain_result_is_ok(self):
        result = decode_response({"query": {"users": []}})
        assert isinstance(result, Ok)
        assert result.payload == {"query": {"users": []}}

    def test_error_object(self):
        result = decode_response({"error": {"code": "badtoken", "info": "Invalid CSRF token."}})
        assert isinstance(result, ApiError)
        assert result.info == "Invalid CSRF token."
        assert result.code == "badtoken"

    def test_continue_object(self):
        data = {"continue": {"aufrom": "Bob", "continue": "-||"}, "query": {"allusers": []}}
        result = decode_response(data)
        assert isinstance(result, Continuation)
        assert result.token == {"aufrom": "Bob", "continue": "-||"}

    def test_error_wins_over_continue(self):
        """A page carrying an error is never treated as partial results."""
        result = decode_response({"error": {"info": "Boom"}, "continue": {"x": "1"}})
        assert isinstance(result, ApiError)

    def test_non_object_body(self):
        with pytest.raises(DecodeError):
            decode_response(["not", "an", "object"])

    def test_malformed_continue(self):
        with pytest.raises(DecodeError):
            decode_response({"continue": "yes"})


class TestRaiseForError:
    """Tests for raise_for_error."""

    def test_raises_given_class(self):
        with pytest.raises(QueryError, match="No such user"):
            raise_for_error(ApiError(info="No such user", code="nosuchuser"), QueryError)

    def test_returns_payload(self):
        assert raise_for_error(Ok(payload={"a": 1}), QueryError) == {"a": 1}


class TestGetField:
    """Tests for the JSON accessors."""

    TREE = {"query": {"pages": [{"title": "Main Page", "pageid": 1, "missing": False}]}}

    def test_walks_objects_and_arrays(self):
        assert get_str(self.TREE, "query", "pages", 0, "title") == "Main Page"
        assert get_int(self.TREE, "query", "pages", 0, "pageid") == 1

    def test_missing_field_raises(self):
        with pytest.raises(DecodeError, match="query/pages/0/revisions"):
            get_list(self.TREE, "query", "pages", 0, "revisions")

    def test_missing_field_with_default(self):
        assert get_list(self.TREE, "query", "pages", 0, "revisions", default=[]) == []
        assert get_list(self.TREE, "query", "pages", 3, "revisions", default=[]) == []

    def test_wrong_type_raises(self):
        with pytest.raises(DecodeError):
            get_str(self.TREE, "query", "pages", 0, "pageid")

    def test_bool_is_not_an_int(self):
        with pytest.raises(DecodeError):
            get_int(self.TREE, "query", "pages", 0, "missing")

    def test_indexing_into_object_raises(self):
        with pytest.raises(DecodeError):
            get_field(self.TREE, "query", 0)
