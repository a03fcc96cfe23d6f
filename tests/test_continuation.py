"""Tests for the continuation engine."""

from unittest.mock import Mock

import pytest

from scripto.continuation import query_continued, slice_results, to_bound, to_revision_id
from scripto.exceptions import ContinuationLimitError, InvalidArgumentError, QueryError
from scripto.responses import decode_response

PARAMS = {"action": "query", "list": "allusers", "aulimit": "max"}
PATH = ("query", "allusers")


def pages_sender(*bodies):
    """A send() callable replaying raw bodies through decode_response."""
    return Mock(side_effect=[decode_response(body) for body in bodies])


def users(*names):
    return [{"userid": i, "name": name} for i, name in enumerate(names)]


class TestQueryContinued:
    """Tests for query_continued."""

    def test_three_pages_accumulate_in_order(self):
        """2 + 2 + 1 items over three requests, in arrival order."""
        send = pages_sender(
            {"query": {"allusers": users("A", "B")}, "continue": {"aufrom": "C", "continue": "-||"}},
            {"query": {"allusers": users("C", "D")}, "continue": {"aufrom": "E", "continue": "-||"}},
            {"query": {"allusers": users("E")}},
        )

        result = query_continued(send, PARAMS, PATH)

        assert [u["name"] for u in result] == ["A", "B", "C", "D", "E"]
        assert send.call_count == 3

    def test_continue_fields_merged_into_next_request(self):
        send = pages_sender(
            {"query": {"allusers": users("A")}, "continue": {"aufrom": "B", "continue": "-||"}},
            {"query": {"allusers": users("B")}},
        )

        query_continued(send, PARAMS, PATH)

        first, second = [call[0][0] for call in send.call_args_list]
        assert "aufrom" not in first
        assert second == {**PARAMS, "aufrom": "B", "continue": "-||"}

    def test_continue_fields_do_not_leak_between_pages(self):
        """Each follow-up carries only the latest continue object."""
        send = pages_sender(
            {"query": {"allusers": []}, "continue": {"rvcontinue": "1", "continue": "||"}},
            {"query": {"allusers": []}, "continue": {"aufrom": "X", "continue": "-||"}},
            {"query": {"allusers": []}},
        )

        query_continued(send, PARAMS, PATH)

        third = send.call_args_list[2][0][0]
        assert "rvcontinue" not in third
        assert third["aufrom"] == "X"

    def test_error_aborts_without_partial_results(self):
        send = pages_sender(
            {"query": {"allusers": users("A")}, "continue": {"aufrom": "B", "continue": "-||"}},
            {"error": {"code": "readapidenied", "info": "You need read permission"}},
            {"query": {"allusers": users("Z")}},
        )

        with pytest.raises(QueryError, match="You need read permission"):
            query_continued(send, PARAMS, PATH)
        assert send.call_count == 2

    def test_missing_result_list_is_empty(self):
        send = pages_sender({"query": {"pages": [{"title": "Nope", "missing": True}]}})
        assert query_continued(send, PARAMS, ("query", "pages", 0, "revisions")) == []

    def test_offset_and_limit_after_draining(self):
        """offset=2, limit=3 over 10 users returns indices 2..4 after all pages."""
        names = [f"User{i}" for i in range(10)]
        send = pages_sender(
            {"query": {"allusers": users(*names[:4])}, "continue": {"aufrom": "User4", "continue": "-||"}},
            {"query": {"allusers": users(*names[4:8])}, "continue": {"aufrom": "User8", "continue": "-||"}},
            {"query": {"allusers": users(*names[8:])}},
        )

        result = query_continued(send, PARAMS, PATH, offset=2, limit=3)

        assert [u["name"] for u in result] == ["User2", "User3", "User4"]
        assert send.call_count == 3

    def test_safety_cap(self):
        endless = {"query": {"allusers": users("A")}, "continue": {"aufrom": "A", "continue": "-||"}}
        send = pages_sender(*[endless] * 5)

        with pytest.raises(ContinuationLimitError):
            query_continued(send, PARAMS, PATH, max_continuations=2)
        assert send.call_count == 3


class TestSliceResults:
    """Tests for slice_results."""

    ITEMS = list(range(10))

    def test_unbounded(self):
        assert slice_results(self.ITEMS) == self.ITEMS

    def test_offset_only(self):
        assert slice_results(self.ITEMS, offset=7) == [7, 8, 9]

    def test_limit_only(self):
        assert slice_results(self.ITEMS, limit=2) == [0, 1]

    def test_negative_offset_counts_from_end(self):
        assert slice_results(self.ITEMS, offset=-2, limit=5) == [8, 9]

    def test_negative_limit_stops_before_end(self):
        assert slice_results(self.ITEMS, offset=5, limit=-2) == [5, 6, 7]

    def test_offset_past_end(self):
        assert slice_results(self.ITEMS, offset=20, limit=3) == []


class TestToBound:
    """Tests for to_bound."""

    def test_accepts_numbers_and_numeric_strings(self):
        assert to_bound(None, "limit") is None
        assert to_bound(5, "limit") == 5
        assert to_bound("5", "limit") == 5
        assert to_bound(2.0, "offset") == 2

    @pytest.mark.parametrize("value", ["five", [], True, {}])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(InvalidArgumentError, match="Limit must be numeric"):
            to_bound(value, "limit")

    @pytest.mark.parametrize("value", ["inf", "-inf", "nan", "1e400", float("inf"), float("nan")])
    def test_rejects_non_finite(self, value):
        with pytest.raises(InvalidArgumentError, match="Limit must be finite"):
            to_bound(value, "limit")


class TestToRevisionId:
    """Tests for to_revision_id."""

    @pytest.mark.parametrize("value", [12, "12", " 12 ", 12.0])
    def test_accepts_whole_numbers(self, value):
        assert to_revision_id(value) == 12

    @pytest.mark.parametrize("value", ["12.7", 12.7, -1, "-1", True, None, "abc", "", float("inf")])
    def test_rejects_everything_else(self, value):
        with pytest.raises(InvalidArgumentError, match="Revision IDs must be whole numbers"):
            to_revision_id(value)
