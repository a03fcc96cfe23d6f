#!/usr/bin/env python3
"""
Continuation engine for paginated MediaWiki queries.

The API hands back partial results together with a "continue" object.
query_continued() keeps echoing that object into the next request until
the API stops sending it, collecting one named result list across every
page in arrival order.

The API has no conventional offset/limit cursor, so bounded calls drain
the whole result set first and slice locally.
"""

import logging
import math
from typing import Callable, Optional, Union

from scripto.exceptions import ContinuationLimitError, InvalidArgumentError, QueryError
from scripto.responses import ApiError, ApiResult, Continuation, get_list, raise_for_error

logger = logging.getLogger(__name__)

ResultPath = tuple[Union[str, int], ...]


def to_bound(value, name: str) -> Optional[int]:
    """
    Validate an optional numeric offset or limit.

    Accepts ints, finite floats and numeric strings; None means unbounded.

    Raises:
        InvalidArgumentError: value is not a finite number
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidArgumentError(f"{name.capitalize()} must be numeric") from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"{name.capitalize()} must be numeric")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidArgumentError(f"{name.capitalize()} must be finite")
    return int(value)


def to_revision_id(value) -> int:
    """
    Validate a revision ID: an int or a string of digits, never truncated.

    Raises:
        InvalidArgumentError: value is not a whole non-negative number
    """
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    raise InvalidArgumentError("Revision IDs must be whole numbers")


def slice_results(items: list, offset: Optional[int] = None, limit: Optional[int] = None) -> list:
    """
    Array-slice semantics: a negative offset counts from the end, a negative
    limit stops that many items before the end.
    """
    size = len(items)
    start = offset or 0
    if start < 0:
        start = max(size + start, 0)

    if limit is None:
        end = size
    elif limit >= 0:
        end = start + limit
    else:
        end = size + limit

    return items[start:end] if end > start else []


def query_continued(
    send: Callable[[dict], ApiResult],
    params: dict,
    result_path: ResultPath,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
    max_continuations: Optional[int] = None,
    error_class=QueryError,
) -> list:
    """
    Run a paginated query to completion.

    Args:
        send: Issues one request and returns the decoded result
        params: Fixed request parameters
        result_path: Location of the result list inside each response; a
            missing list counts as an empty page
        offset: Local slice start, applied after the loop
        limit: Local slice length, applied after the loop
        max_continuations: Optional cap on follow-up requests; None follows
            the API until it stops
        error_class: Raised when a page carries an error object

    Returns:
        Accumulated (and sliced) result list
    """
    items = []
    request = dict(params)
    pages = 0

    while True:
        result = send(request)
        if isinstance(result, ApiError):
            logger.warning(f"{params.get('action')} query failed on page {pages + 1}: {result.info}")
        # An errored page never contributes to the accumulator
        payload = raise_for_error(result, error_class)
        pages += 1

        batch = get_list(payload, *result_path, default=[])
        items.extend(batch)
        logger.debug(f"Page {pages} of {params.get('action')} query: {len(batch)} items, {len(items)} total")

        if not isinstance(result, Continuation):
            break
        if max_continuations is not None and pages > max_continuations:
            raise ContinuationLimitError(max_continuations)

        request = dict(params)
        request.update(result.token)

    return slice_results(items, offset, limit)
