#!/usr/bin/env python3
"""
Decoded MediaWiki API responses.

Every JSON body is classified once, right after transport, into one of
three shapes:

- Ok: a complete result
- ApiError: a top-level "error" object was returned
- Continuation: a partial result plus the "continue" object to echo back

Field access on the payload goes through get_field() and friends, which
raise DecodeError instead of handing back None when the tree does not
have the expected shape.

Usage:
    from scripto.responses import decode_response, get_list

    result = decode_response(transport.request({"action": "query", ...}))
    raise_for_error(result, QueryError)
    users = get_list(result.payload, "query", "users")
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Type, Union

from scripto.exceptions import ApiResponseError, DecodeError

_MISSING = object()


@dataclass(frozen=True)
class Ok:
    payload: dict


@dataclass(frozen=True)
class ApiError:
    info: str
    code: Optional[str] = None
    payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Continuation:
    payload: dict
    token: dict


ApiResult = Union[Ok, ApiError, Continuation]


def decode_response(data: Any) -> ApiResult:
    """
    Classify a raw JSON body.

    An error object wins over a continue object; a failed page never
    contributes partial results.

    Raises:
        DecodeError: body is not an object, or error/continue are malformed
    """
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")

    if "error" in data:
        error = data["error"]
        if not isinstance(error, dict):
            raise DecodeError('Malformed "error" object in response')
        info = error.get("info")
        if not isinstance(info, str):
            # Some extensions only send a code
            info = str(error.get("code", "Unknown API error"))
        code = error.get("code")
        return ApiError(info=info, code=code if isinstance(code, str) else None, payload=data)

    if "continue" in data:
        token = data["continue"]
        if not isinstance(token, dict):
            raise DecodeError('Malformed "continue" object in response')
        return Continuation(payload=data, token=token)

    return Ok(payload=data)


def raise_for_error(result: ApiResult, error_class: Type[ApiResponseError]) -> dict:
    """Raise error_class for an ApiError result, otherwise return the payload."""
    if isinstance(result, ApiError):
        raise error_class(result.info, result.code)
    return result.payload


def get_field(tree: Any, *path: Union[str, int], expected=None, default=_MISSING) -> Any:
    """
    Walk a JSON tree along path.

    Args:
        tree: Decoded JSON value
        path: Object keys (str) and array indexes (int)
        expected: Type or tuple of types the final value must have
        default: Returned when a key or index is absent; without it a
            missing field raises DecodeError

    Raises:
        DecodeError: a step is absent (and no default) or has the wrong type
    """
    node = tree
    for depth, key in enumerate(path):
        where = "/".join(str(k) for k in path[: depth + 1])
        if isinstance(key, int):
            if not isinstance(node, list):
                raise DecodeError(f"Expected an array before {where}")
            if not -len(node) <= key < len(node):
                if default is not _MISSING:
                    return default
                raise DecodeError(f"Missing field {where}")
            node = node[key]
        else:
            if not isinstance(node, dict):
                raise DecodeError(f"Expected an object before {where}")
            if key not in node:
                if default is not _MISSING:
                    return default
                raise DecodeError(f"Missing field {where}")
            node = node[key]

    # bool is an int subclass; never accept it for a numeric field
    if expected is not None and (
        not isinstance(node, expected)
        or (isinstance(node, bool) and bool not in _as_tuple(expected))
    ):
        where = "/".join(str(k) for k in path)
        raise DecodeError(f"Field {where} has type {type(node).__name__}")
    return node


def _as_tuple(expected) -> tuple:
    return expected if isinstance(expected, tuple) else (expected,)


def get_str(tree: Any, *path: Union[str, int], default=_MISSING) -> str:
    return get_field(tree, *path, expected=str, default=default)


def get_int(tree: Any, *path: Union[str, int], default=_MISSING) -> int:
    return get_field(tree, *path, expected=int, default=default)


def get_dict(tree: Any, *path: Union[str, int], default=_MISSING) -> dict:
    return get_field(tree, *path, expected=dict, default=default)


def get_list(tree: Any, *path: Union[str, int], default=_MISSING) -> list:
    return get_field(tree, *path, expected=list, default=default)
