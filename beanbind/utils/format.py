from __future__ import annotations

import traceback
from typing import Any


def format_exc(exc: BaseException) -> str:
    return traceback.format_exception_only(exc.__class__, exc)[0].strip()


def elide(value: str, width: int = 100) -> str:
    return value if len(value) <= width else f'{value[: width - 3]}...'


def type_name(value: Any) -> str:
    """Name of the document kind of *value*, for error messages."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, dict):
        return 'object'
    if isinstance(value, list):
        return 'array'
    return type(value).__qualname__


def join_key(path: str, key: Any) -> str:
    return f'{path}.{key}'


def join_index(path: str, index: int) -> str:
    return f'{path}[{index}]'
