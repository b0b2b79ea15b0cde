"""Helpers for inspecting declared (annotation) types."""

from __future__ import annotations

import collections.abc
import enum
import types
import typing
from typing import Any, Annotated, Union, get_args, get_origin

NoneType = type(None)

SCALAR_TYPES = (bool, int, float, complex, str, bytes, bytearray, memoryview, NoneType)

# origins whose single type argument is the element type
ARRAY_ORIGINS = (
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
    collections.abc.Set,
    collections.abc.MutableSet,
)

MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def annotations_of(tp: Any) -> tuple[Any, ...]:
    """Return the `Annotated` metadata of *tp*."""
    if get_origin(tp) is Annotated:
        return tuple(tp.__metadata__)
    return ()


def is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def strip_optional(tp: Any) -> Any:
    """Turn `T | None` into `T`; any other type is returned unchanged."""
    tp = strip_annotated(tp)
    if is_union(tp):
        members = [arg for arg in get_args(tp) if arg is not NoneType]
        if len(members) == 1:
            return strip_annotated(members[0])
    return tp


def is_untyped(tp: Any) -> bool:
    return tp is Any or tp is object


def is_typevar(tp: Any) -> bool:
    return isinstance(tp, typing.TypeVar)


def element_type(tp: Any) -> Any | None:
    """Return the element type of a homogeneous array type, else `None`.

    `list[T]`, `set[T]`, `tuple[T, ...]` and the abstract collection types
    are arrays; fixed-size tuples are not.
    """
    tp = strip_optional(tp)
    origin = get_origin(tp)
    args = get_args(tp)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return None
    if origin in ARRAY_ORIGINS:
        return args[0] if args else Any
    if tp in (list, set, frozenset) or tp is tuple:
        return Any
    return None


def value_type(tp: Any) -> Any | None:
    """Return the value type of a mapping type, else `None`."""
    tp = strip_optional(tp)
    origin = get_origin(tp) or tp
    if origin not in MAPPING_ORIGINS:
        return None
    args = get_args(tp)
    return args[1] if len(args) == 2 else Any


def is_class(tp: Any) -> bool:
    """Whether *tp* is a plain class, not a parametrized alias such as `list[int]`."""
    return isinstance(tp, type) and get_origin(tp) is None


def is_structured(cls: type) -> bool:
    """Whether *cls* is a class that the bean engine may treat as a bean.

    Scalars, enumerations, collections and mappings are left to the fallback
    codec.
    """
    if not is_class(cls) or cls is object:
        return False
    if issubclass(cls, SCALAR_TYPES) or issubclass(cls, enum.Enum):
        return False
    if issubclass(cls, (collections.abc.Mapping, collections.abc.Collection)):
        return False
    return True


def qualname(tp: Any) -> str:
    if is_class(tp):
        return tp.__qualname__
    return repr(tp)
