"""Scalar text adapters for leaf types that serialize as a single string."""

from __future__ import annotations

import datetime
import decimal
import pathlib
import uuid
import weakref
from collections.abc import Callable
from threading import Lock
from typing import Any

import msgspec

from . import logs
from .utils import types

log = logs.get(__name__)


class ScalarAdapter(msgspec.Struct, frozen=True):
    """Converts between a value and its text form."""

    decode: Callable[[str], Any]
    encode: Callable[[Any], str]


class _Registration(msgspec.Struct, frozen=True):
    decode: Callable[[str], Any] | None
    encode: Callable[[Any], str]

    def bind(self, cls: type) -> ScalarAdapter:
        """Return the adapter for `cls`, constructing `cls` from text by default."""
        return ScalarAdapter(self.decode or cls, self.encode)


def _class_adapter(cls: type) -> ScalarAdapter | None:
    from_text = getattr(cls, '__from_text__', None)
    to_text = getattr(cls, '__to_text__', None)
    if from_text is None or to_text is None:
        return None
    return ScalarAdapter(from_text, to_text)


class AdapterRegistry:
    """Memoized lookup of the scalar adapter of a type.

    Lookup order: an adapter registered for the exact class, then the
    `__from_text__`/`__to_text__` protocol of the class, then an adapter
    registered for a base class. A missing adapter is cached as well.
    """

    def __init__(self, defaults: bool = True) -> None:
        self._lock = Lock()
        self._registered: dict[type, _Registration] = {}
        self._cache: weakref.WeakKeyDictionary[type, ScalarAdapter | None] = (
            weakref.WeakKeyDictionary()
        )
        if defaults:
            register_defaults(self)

    def register(
        self,
        cls: type,
        decode: Callable[[str], Any] | None = None,
        encode: Callable[[Any], str] = str,
    ) -> None:
        """Register an adapter for `cls` and its subclasses.

        Without `decode`, values are decoded by calling the concrete class
        with the text.
        """
        with self._lock:
            self._registered[cls] = _Registration(decode, encode)
            self._cache.clear()
        log.debug('registered scalar adapter: %s', cls.__qualname__)

    def adapter_for(self, cls: Any) -> ScalarAdapter | None:
        """Return the adapter for `cls`, or `None` if it has none."""
        if not types.is_class(cls):
            return None
        try:
            return self._cache[cls]
        except KeyError:
            pass
        adapter = self._find(cls)
        with self._lock:
            self._cache.setdefault(cls, adapter)
        return adapter

    def _find(self, cls: type) -> ScalarAdapter | None:
        registration = self._registered.get(cls)
        if registration is not None:
            return registration.bind(cls)
        adapter = _class_adapter(cls)
        if adapter is not None:
            return adapter
        for base in cls.__mro__[1:]:
            registration = self._registered.get(base)
            if registration is not None:
                return registration.bind(cls)
        return None


def _encode_isoformat(value: datetime.date | datetime.time) -> str:
    return value.isoformat()


def register_defaults(registry: AdapterRegistry) -> None:
    """Register adapters for the standard leaf types."""
    registry.register(datetime.datetime, datetime.datetime.fromisoformat, _encode_isoformat)
    registry.register(datetime.date, datetime.date.fromisoformat, _encode_isoformat)
    registry.register(datetime.time, datetime.time.fromisoformat, _encode_isoformat)
    registry.register(uuid.UUID)
    registry.register(decimal.Decimal)
    registry.register(pathlib.PurePath)
