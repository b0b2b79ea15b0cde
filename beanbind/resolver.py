"""Mapping between runtime types and the type tags embedded in documents."""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from . import errors, logs
from .utils.path import import_class

log = logs.get(__name__)

TypeResolverFunc = Callable[[str], 'type | None']


def canonical_name(cls: type) -> str:
    """Return the stable dotted name of `cls`."""
    return f'{cls.__module__}.{cls.__qualname__}'


def import_resolver(tag: str) -> type | None:
    """Default resolver: import the class named by a canonical name."""
    try:
        return import_class(tag)
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        log.debug('cannot import %r: %s', tag, exc)
        return None


class TypeResolver:
    """Resolves type tags through an alias table and a pluggable function."""

    def __init__(self, resolver: TypeResolverFunc | None = None) -> None:
        self._lock = Lock()
        self._aliases: dict[str, type] = {}
        self._tags: dict[type, str] = {}
        self.resolver = resolver

    @property
    def resolver(self) -> TypeResolverFunc:
        return self._resolver

    @resolver.setter
    def resolver(self, resolver: TypeResolverFunc | None) -> None:
        self._resolver = resolver or import_resolver

    def add_alias(self, cls: type, alias: str) -> None:
        """Use `alias` as the tag of `cls`.

        A type may have several aliases; all of them resolve, the last one
        added is used when encoding.
        """
        if not isinstance(cls, type):
            raise errors.RegistrationError(f'not a class: {cls!r}')
        if not isinstance(alias, str) or not alias:
            raise errors.RegistrationError(f'invalid alias for {cls.__qualname__}: {alias!r}')
        with self._lock:
            self._aliases[alias] = cls
            self._tags[cls] = alias

    def aliases(self) -> dict[str, type]:
        with self._lock:
            return dict(self._aliases)

    def tag_for(self, cls: type) -> str:
        """Return the tag that identifies `cls` in a document."""
        try:
            return self._tags[cls]
        except KeyError:
            return canonical_name(cls)

    def type_for(self, tag: str) -> type | None:
        """Return the type named by `tag`, or `None` if it cannot be resolved."""
        try:
            return self._aliases[tag]
        except KeyError:
            pass
        cls = self._resolver(tag)
        if cls is not None and not isinstance(cls, type):
            log.debug('resolver returned a non-class for %r: %r', tag, cls)
            return None
        return cls

    def require(self, tag: str, location: str | None = None) -> type:
        """Like `type_for`, but raise `UnresolvedTypeTag` if there is no type."""
        cls = self.type_for(tag)
        if cls is None:
            raise errors.UnresolvedTypeTag(tag, location)
        return cls
