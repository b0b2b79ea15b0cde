"""Registry helpers that expose named lookups of plugin classes."""

from __future__ import annotations

from threading import Lock
from typing import Generic, TypeVar

from . import errors, logs
from .utils.path import import_class

log = logs.get(__name__)

T = TypeVar('T')


class Registry(Generic[T]):
    """Keeps a registry of subclasses by name."""

    def __init__(self, name: str, base_type: type[T]) -> None:
        self.name = name
        self._base_type = base_type
        self._registry: dict[str, type[T]] = {}
        self._lock = Lock()

    def __getitem__(self, name: str) -> type[T]:
        try:
            return self._registry[name]
        except KeyError:
            if '.' not in name:
                raise
        cls = import_class(name)
        if not issubclass(cls, self._base_type):
            raise TypeError(f'{name} is not a subclass of {self._base_type.__qualname__}')
        return cls

    def __setitem__(self, name: str, cls: type[T]) -> None:
        with self._lock:
            existing = self._registry.get(name)
            if existing is not None and existing is not cls:
                raise errors.RegistrationError(
                    f'{self.name}: {name!r} already registered to {existing.__qualname__}'
                )
            self._registry[name] = cls
        log.debug('registered %s: %s', self.name, name)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def names(self) -> tuple[str, ...]:
        """Return all registered names in insertion order."""
        return tuple(self._registry.keys())
