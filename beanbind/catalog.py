"""Discovery and caching of the serializable properties of bean types."""

from __future__ import annotations

import typing
import weakref
from collections.abc import Callable, Iterable
from threading import Lock
from typing import Any

import msgspec

from . import binding, errors, logs
from .binding import ConstructorBinding
from .utils import types

log = logs.get(__name__)

MARKERS_ATTR = '__bean_markers__'


class PropertyMarker:
    """Marks a property, either as `Annotated` metadata or as a decorator.

    ::

        class Account:
            password: Annotated[str, excluded]

            @property
            @transient
            def balance(self) -> int: ...
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        target = getattr(func, 'fget', None) or func
        markers = getattr(target, MARKERS_ATTR, frozenset())
        setattr(target, MARKERS_ATTR, markers | {self})
        return func

    def __repr__(self) -> str:
        return f'<{self.name}>'


excluded = PropertyMarker('excluded')
"""The property is neither encoded nor decoded."""

transient = PropertyMarker('transient')
"""The property is decoded but never encoded."""


class PropertyDescriptor(msgspec.Struct, frozen=True):
    """A serializable property of a bean type."""

    name: str
    type: Any = Any
    read: Callable[[Any], Any] | None = None
    write: Callable[[Any, Any], None] | None = None
    transient: bool = False

    @classmethod
    def attribute(
        cls, name: str, type: Any = Any, writable: bool = True, transient: bool = False
    ) -> PropertyDescriptor:
        """Describe a plain instance attribute."""
        return cls(
            name,
            type,
            _attr_reader(name),
            _attr_writer(name) if writable else None,
            transient,
        )


def _attr_reader(name: str) -> Callable[[Any], Any]:
    def read(obj: Any) -> Any:
        return getattr(obj, name, None)

    return read


def _attr_writer(name: str) -> Callable[[Any, Any], None]:
    def write(obj: Any, value: Any) -> None:
        setattr(obj, name, value)

    return write


def _markers(obj: Any) -> frozenset[PropertyMarker]:
    return frozenset(getattr(obj, MARKERS_ATTR, ()))


def _is_public(name: str) -> bool:
    return not name.startswith('_')


def introspect(cls: type) -> tuple[PropertyDescriptor, ...]:
    """Discover the properties of `cls` from its annotations and `property` members."""
    if not isinstance(cls, type):
        raise TypeError(f'not a class: {cls!r}')

    props: dict[str, PropertyDescriptor] = {}

    hints = typing.get_type_hints(cls, include_extras=True)
    for name, hint in hints.items():
        if not _is_public(name) or typing.get_origin(hint) is typing.ClassVar:
            continue
        metadata = types.annotations_of(hint)
        if excluded in metadata:
            continue
        props[name] = PropertyDescriptor.attribute(
            name, types.strip_annotated(hint), transient=transient in metadata
        )

    # properties override annotations, subclasses override bases
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if not _is_public(name) or not isinstance(attr, property):
                continue
            props.pop(name, None)
            markers = _markers(attr.fget) | _markers(attr.fset)
            if excluded in markers:
                continue
            hint: Any = Any
            if attr.fget is not None:
                hint = typing.get_type_hints(attr.fget, include_extras=True).get('return', Any)
            props[name] = PropertyDescriptor(
                name,
                types.strip_annotated(hint),
                attr.fget,
                attr.fset,
                transient in markers or transient in types.annotations_of(hint),
            )

    return tuple(sorted(props.values(), key=lambda prop: prop.name))


class _Uncatalogable(msgspec.Struct, frozen=True):
    reason: str


class Catalog:
    """Per-type cache of properties and constructor bindings.

    Entries are computed once on first use and never change afterwards.
    Keys are held weakly, so classes that go away are evicted.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._properties: weakref.WeakKeyDictionary[
            type, tuple[PropertyDescriptor, ...] | _Uncatalogable
        ] = weakref.WeakKeyDictionary()
        self._lookups: weakref.WeakKeyDictionary[type, dict[str, PropertyDescriptor]] = (
            weakref.WeakKeyDictionary()
        )
        self._constructors: weakref.WeakKeyDictionary[type, tuple[ConstructorBinding, ...]] = (
            weakref.WeakKeyDictionary()
        )
        self._registered: weakref.WeakSet[type] = weakref.WeakSet()
        self._explicit_constructors: weakref.WeakSet[type] = weakref.WeakSet()

    def register(
        self,
        cls: type,
        properties: Iterable[PropertyDescriptor],
        constructors: Iterable[ConstructorBinding] | None = None,
    ) -> None:
        """Install an explicit property table for `cls` instead of introspecting it.

        Property order is normalized to name order. If `constructors` is
        given, it replaces the discovered constructor bindings as well.
        """
        props = tuple(sorted(properties, key=lambda prop: prop.name))
        names = [prop.name for prop in props]
        if len(set(names)) != len(names):
            raise errors.RegistrationError(f'{cls.__qualname__}: duplicate property names')
        ranked = None if constructors is None else binding.rank(cls, constructors)

        with self._lock:
            if cls in self._registered:
                raise errors.RegistrationError(f'{cls.__qualname__} is already registered')
            self._registered.add(cls)
            self._properties[cls] = props
            self._lookups.pop(cls, None)
            if ranked is not None:
                self._constructors[cls] = ranked
                self._explicit_constructors.add(cls)
        log.debug('registered properties of %s: %s', cls.__qualname__, names)

    def properties_of(self, cls: type) -> tuple[PropertyDescriptor, ...]:
        """Return the properties of `cls` in name order.

        Raises `UncatalogableType` if `cls` cannot be introspected.
        """
        try:
            entry = self._properties[cls]
        except KeyError:
            entry = self._compute(cls)
        except TypeError:
            # not weakly referenceable, so not a class
            raise errors.UncatalogableType(f'cannot introspect {cls!r}') from None
        if isinstance(entry, _Uncatalogable):
            raise errors.UncatalogableType(
                f'cannot introspect {types.qualname(cls)}: {entry.reason}'
            )
        return entry

    def lookup(self, cls: type) -> dict[str, PropertyDescriptor]:
        """Return the properties of `cls` keyed by name."""
        try:
            return self._lookups[cls]
        except KeyError:
            pass
        lookup = {prop.name: prop for prop in self.properties_of(cls)}
        with self._lock:
            return self._lookups.setdefault(cls, lookup)

    def constructors_of(self, cls: type) -> tuple[ConstructorBinding, ...]:
        """Return the constructor bindings of `cls`, highest arity first."""
        try:
            return self._constructors[cls]
        except KeyError:
            pass
        ranked = binding.bindings_of(cls)
        with self._lock:
            return self._constructors.setdefault(cls, ranked)

    def clear(self) -> None:
        """Evict every computed entry. Explicit registrations are kept."""
        with self._lock:
            for cls in list(self._properties.keys()):
                if cls not in self._registered:
                    del self._properties[cls]
            self._lookups.clear()
            for cls in list(self._constructors.keys()):
                if cls not in self._explicit_constructors:
                    del self._constructors[cls]

    def _compute(self, cls: type) -> tuple[PropertyDescriptor, ...] | _Uncatalogable:
        entry: tuple[PropertyDescriptor, ...] | _Uncatalogable
        try:
            entry = introspect(cls)
        except Exception as exc:
            log.debug('cannot introspect %s: %s', types.qualname(cls), exc)
            entry = _Uncatalogable(str(exc) or exc.__class__.__name__)
        else:
            log.debug('properties of %s: %s', cls.__qualname__, [prop.name for prop in entry])
        with self._lock:
            return self._properties.setdefault(cls, entry)


CATALOG = Catalog()
"""The process-wide catalog shared by mappers that are not given their own."""
