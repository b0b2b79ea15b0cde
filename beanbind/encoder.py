"""Encoding of bean instances into document objects."""

from __future__ import annotations

import collections.abc
import enum
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import msgspec

from . import errors, logs
from .adapters import AdapterRegistry
from .catalog import Catalog
from .decoder import TAG_KEY
from .resolver import TypeResolver
from .utils import format, types

if TYPE_CHECKING:
    from .mapper import Mapper

log = logs.get(__name__)

IGNORE_ATTR = '__bean_ignore__'

_FALLBACK_TYPES = (
    types.SCALAR_TYPES,
    enum.Enum,
    collections.abc.Mapping,
    collections.abc.Collection,
)


class _Nothing:
    def __repr__(self) -> str:
        return 'NOTHING'

    def __bool__(self) -> bool:
        return False


NOTHING: Any = _Nothing()
"""Returned for values that have neither a scalar adapter nor properties."""


class Expected(msgspec.Struct, frozen=True):
    """The type a container declared for the value being encoded.

    `values` holds the values the declaration applies to, compared by
    identity. `None` applies to any value.
    """

    type: Any
    values: tuple[Any, ...] | None = None

    @classmethod
    def for_property(cls, declared: Any, value: Any) -> Expected:
        """Context for the value of a property declared as `declared`.

        The elements of an array-typed property are each expected to be of
        the element type, the values of a mapping-typed property of the
        value type.
        """
        declared = types.strip_optional(declared)
        element = types.element_type(declared)
        if element is not None and isinstance(value, Iterable) and not isinstance(value, str):
            return cls(types.strip_optional(element), tuple(value))
        element = types.value_type(declared)
        if element is not None and isinstance(value, Mapping):
            return cls(types.strip_optional(element), tuple(value.values()))
        return cls(declared, (value,))

    def applies_to(self, value: Any) -> bool:
        return self.values is None or any(item is value for item in self.values)

    def for_members(self, container: Any) -> Expected:
        """Context for the members of `container`.

        A container that is itself one of the expected values, such as an
        inner list of `list[list[T]]`, gets a context derived from the
        expected type. Any other container passes this context through.
        """
        if not self.applies_to(container):
            return self
        return Expected.for_property(self.type, container)


def ignore(cls: type) -> type:
    """Class decorator that leaves instances of `cls` to the fallback codec.

    Subclasses are not affected.
    """
    setattr(cls, IGNORE_ATTR, cls)
    return cls


def is_ignored(cls: type) -> bool:
    return vars(cls).get(IGNORE_ATTR) is cls


class BeanEncoder:
    """Turns bean instances into document objects.

    Properties are written in catalog order. The type tag is written as the
    first key only when the runtime type differs from the type the enclosing
    container declared for the value.
    """

    def __init__(
        self,
        catalog: Catalog,
        adapters: AdapterRegistry,
        resolver: TypeResolver,
        omit_tag: bool = False,
        ignored: Iterable[type] = (),
    ) -> None:
        self.catalog = catalog
        self.adapters = adapters
        self.resolver = resolver
        self.omit_tag = omit_tag
        self.ignored: set[type] = set(ignored)

    def handles(self, value: Any) -> bool:
        """Whether `value` is encoded as a bean."""
        if value is None or isinstance(value, _FALLBACK_TYPES):
            return False
        cls = type(value)
        return cls not in self.ignored and not is_ignored(cls)

    def encode(self, ctx: Mapper, value: Any, expected: Expected | None, path: str = '$') -> Any:
        cls = type(value)

        adapter = self.adapters.adapter_for(cls)
        if adapter is not None:
            return adapter.encode(value)

        try:
            props = self.catalog.properties_of(cls)
        except errors.UncatalogableType as exc:
            raise errors.UncatalogableType(exc.msg, path) from exc
        if not props:
            log.debug('%s: %s has no properties, nothing to encode', path, cls.__qualname__)
            return NOTHING

        doc: dict[str, Any] = {}
        if self._needs_tag(value, expected):
            doc[TAG_KEY] = self.resolver.tag_for(cls)

        for prop in props:
            if prop.transient or prop.read is None:
                continue
            prop_path = f'{path}.{prop.name}'
            try:
                prop_value = prop.read(value)
            except Exception as exc:
                raise errors.PropertyReadError(
                    f'cannot read property {prop.name!r}: {format.format_exc(exc)}', prop_path
                ) from exc
            encoded = ctx.encode_value(
                prop_value, Expected.for_property(prop.type, prop_value), prop_path
            )
            if encoded is not NOTHING:
                doc[prop.name] = encoded

        return doc

    def _needs_tag(self, value: Any, expected: Expected | None) -> bool:
        if self.omit_tag or expected is None or not expected.applies_to(value):
            return False
        return type(value) is not expected.type
