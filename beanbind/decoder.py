"""Decoding of document objects into bean instances."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from . import errors, logs
from .adapters import AdapterRegistry, ScalarAdapter
from .catalog import Catalog
from .resolver import TypeResolver
from .utils import format, types

if TYPE_CHECKING:
    from .mapper import Mapper

log = logs.get(__name__)

TAG_KEY = '@class'


def first_key(doc: Mapping[str, Any]) -> str | None:
    return next(iter(doc), None)


def is_tagged(doc: Any) -> bool:
    """Whether `doc` is an object that starts with a type tag."""
    return isinstance(doc, Mapping) and first_key(doc) == TAG_KEY


class BeanDecoder:
    """Turns document objects into instances of an expected type.

    The expected type may be overridden by a type tag in the first key of
    the object, as long as the tagged type is a subclass of it. Keys are
    decoded at the declared type of the matching property and bound through
    the best matching constructor, then through property setters.
    """

    def __init__(
        self,
        catalog: Catalog,
        adapters: AdapterRegistry,
        resolver: TypeResolver,
        skip_unknown: bool = False,
    ) -> None:
        self.catalog = catalog
        self.adapters = adapters
        self.resolver = resolver
        self.skip_unknown = skip_unknown

    def handles(self, expected: Any, doc: Any) -> bool:
        """Whether a value of type `expected` is decoded as a bean."""
        if types.is_untyped(expected):
            return is_tagged(doc)
        return types.is_structured(expected)

    def decode(self, ctx: Mapper, doc: Any, expected: Any, path: str = '$') -> Any:
        adapter = self.adapters.adapter_for(expected)
        if adapter is not None and isinstance(doc, str):
            return self._adapt(adapter, doc, expected, path)

        if not isinstance(doc, Mapping):
            raise errors.DocumentShapeError(
                f'expected object for {types.qualname(expected)}, got {format.type_name(doc)}',
                path,
            )

        cls = expected
        tagged = first_key(doc) == TAG_KEY
        if tagged:
            cls = self._resolve(doc[TAG_KEY], expected, path)

        if types.is_untyped(cls):
            # tag did not resolve, nothing to bind to
            return ctx.fallback.decode(ctx, doc, Any, path)

        try:
            props = self.catalog.lookup(cls)
        except errors.UncatalogableType as exc:
            raise errors.UncatalogableType(exc.msg, path) from exc
        adapter = self.adapters.adapter_for(cls)

        values: dict[str, Any] = {}
        items = iter(doc.items())
        if tagged:
            next(items)
        for key, raw in items:
            prop = props.get(key)
            value = ctx.decode_value(raw, Any if prop is None else prop.type, f'{path}.{key}')
            if adapter is not None and isinstance(value, str):
                value = self._adapt(adapter, value, cls, f'{path}.{key}')
            values[key] = value

        obj = self._construct(cls, values, path)

        for key, value in values.items():
            prop = props.get(key)
            if prop is None:
                if self.skip_unknown:
                    log.debug('%s: skipping unknown key %r', path, key)
                    continue
                raise errors.UnknownProperty(cls, key, path)
            self._write(obj, prop.name, prop.write, value, path)

        return obj

    def _resolve(self, tag: Any, expected: Any, path: str) -> Any:
        """Return the type named by `tag` if it is usable in place of `expected`."""
        if not isinstance(tag, str):
            raise errors.DocumentShapeError(
                f'expected string for {TAG_KEY}, got {format.type_name(tag)}', path
            )
        try:
            cls = self.resolver.require(tag, path)
        except errors.UnresolvedTypeTag as exc:
            log.debug('%s, using %s', exc, types.qualname(expected))
            return expected
        if not types.is_structured(cls):
            log.debug('%s: %s is not a bean type, ignoring tag', path, cls.__qualname__)
            return expected
        if not types.is_untyped(expected) and not issubclass(cls, expected):
            log.debug(
                '%s: %s is not a subclass of %s, ignoring tag',
                path,
                cls.__qualname__,
                types.qualname(expected),
            )
            return expected
        return cls

    def _adapt(self, adapter: ScalarAdapter, text: str, cls: Any, path: str) -> Any:
        try:
            return adapter.decode(text)
        except Exception as exc:
            raise errors.DocumentShapeError(
                f'invalid text for {types.qualname(cls)}: {format.format_exc(exc)}', path
            ) from exc

    def _construct(self, cls: type, values: dict[str, Any], path: str) -> Any:
        """Create an instance using the first matching constructor binding."""
        try:
            bindings = self.catalog.constructors_of(cls)
        except errors.RegistrationError as exc:
            raise errors.ConstructionError(
                f'cannot create {cls.__qualname__}: {exc}', path
            ) from exc

        for binding in bindings:
            if not binding.matches(values):
                continue
            log.debug('%s: creating %s with %s', path, cls.__qualname__, binding.names)
            try:
                return binding.build(cls, values)
            except Exception as exc:
                raise errors.ConstructionError(
                    f'cannot create {cls.__qualname__}: {format.format_exc(exc)}', path
                ) from exc

        try:
            return cls()
        except Exception as exc:
            raise errors.ConstructionError(
                f'cannot create {cls.__qualname__}: {format.format_exc(exc)}', path
            ) from exc

    def _write(self, obj: Any, name: str, write: Any, value: Any, path: str) -> None:
        if write is None:
            raise errors.PropertyWriteError(
                f'property {name!r} of {type(obj).__qualname__} is read-only', path
            )
        try:
            write(obj, value)
        except Exception as exc:
            raise errors.PropertyWriteError(
                f'cannot write property {name!r}: {format.format_exc(exc)}', path
            ) from exc
