"""General purpose codec for values that are not beans."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Literal, get_args, get_origin

import msgspec

from . import errors, logs
from .utils import format, types

if TYPE_CHECKING:
    from .encoder import Expected
    from .mapper import Mapper

log = logs.get(__name__)

_SET_ORIGINS = (set, frozenset)


class FallbackCodec:
    """Handles scalars, enumerations, collections, mappings and unions.

    Elements of collections and mappings are dispatched back through the
    mapper, so beans nested in them still go through the bean engine.
    """

    def decode(self, ctx: Mapper, doc: Any, expected: Any, path: str = '$') -> Any:
        expected = types.strip_annotated(expected)

        if types.is_untyped(expected) or types.is_typevar(expected):
            return self._decode_untyped(ctx, doc, path)
        if types.is_union(expected):
            return self._decode_union(ctx, doc, expected, path)

        origin = get_origin(expected)
        args = get_args(expected)
        if origin is None:
            origin = expected

        if types.is_structured(origin):
            # parametrized bean type, such as Box[int]
            return ctx.decode_value(doc, origin, path)
        if origin is tuple:
            return self._decode_tuple(ctx, doc, args, path)

        element = types.element_type(expected)
        if element is not None:
            items = self._decode_array(ctx, doc, element, path)
            if origin in _SET_ORIGINS:
                return origin(items)
            return items

        if origin in types.MAPPING_ORIGINS:
            key_type, value_type = args if args else (Any, Any)
            return self._decode_mapping(ctx, doc, key_type, value_type, path)

        return self._convert(doc, expected, path)

    def _decode_untyped(self, ctx: Mapper, doc: Any, path: str) -> Any:
        if isinstance(doc, Mapping):
            return {
                key: ctx.decode_value(value, Any, format.join_key(path, key))
                for key, value in doc.items()
            }
        if isinstance(doc, list):
            return [
                ctx.decode_value(value, Any, format.join_index(path, index))
                for index, value in enumerate(doc)
            ]
        return doc

    def _decode_union(self, ctx: Mapper, doc: Any, expected: Any, path: str) -> Any:
        members = [types.strip_annotated(arg) for arg in get_args(expected)]
        if doc is None and types.NoneType in members:
            return None
        members = [member for member in members if member is not types.NoneType]
        if len(members) == 1:
            return ctx.decode_value(doc, members[0], path)

        if isinstance(doc, Mapping):
            candidates = [m for m in members if _is_object_type(m)]
        elif isinstance(doc, list):
            candidates = [m for m in members if types.element_type(m) is not None]
        else:
            candidates = [m for m in members if not _is_object_type(m)]
            if isinstance(doc, str):
                # text for adapter types such as datetime
                adapted = [m for m in members if ctx.adapters.adapter_for(m) is not None]
                if adapted and str not in members:
                    candidates = adapted + candidates
        if not candidates:
            raise errors.DocumentShapeError(
                f'{format.type_name(doc)} does not match {types.qualname(expected)}', path
            )

        last_exc: errors.MappingError | None = None
        for member in candidates:
            try:
                return ctx.decode_value(doc, member, path)
            except errors.MappingError as exc:
                last_exc = exc
        assert last_exc is not None
        raise last_exc

    def _decode_tuple(self, ctx: Mapper, doc: Any, args: tuple[Any, ...], path: str) -> tuple:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            element = args[0] if args else Any
            return tuple(self._decode_array(ctx, doc, element, path))
        if args == ((),):
            args = ()
        self._check_array(doc, path)
        if len(doc) != len(args):
            raise errors.DocumentShapeError(
                f'expected array of length {len(args)}, got length {len(doc)}', path
            )
        return tuple(
            ctx.decode_value(value, arg, format.join_index(path, index))
            for index, (value, arg) in enumerate(zip(doc, args))
        )

    def _decode_array(self, ctx: Mapper, doc: Any, element: Any, path: str) -> list[Any]:
        self._check_array(doc, path)
        return [
            ctx.decode_value(value, element, format.join_index(path, index))
            for index, value in enumerate(doc)
        ]

    def _decode_mapping(
        self, ctx: Mapper, doc: Any, key_type: Any, value_type: Any, path: str
    ) -> dict[Any, Any]:
        if not isinstance(doc, Mapping):
            raise errors.DocumentShapeError(f'expected object, got {format.type_name(doc)}', path)
        return {
            self._convert(key, key_type, path, strict=False): ctx.decode_value(
                value, value_type, format.join_key(path, key)
            )
            for key, value in doc.items()
        }

    def _check_array(self, doc: Any, path: str) -> None:
        if not isinstance(doc, list):
            raise errors.DocumentShapeError(f'expected array, got {format.type_name(doc)}', path)

    def _convert(self, doc: Any, expected: Any, path: str, strict: bool = True) -> Any:
        if types.is_untyped(expected):
            return doc
        try:
            return msgspec.convert(doc, expected, strict=strict)
        except msgspec.ValidationError as exc:
            raise errors.DocumentShapeError(str(exc), path) from exc
        except TypeError as exc:
            # not a type msgspec knows how to convert to
            raise errors.DocumentShapeError(
                f'cannot decode {types.qualname(expected)}: {exc}', path
            ) from exc

    def encode(self, ctx: Mapper, value: Any, expected: Expected | None, path: str = '$') -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if expected is not None and isinstance(value, (Mapping, Collection)):
            expected = expected.for_members(value)
        if isinstance(value, Mapping):
            return {
                self._encode_key(key, path): ctx.encode_value(
                    item, expected, format.join_key(path, key)
                )
                for key, item in value.items()
            }
        if isinstance(value, Collection) and not isinstance(value, (bytes, bytearray)):
            return [
                ctx.encode_value(item, expected, format.join_index(path, index))
                for index, item in enumerate(value)
            ]
        try:
            return msgspec.to_builtins(value, enc_hook=_public_attributes)
        except (TypeError, ValueError) as exc:
            raise errors.EncodeError(
                f'cannot encode {type(value).__qualname__}: {exc}', path
            ) from exc

    def _encode_key(self, key: Any, path: str) -> Any:
        if isinstance(key, str):
            return key
        encoded = msgspec.to_builtins(key, str_keys=True)
        if not isinstance(encoded, (str, int, float)):
            raise errors.EncodeError(f'unsupported mapping key: {key!r}', path)
        return encoded


def _is_object_type(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    if types.is_untyped(origin) or origin in types.MAPPING_ORIGINS:
        return True
    if origin is Literal:
        return False
    return types.is_structured(origin)


def _public_attributes(obj: Any) -> dict[str, Any]:
    """Encode hook for ignored objects that msgspec does not support."""
    try:
        attrs = vars(obj)
    except TypeError:
        raise TypeError(f'unsupported type: {type(obj).__qualname__}') from None
    return {name: value for name, value in attrs.items() if not name.startswith('_')}
