"""Host that wires the bean engine, the fallback codec and a byte codec."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from . import logs
from .adapters import AdapterRegistry
from .catalog import CATALOG, Catalog
from .codec import Codec
from .codec import create as create_codec
from .decoder import BeanDecoder
from .encoder import NOTHING, BeanEncoder, Expected
from .fallback import FallbackCodec
from .resolver import TypeResolver, TypeResolverFunc

DEFAULT_CODEC = 'json'

log = logs.get(__name__)


class Mapper:
    """Maps between typed object graphs and documents.

    Values whose type is a bean (any class that is not a scalar, enumeration,
    collection or mapping) go through the bean engine, everything else
    through the fallback codec. The codec turns documents into bytes.
    """

    def __init__(
        self,
        codec: str | Codec | None = None,
        *,
        skip_unknown: bool = False,
        omit_tag: bool = False,
        ignored: Iterable[type] = (),
        aliases: Mapping[type, str] | None = None,
        resolver: TypeResolverFunc | None = None,
        expected: Any = None,
        catalog: Catalog | None = None,
        adapters: AdapterRegistry | None = None,
    ) -> None:
        self.codec = codec or DEFAULT_CODEC
        self.catalog = catalog or CATALOG
        self.adapters = adapters or AdapterRegistry()
        self.types = TypeResolver(resolver)
        for cls, alias in (aliases or {}).items():
            self.types.add_alias(cls, alias)

        self.fallback = FallbackCodec()
        self.decoder = BeanDecoder(self.catalog, self.adapters, self.types, skip_unknown)
        self.encoder = BeanEncoder(self.catalog, self.adapters, self.types, omit_tag, ignored)
        # declared type of top-level values, seeds the tag decision
        self.expected = expected

    @property
    def codec(self) -> Codec:
        return self._codec

    @codec.setter
    def codec(self, codec: str | Codec) -> None:
        self._codec = create_codec(codec)
        log.debug('codec: %s', self._codec.NAME)

    @property
    def resolver(self) -> TypeResolverFunc:
        return self.types.resolver

    @resolver.setter
    def resolver(self, resolver: TypeResolverFunc | None) -> None:
        self.types.resolver = resolver

    @property
    def skip_unknown(self) -> bool:
        return self.decoder.skip_unknown

    @skip_unknown.setter
    def skip_unknown(self, skip: bool) -> None:
        self.decoder.skip_unknown = skip

    @property
    def omit_tag(self) -> bool:
        return self.encoder.omit_tag

    @omit_tag.setter
    def omit_tag(self, omit: bool) -> None:
        self.encoder.omit_tag = omit

    def add_alias(self, cls: type, alias: str) -> None:
        self.types.add_alias(cls, alias)

    def add_ignored(self, *types: type) -> None:
        """Encode instances of `types` with the fallback codec."""
        self.encoder.ignored.update(types)

    def to_builtins(self, value: Any, expected: Any = None) -> Any:
        """Convert `value` into a document."""
        if expected is None:
            expected = self.expected
        context = None if expected is None else Expected.for_property(expected, value)
        doc = self.encode_value(value, context, '$')
        return None if doc is NOTHING else doc

    def from_builtins(self, doc: Any, type: Any = Any) -> Any:
        """Convert a document into a value of `type`."""
        return self.decode_value(doc, type, '$')

    def encode(self, value: Any, expected: Any = None) -> bytes:
        """Convert `value` into a document and pack it with the codec."""
        return self._codec._encode(self.to_builtins(value, expected))

    def decode(self, data: bytes, type: Any = Any) -> Any:
        """Unpack a document with the codec and convert it into a value of `type`."""
        return self.from_builtins(self._codec._decode(data), type)

    def encode_value(self, value: Any, expected: Expected | None, path: str) -> Any:
        """Encode a nested value. Used by the engine and the fallback codec."""
        if self.encoder.handles(value):
            return self.encoder.encode(self, value, expected, path)
        doc = self.fallback.encode(self, value, expected, path)
        if isinstance(doc, list):
            return [None if item is NOTHING else item for item in doc]
        if isinstance(doc, dict):
            return {key: item for key, item in doc.items() if item is not NOTHING}
        return doc

    def decode_value(self, doc: Any, expected: Any, path: str) -> Any:
        """Decode a nested value. Used by the engine and the fallback codec.

        `null` decodes to `None` whatever the declared type, mirroring what
        the encoder writes for unset and `None` properties.
        """
        if doc is None:
            return None
        if self.decoder.handles(expected, doc):
            return self.decoder.decode(self, doc, expected, path)
        return self.fallback.decode(self, doc, expected, path)
