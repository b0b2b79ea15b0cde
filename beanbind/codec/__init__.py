"""Byte codecs that turn documents into payloads and back."""

from __future__ import annotations

import abc
from typing import Any

from .. import errors, utils
from ..registry import Registry


def create(name: str | Codec, **kwargs: Any) -> Codec:
    """Return a codec by name or pass through existing instances.

    Names that are not registered are imported as `module.Class`.
    """
    if isinstance(name, Codec):
        return name
    try:
        cls = REGISTRY[name]
    except KeyError:
        raise errors.RegistrationError(f'unknown codec: {name!r}') from None
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        raise errors.RegistrationError(f'cannot load codec {name!r}: {exc}') from exc
    return cls(**kwargs)


class Codec(abc.ABC):
    """Base class for codecs that know how to pack documents.

    A document is a tree of dicts, lists and scalars. Codecs must keep the
    key order of dicts in both directions, since the type tag is only
    recognized as the first key of an object.
    """

    NAME: str

    def __init_subclass__(cls) -> None:
        REGISTRY[cls.NAME] = cls

    @abc.abstractmethod
    def encode(self, doc: Any) -> bytes:
        """Serialize `doc` into bytes."""
        raise NotImplementedError('abstract')

    @abc.abstractmethod
    def decode(self, data: bytes) -> Any:
        """Deserialize bytes into a document."""
        raise NotImplementedError('abstract')

    def _encode(self, doc: Any) -> bytes:
        """Wrapper that provides encoding error context. Used internally."""
        try:
            return self.encode(doc)
        except Exception as exc:
            raise errors.EncodeError(f'{exc}: doc={utils.format.elide(repr(doc))}') from exc

    def _decode(self, data: bytes) -> Any:
        """Wrapper that provides decoding error context. Used internally."""
        try:
            return self.decode(data)
        except Exception as exc:
            raise errors.DecodeError(f'{exc}: data={utils.format.elide(repr(data))}') from exc


REGISTRY = Registry(__name__, Codec)

from . import json, msgpack  # noqa: E402,F401
