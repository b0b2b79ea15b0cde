"""Msgpack codec for compact binary documents."""

from __future__ import annotations

from typing import Any

import msgpack

from . import Codec


class MsgpackCodec(Codec):
    """Codec backed by msgpack for compact binary payloads."""

    NAME = 'msgpack'

    def encode(self, doc: Any) -> bytes:
        """Serialize a document to msgpack bytes."""
        return msgpack.packb(doc, use_bin_type=True)

    def decode(self, data: bytes) -> Any:
        """Decode msgpack bytes into a document."""
        return msgpack.unpackb(data, use_list=True, raw=False, strict_map_key=False)
