"""JSON codec backed by msgspec."""

from __future__ import annotations

from typing import Any

from msgspec import json

from . import Codec


class JsonCodec(Codec):
    """Codec that serializes documents using JSON."""

    NAME = 'json'

    def __init__(self, indent: int = 0) -> None:
        self.indent = indent

    def encode(self, doc: Any) -> bytes:
        """Encode a document to JSON bytes."""
        data = json.encode(doc)
        if self.indent:
            data = json.format(data, indent=self.indent)
        return data

    def decode(self, data: bytes) -> Any:
        """Decode JSON bytes into a document, keeping key order."""
        return json.decode(data)
