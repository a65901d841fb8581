"""Binary JSON family: CBOR, MessagePack and UBJSON.

WHY: These encodings carry the same data model as JSON (objects, arrays,
numbers, strings, booleans, null) in a compact binary form. Treating
them as JSON with a different codec keeps records, enums, variants and
pair-encoded maps byte-for-byte consistent with the JSON backend.

HOW: Each backend subclasses JsonBackend and overrides only identity
(name, extensions, binary) and the codec (parse, render). Every
structural operation is inherited.

RULES:
- parse() accepts bytes only; a str input is a ParseError
- render() returns bytes
- Codec exceptions map to ParseError (decode) or StructureError (encode)
"""

from __future__ import annotations

from typing import Tuple

import cbor2
import msgpack
import ubjson

from serde_hub.backends.base import Data
from serde_hub.backends.json_backend import JsonBackend
from serde_hub.core.errors import ParseError, StructureError
from serde_hub.core.node import Node


class _BinaryJsonBackend(JsonBackend):
    """Shared input check for the byte codecs."""

    @property
    def binary(self) -> bool:
        return True

    def _require_bytes(self, data: Data) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise ParseError("{} input must be bytes, got {}".format(self.name, type(data).__name__))


class CborBackend(_BinaryJsonBackend):
    """CBOR via cbor2."""

    @property
    def name(self) -> str:
        return "cbor"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".cbor",)

    def parse(self, data: Data) -> Node:
        raw = self._require_bytes(data)
        try:
            return self.make(cbor2.loads(raw))
        except (cbor2.CBORDecodeError, ValueError, EOFError) as exc:
            raise ParseError(str(exc)) from exc

    def render(self, node: Node) -> Data:
        try:
            return cbor2.dumps(self.own(node))
        except cbor2.CBOREncodeError as exc:
            raise StructureError(str(exc)) from exc


class MsgPackBackend(_BinaryJsonBackend):
    """MessagePack via msgpack."""

    @property
    def name(self) -> str:
        return "msgpack"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".msgpack", ".mpk")

    def parse(self, data: Data) -> Node:
        raw = self._require_bytes(data)
        try:
            return self.make(msgpack.unpackb(raw, raw=False, strict_map_key=False))
        except (msgpack.UnpackException, ValueError) as exc:
            raise ParseError(str(exc)) from exc

    def render(self, node: Node) -> Data:
        try:
            return msgpack.packb(self.own(node), use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as exc:
            raise StructureError(str(exc)) from exc


class UbjsonBackend(_BinaryJsonBackend):
    """UBJSON via py-ubjson."""

    @property
    def name(self) -> str:
        return "ubjson"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".ubj", ".ubjson")

    def parse(self, data: Data) -> Node:
        raw = self._require_bytes(data)
        try:
            return self.make(ubjson.loadb(raw))
        except ubjson.DecoderException as exc:
            raise ParseError(str(exc)) from exc

    def render(self, node: Node) -> Data:
        try:
            return ubjson.dumpb(self.own(node), no_float32=True)
        except ubjson.EncoderException as exc:
            raise StructureError(str(exc)) from exc
