"""TOML backend: tomllib (or tomli) for reading, tomli-w for writing.

WHY: TOML is the usual format for hand-edited configuration files, so
records that describe configuration should load from it directly.

HOW: The native tree is the plain dict/list/scalar tree tomllib returns.
TOML has no null value: an empty Optional is represented by leaving the
key out, so null() returns a Node wrapping None that pack_record drops.

RULES:
- The document root must be a table (a record or a str-keyed map)
- Map keys must be str or enum names, and never the empty string;
  anything else raises UnsupportedKeyError
- null cannot appear inside an array or as a map value (StructureError)
- Dates and times are only reachable through typing.Any
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

import tomli_w

from serde_hub.backends.base import BaseBackend, Data, check_leaf, coerce_leaf
from serde_hub.core import dispatch
from serde_hub.core.classify import is_string_key, type_name
from serde_hub.core.errors import ParseError, StructureError, UnsupportedKeyError
from serde_hub.core.node import Node
from serde_hub.core.schema import Member, Schema

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found,no-redef]


class TomlBackend(BaseBackend):
    """TOML document backend."""

    @property
    def name(self) -> str:
        return "toml"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".toml",)

    # -- documents ----------------------------------------------------------

    def parse(self, data: Data) -> Node:
        if isinstance(data, (bytes, bytearray)):
            try:
                data = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError(str(exc)) from exc
        try:
            return self.make(tomllib.loads(data))
        except tomllib.TOMLDecodeError as exc:
            raise ParseError(str(exc)) from exc

    def render(self, node: Node) -> Data:
        value = self.own(node)
        if not isinstance(value, dict):
            raise StructureError(
                "TOML document root must be a table, got {}".format(type(value).__name__)
            )
        try:
            return tomli_w.dumps(value)
        except TypeError as exc:
            raise StructureError(str(exc)) from exc

    # -- leaves -------------------------------------------------------------

    def unpack_leaf(self, node: Node, tp: Any) -> Any:
        return coerce_leaf(self.own(node), tp)

    def pack_leaf(self, value: Any, tp: Any) -> Node:
        return self.make(check_leaf(value, tp))

    # -- records ------------------------------------------------------------

    def unpack_record(self, node: Node, schema: Schema) -> Any:
        table = self.own(node)
        if not isinstance(table, dict):
            raise StructureError("{}: expected table".format(schema.name))
        values = {}
        for field in schema.fields:
            sub = table.get(field.name)
            values[field.name] = dispatch.unpack_field(
                self, schema, field, None if sub is None else self.make(sub)
            )
        return schema.build(values)

    def pack_record(self, schema: Schema, members: Sequence[Member]) -> Node:
        self.require_members(schema, members)
        # Absent optionals leave the key out
        return self.make({m.name: m.node.value for m in members if m.node.value is not None})

    # -- structure ----------------------------------------------------------

    def is_null(self, node: Node) -> bool:
        return self.own(node) is None

    def null(self) -> Node:
        return self.make(None)

    def sequence_items(self, node: Node) -> List[Node]:
        value = self.own(node)
        if not isinstance(value, list):
            raise StructureError("expected array, got {}".format(type(value).__name__))
        return [self.make(item) for item in value]

    def sequence(self, items: Sequence[Node]) -> Node:
        values = [self.own(item) for item in items]
        if any(v is None for v in values):
            raise StructureError("TOML arrays cannot hold null")
        return self.make(values)

    def mapping_items(self, node: Node, key_tp: Any) -> List[Tuple[Node, Node]]:
        self._check_key_type(key_tp)
        table = self.own(node)
        if not isinstance(table, dict):
            raise StructureError("expected table, got {}".format(type(table).__name__))
        return [(self.make(k), self.make(v)) for k, v in table.items()]

    def mapping(self, pairs: Sequence[Tuple[Node, Node]], key_tp: Any) -> Node:
        self._check_key_type(key_tp)
        table = {}
        for key_node, value_node in pairs:
            key = self.own(key_node)
            if not isinstance(key, str):
                raise UnsupportedKeyError("TOML does not support non-string keys ({!r})".format(key))
            if key == "":
                raise UnsupportedKeyError("TOML does not support empty keys")
            value = self.own(value_node)
            if value is None:
                raise StructureError("TOML table '{}' cannot hold null".format(key))
            table[key] = value
        return self.make(table)

    @staticmethod
    def _check_key_type(key_tp: Any) -> None:
        if not (is_string_key(key_tp) or key_tp is Any):
            raise UnsupportedKeyError(
                "TOML does not support non-string keys ({})".format(type_name(key_tp))
            )
