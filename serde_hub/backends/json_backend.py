"""JSON backend: text JSON via the standard-library json module.

WHY: JSON is the reference format. Its native tree (dicts, lists and
plain scalars) is also what the binary JSON family decodes to, so those
backends reuse every structural operation here and only swap the codec.

HOW: parse() → json.loads into a Node wrapping the native tree.
render() → json.dumps, compact unless SERDE_JSON_INDENT is set.
Records are objects with one key per field, in declaration order.

RULES:
- Maps with str or enum keys → object
- Maps with any other key type → array of [key, value] pairs
- Maps keyed by typing.Any, and schema-less values packed as typing.Any,
  → object when every key is a string, otherwise [key, value] pairs
- None packs as null, and null unpacks as an empty Optional
- Unknown object keys are ignored when unpacking a record
- Non-ASCII text is written as-is (ensure_ascii=False)
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

from serde_hub import config
from serde_hub.backends.base import BaseBackend, Data, check_leaf, coerce_leaf
from serde_hub.core import dispatch
from serde_hub.core.classify import is_string_key
from serde_hub.core.errors import ParseError, StructureError
from serde_hub.core.node import Node
from serde_hub.core.schema import Member, Schema

_SCALARS = (str, int, float, bool, type(None))


class JsonBackend(BaseBackend):
    """Text JSON backend; also the structural base of the binary JSON family.

    Args:
        indent: Spaces per nesting level for render(). None → compact.
                Defaults to config.JSON_INDENT.
    """

    def __init__(self, indent: Optional[int] = None) -> None:
        self.indent = config.JSON_INDENT if indent is None else indent

    @property
    def name(self) -> str:
        return "json"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".json",)

    # -- documents ----------------------------------------------------------

    def parse(self, data: Data) -> Node:
        try:
            return self.make(json.loads(data))
        except ValueError as exc:
            raise ParseError(str(exc)) from exc

    def render(self, node: Node) -> Data:
        value = self.own(node)
        try:
            if self.indent is None:
                return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
            return json.dumps(value, ensure_ascii=False, indent=self.indent)
        except (TypeError, ValueError) as exc:
            raise StructureError(str(exc)) from exc

    # -- leaves -------------------------------------------------------------

    def unpack_leaf(self, node: Node, tp: Any) -> Any:
        return coerce_leaf(self.own(node), tp)

    def pack_leaf(self, value: Any, tp: Any) -> Node:
        return self.make(native_tree(check_leaf(value, tp)))

    # -- records ------------------------------------------------------------

    def unpack_record(self, node: Node, schema: Schema) -> Any:
        obj = self.own(node)
        if not isinstance(obj, dict):
            raise StructureError("{}: expected object".format(schema.name))
        values = {}
        for field in schema.fields:
            sub = obj.get(field.name)
            values[field.name] = dispatch.unpack_field(
                self, schema, field, None if sub is None else self.make(sub)
            )
        return schema.build(values)

    def pack_record(self, schema: Schema, members: Sequence[Member]) -> Node:
        self.require_members(schema, members)
        return self.make({m.name: m.node.value for m in members})

    # -- structure ----------------------------------------------------------

    def is_null(self, node: Node) -> bool:
        return self.own(node) is None

    def null(self) -> Node:
        return self.make(None)

    def sequence_items(self, node: Node) -> List[Node]:
        value = self.own(node)
        if not isinstance(value, list):
            raise StructureError("expected array, got {}".format(_kind(value)))
        return [self.make(item) for item in value]

    def sequence(self, items: Sequence[Node]) -> Node:
        return self.make([self.own(item) for item in items])

    def mapping_items(self, node: Node, key_tp: Any) -> List[Tuple[Node, Node]]:
        value = self.own(node)
        if is_string_key(key_tp) or (key_tp is Any and isinstance(value, dict)):
            if not isinstance(value, dict):
                raise StructureError("expected object, got {}".format(_kind(value)))
            return [(self.make(k), self.make(v)) for k, v in value.items()]
        if not isinstance(value, list):
            raise StructureError("expected array of [key, value] pairs, got {}".format(_kind(value)))
        pairs = []
        for index, pair in enumerate(value):
            if not isinstance(pair, list) or len(pair) != 2:
                raise StructureError("[{}]: expected a [key, value] pair".format(index))
            pairs.append((self.make(pair[0]), self.make(pair[1])))
        return pairs

    def mapping(self, pairs: Sequence[Tuple[Node, Node]], key_tp: Any) -> Node:
        keys = [self.own(k) for k, _ in pairs]
        if is_string_key(key_tp) or (key_tp is Any and all(isinstance(k, str) for k in keys)):
            return self.make({k: self.own(v) for k, (_, v) in zip(keys, pairs)})
        return self.make([[k, self.own(v)] for k, (_, v) in zip(keys, pairs)])


def native_tree(value: Any) -> Any:
    """Normalize a schema-less value into a JSON-shaped tree.

    Tuples become lists. A mapping whose keys are all strings becomes a
    dict; any other mapping becomes a list of [key, value] pairs, as
    mapping() does for non-string key types. Anything other than mappings,
    lists and scalars is a StructureError.
    """
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, Mapping):
        if all(isinstance(k, str) for k in value):
            return {k: native_tree(v) for k, v in value.items()}
        return [[native_tree(k), native_tree(v)] for k, v in value.items()]
    if isinstance(value, (list, tuple)):
        return [native_tree(v) for v in value]
    raise StructureError("unsupported value of type {}".format(type(value).__name__))


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    return "number"
