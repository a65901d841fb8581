"""YAML backend: PyYAML's representation graph (yaml.nodes) as the Node tree.

WHY: YAML keeps more of the document than a plain dict would: scalar
tags, mappings with non-string keys, key order. Working on the composed
node graph instead of loaded Python objects lets the core decide how each
scalar is read based on the target type, the way a typed YAML reader does.

HOW: parse() composes the document with the SafeLoader (no object
construction). Leaves are constructed with a SafeConstructor when asked
for, and represented with a SafeRepresenter when packed. render()
serializes the node graph with the SafeDumper.

RULES:
- Any key type is allowed in a map; non-scalar keys render as complex keys
- An empty document parses as null
- A str target accepts any non-null scalar as written ("8080" for 8080).
  A variant therefore reads a plain 5 as "5" when str is listed before
  int: Union[int, str] keeps the number, Union[str, int] does not
- A bare scalar document renders without the "..." end marker
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

import yaml
from yaml.constructor import SafeConstructor
from yaml.nodes import MappingNode, ScalarNode, SequenceNode
from yaml.representer import SafeRepresenter

from serde_hub import config
from serde_hub.backends.base import BaseBackend, Data, check_leaf, coerce_leaf
from serde_hub.core import dispatch
from serde_hub.core.classify import NoneType
from serde_hub.core.errors import ParseError, StructureError
from serde_hub.core.node import Node
from serde_hub.core.schema import Member, Schema

NULL_TAG = "tag:yaml.org,2002:null"
STR_TAG = "tag:yaml.org,2002:str"
SEQ_TAG = "tag:yaml.org,2002:seq"
MAP_TAG = "tag:yaml.org,2002:map"

_DOCUMENT_END = "\n...\n"


class YamlBackend(BaseBackend):
    """YAML document backend.

    Args:
        indent: Spaces per nesting level for render().
                Defaults to config.YAML_INDENT.
    """

    def __init__(self, indent: Optional[int] = None) -> None:
        self.indent = config.YAML_INDENT if indent is None else indent

    @property
    def name(self) -> str:
        return "yaml"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return (".yaml", ".yml")

    # -- documents ----------------------------------------------------------

    def parse(self, data: Data) -> Node:
        try:
            root = yaml.compose(data, Loader=yaml.SafeLoader)
        except yaml.YAMLError as exc:
            raise ParseError(str(exc)) from exc
        if root is None:
            return self.null()
        return self.make(root)

    def render(self, node: Node) -> Data:
        text = yaml.serialize(
            self.own(node), Dumper=yaml.SafeDumper, allow_unicode=True, indent=self.indent
        )
        if text.endswith(_DOCUMENT_END):
            text = text[: -len(_DOCUMENT_END) + 1]
        return text

    # -- leaves -------------------------------------------------------------

    def unpack_leaf(self, node: Node, tp: Any) -> Any:
        ynode = self.own(node)
        if tp is str and isinstance(ynode, ScalarNode):
            if ynode.tag == NULL_TAG:
                raise StructureError("expected string, got null")
            return ynode.value
        if tp is not Any and not isinstance(ynode, ScalarNode):
            raise StructureError("expected a scalar, got {}".format(_kind(ynode)))
        return coerce_leaf(_construct(ynode), tp)

    def pack_leaf(self, value: Any, tp: Any) -> Node:
        value = check_leaf(value, tp)
        if tp is NoneType or value is None:
            return self.null()
        representer = SafeRepresenter(default_flow_style=False, sort_keys=False)
        try:
            return self.make(representer.represent_data(_plain(value)))
        except yaml.YAMLError as exc:
            raise StructureError(str(exc)) from exc

    # -- records ------------------------------------------------------------

    def unpack_record(self, node: Node, schema: Schema) -> Any:
        ynode = self.own(node)
        if not isinstance(ynode, MappingNode):
            raise StructureError("{}: expected mapping, got {}".format(schema.name, _kind(ynode)))
        entries = {}
        for key_node, value_node in ynode.value:
            if isinstance(key_node, ScalarNode):
                entries.setdefault(key_node.value, value_node)
        values = {}
        for field in schema.fields:
            sub = entries.get(field.name)
            values[field.name] = dispatch.unpack_field(
                self, schema, field, None if sub is None else self.make(sub)
            )
        return schema.build(values)

    def pack_record(self, schema: Schema, members: Sequence[Member]) -> Node:
        self.require_members(schema, members)
        pairs = [(ScalarNode(STR_TAG, m.name), m.node.value) for m in members]
        return self.make(MappingNode(MAP_TAG, pairs))

    # -- structure ----------------------------------------------------------

    def is_null(self, node: Node) -> bool:
        ynode = self.own(node)
        return isinstance(ynode, ScalarNode) and ynode.tag == NULL_TAG

    def null(self) -> Node:
        return self.make(ScalarNode(NULL_TAG, "null"))

    def sequence_items(self, node: Node) -> List[Node]:
        ynode = self.own(node)
        if not isinstance(ynode, SequenceNode):
            raise StructureError("expected sequence, got {}".format(_kind(ynode)))
        return [self.make(item) for item in ynode.value]

    def sequence(self, items: Sequence[Node]) -> Node:
        return self.make(SequenceNode(SEQ_TAG, [self.own(item) for item in items]))

    def mapping_items(self, node: Node, key_tp: Any) -> List[Tuple[Node, Node]]:
        ynode = self.own(node)
        if not isinstance(ynode, MappingNode):
            raise StructureError("expected mapping, got {}".format(_kind(ynode)))
        return [(self.make(k), self.make(v)) for k, v in ynode.value]

    def mapping(self, pairs: Sequence[Tuple[Node, Node]], key_tp: Any) -> Node:
        return self.make(MappingNode(MAP_TAG, [(self.own(k), self.own(v)) for k, v in pairs]))


def _construct(ynode: Any) -> Any:
    try:
        return SafeConstructor().construct_object(ynode, deep=True)
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        raise StructureError(str(exc)) from exc


def _plain(value: Any) -> Any:
    # The safe representer has no tuple support
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def _kind(ynode: Any) -> str:
    if isinstance(ynode, MappingNode):
        return "mapping"
    if isinstance(ynode, SequenceNode):
        return "sequence"
    if ynode.tag == NULL_TAG:
        return "null"
    return "scalar"
