"""Abstract base backend: the contract every wire format implements.

WHY: The core converts records, enums and containers the same way for
every format. What differs per format is only how a document is parsed
and rendered, how leaves look in the native tree, and how keyed
structures and sequences are built. This base class pins down exactly
that set of operations so the core can drive any backend generically.

HOW: BaseBackend is an ABC. Subclasses implement:
  name / extensions / binary          : identity and file handling
  parse / render                      : text or bytes ↔ Node
  unpack_leaf / pack_leaf             : bool, int, float, str, None, Any
  unpack_record / pack_record         : keyed structure ↔ record
  is_null / null                      : the null (or absent) marker
  sequence_items / sequence           : ordered children
  mapping_items / mapping             : key/value children
coerce_leaf() and check_leaf() are shared helpers for backends whose
native tree is made of plain Python scalars.

RULES:
- Backends are pure: no hidden state beyond constructor configuration
- A Node produced by another backend is a LogicError (own() checks it)
- Malformed input → ParseError; wrong shape → StructureError
- A record member without a node → LogicError
- Unsupported leaf types → LogicError (a schema bug, not a data error)

To add a new wire format:
1. Create a new module in backends/
2. Subclass BaseBackend (or JsonBackend if the format is JSON-shaped)
3. Implement the abstract methods
4. Register it in the BACKENDS dict in backends/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Sequence, Tuple, Union

from serde_hub.core.classify import NoneType, type_name
from serde_hub.core.errors import LogicError, StructureError
from serde_hub.core.node import Node
from serde_hub.core.schema import Member, Schema

Data = Union[str, bytes]


class BaseBackend(ABC):
    """Abstract base for all wire format backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Format key, e.g. 'json'. Also tags every Node this backend makes."""

    @property
    @abstractmethod
    def extensions(self) -> Tuple[str, ...]:
        """File suffixes for this format, preferred one first, e.g. ('.yaml', '.yml')."""

    @property
    def binary(self) -> bool:
        """True if render() returns bytes."""
        return False

    # -- documents ----------------------------------------------------------

    @abstractmethod
    def parse(self, data: Data) -> Node:
        """Parse raw text or bytes into a Node. Raises ParseError."""

    @abstractmethod
    def render(self, node: Node) -> Data:
        """Serialize a Node this backend produced."""

    # -- leaves -------------------------------------------------------------

    @abstractmethod
    def unpack_leaf(self, node: Node, tp: Any) -> Any:
        """Convert a scalar Node (or any Node, for typing.Any) to a Python value."""

    @abstractmethod
    def pack_leaf(self, value: Any, tp: Any) -> Node:
        """Convert a Python scalar (or native tree, for typing.Any) to a Node."""

    # -- records ------------------------------------------------------------

    @abstractmethod
    def unpack_record(self, node: Node, schema: Schema) -> Any:
        """Build one record from a keyed-structure Node.

        Each field's sub-node (or None when absent) goes through
        serde_hub.core.dispatch.unpack_field.
        """

    @abstractmethod
    def pack_record(self, schema: Schema, members: Sequence[Member]) -> Node:
        """Build a keyed-structure Node from packed members, in order."""

    # -- structural primitives for the core's container rules ---------------

    @abstractmethod
    def is_null(self, node: Node) -> bool:
        """True if the Node is this format's null (or absent) marker."""

    @abstractmethod
    def null(self) -> Node:
        """The Node packed for an empty Optional."""

    @abstractmethod
    def sequence_items(self, node: Node) -> List[Node]:
        """Children of a sequence Node. Raises StructureError otherwise."""

    @abstractmethod
    def sequence(self, items: Sequence[Node]) -> Node:
        """Build a sequence Node."""

    @abstractmethod
    def mapping_items(self, node: Node, key_tp: Any) -> List[Tuple[Node, Node]]:
        """(key, value) children of a map Node of the given key type."""

    @abstractmethod
    def mapping(self, pairs: Sequence[Tuple[Node, Node]], key_tp: Any) -> Node:
        """Build a map Node. Raises UnsupportedKeyError for keys the format cannot hold."""

    # -- helpers ------------------------------------------------------------

    def make(self, value: Any) -> Node:
        return Node(self.name, value)

    def own(self, node: Node) -> Any:
        """Return the native value of a Node, refusing Nodes from other backends."""
        if node.backend != self.name:
            raise LogicError(
                "{} backend received a node produced by {}".format(self.name, node.backend)
            )
        return node.value

    def require_members(self, schema: Schema, members: Sequence[Member]) -> None:
        for member in members:
            if member.node is None:
                raise LogicError("Logic error: {}.{} has no value".format(schema.name, member.name))
            self.own(member.node)

    def __repr__(self) -> str:
        return "<{} {}>".format(type(self).__name__, self.name)


def coerce_leaf(value: Any, tp: Any) -> Any:
    """Check a native scalar against a leaf type, returning the Python value.

    RULES:
    - bool is never accepted as int or float
    - float accepts int and returns float(value)
    - typing.Any accepts the value unchanged
    """
    if tp is Any:
        return value
    if tp is NoneType:
        if value is None:
            return None
    elif tp is bool:
        if isinstance(value, bool):
            return value
    elif tp is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif tp is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif tp is str:
        if isinstance(value, str):
            return value
    else:
        raise LogicError("no conversion for type {}".format(type_name(tp)))
    raise StructureError("expected {}, got {}".format(_describe(tp), _describe_value(value)))


def check_leaf(value: Any, tp: Any) -> Any:
    """Validate a Python value about to be packed as a leaf of type tp."""
    if tp is Any:
        return value
    return coerce_leaf(value, tp)


_NATIVE_NAMES = {
    NoneType: "null",
    bool: "boolean",
    int: "integer",
    float: "number",
    str: "string",
    dict: "object",
    list: "array",
    tuple: "array",
}


def _describe(tp: Any) -> str:
    return _NATIVE_NAMES.get(tp, type_name(tp))


def _describe_value(value: Any) -> str:
    return _NATIVE_NAMES.get(type(value), type(value).__name__)
