"""Core dispatcher: the single pack/unpack entry point for every type.

WHY: Records, enums, containers and leaves all nest inside each other, and
every nested value has to reach the right algorithm no matter which wire
format is in use. Routing everything through one pair of functions means
a backend never needs to know about records or enums, and a record never
needs to know about backends.

HOW: unpack()/pack() classify the target type, then:
  record    → backend.unpack_record / field-by-field pack + pack_record
  enum      → unpack_enum / pack_enum (name lookup in the enum schema)
  container → the generic rule from containers.py, recursing back here
  leaf      → backend.unpack_leaf / pack_leaf
unpack_field() is the per-field resolution step backends call from their
unpack_record implementation.

RULES:
- Unregistered Enum subclasses and dataclasses are LogicErrors, with a hint
- A present, non-null field entry is decoded; otherwise the default is
  used; otherwise MissingField
- Data errors from a field are annotated with the field name
- Enum names compare exactly; the first declared match wins
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from typing import Any, List, Optional

from serde_hub.core.classify import Kind, classify, type_name
from serde_hub.core.containers import PACKERS, UNPACKERS
from serde_hub.core.errors import DataError, LogicError, MissingField, StructureError, UnknownEnumName
from serde_hub.core.node import Node
from serde_hub.core.schema import Field, Member, Schema, enum_schema_of, schema_of

logger = logging.getLogger(__name__)

_ABSENT: Any = object()


def unpack(backend: Any, tp: Any, node: Node) -> Any:
    """Convert a backend Node into a value of type tp."""
    shape = classify(tp)
    if shape.kind is Kind.RECORD:
        return backend.unpack_record(node, schema_of(tp))
    if shape.kind is Kind.ENUM:
        return unpack_enum(backend, tp, node)
    rule = UNPACKERS.get(shape.kind)
    if rule is not None:
        return rule(backend, shape, node, unpack)
    _check_unregistered(tp)
    return backend.unpack_leaf(node, tp)


def pack(backend: Any, tp: Any, value: Any) -> Node:
    """Convert a value into a backend Node; tp=None infers type(value)."""
    if tp is None:
        tp = type(value)
    shape = classify(tp)
    if shape.kind is Kind.RECORD:
        return pack_record(backend, schema_of(tp), value)
    if shape.kind is Kind.ENUM:
        return pack_enum(backend, tp, value)
    rule = PACKERS.get(shape.kind)
    if rule is not None:
        return rule(backend, shape, value, pack)
    _check_unregistered(tp)
    return backend.pack_leaf(value, tp)


def unpack_field(backend: Any, schema: Schema, field: Field, node: Optional[Node]) -> Any:
    """Resolve one record field from its sub-node (None when absent)."""
    if node is not None and not backend.is_null(node):
        try:
            return unpack(backend, field.type, node)
        except DataError as exc:
            exc.add_context(field.name)
            raise
    if field.has_default:
        logger.debug("%s.%s absent, using its default", schema.name, field.name)
        return field.make_default()
    raise MissingField(schema.name, field.name)


def pack_record(backend: Any, schema: Schema, value: Any) -> Node:
    if not isinstance(value, schema.cls):
        raise StructureError("expected {}, got {}".format(schema.name, type(value).__name__))
    members: List[Member] = []
    for field in schema.fields:
        attr = getattr(value, field.name, _ABSENT)
        if attr is _ABSENT:
            members.append(Member(field.name, None))
            continue
        try:
            members.append(Member(field.name, pack(backend, field.type, attr)))
        except DataError as exc:
            exc.add_context(field.name)
            raise
    return backend.pack_record(schema, members)


def unpack_enum(backend: Any, tp: Any, node: Node) -> Any:
    schema = enum_schema_of(tp)
    name = backend.unpack_leaf(node, str)
    for member in schema.members:
        if member.name == name:
            return member.value
    raise UnknownEnumName(schema.name, name)


def pack_enum(backend: Any, tp: Any, value: Any) -> Node:
    schema = enum_schema_of(tp)
    for member in schema.members:
        if member.value == value:
            return backend.pack_leaf(member.name, str)
    raise LogicError("{}: bad enum value {!r}".format(schema.name, value))


def _check_unregistered(tp: Any) -> None:
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        raise LogicError("enum {} is not registered; decorate it with @serde_enum".format(tp.__name__))
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        raise LogicError(
            "record {} is not registered; decorate it with @serde_record".format(type_name(tp))
        )
