"""Generic container rules: Optional, variants, sequences, sets, tuples, maps.

WHY: Containers look the same in every format from the core's point of
view: an Optional is "null or T", a list is "a sequence of T", a dict is
"pairs of K and V". Writing these rules once and letting each backend
supply only its structural primitives (what a null, a sequence or a
mapping looks like in its tree) keeps the backends small and the
semantics identical across formats.

HOW: Each rule is a plain function taking the backend, the classified
TypeShape, the node or value, and the dispatcher's unpack/pack callable
used for recursion. The dispatcher maps each container Kind to its rule.

RULES:
- Variant unpack is first-match in declared order; only DataError counts
  as a mismatch, LogicError propagates
- Variant pack selects the alternative the value currently holds
  (exact match first, then int-as-float)
- Element errors are annotated with the element position or map key
- Fixed tuples must have exactly the declared length
- Durations travel as float seconds
"""

from __future__ import annotations

import collections
import datetime
import logging
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence, Tuple

from serde_hub.core.classify import Kind, NoneType, TypeShape, classify, type_name
from serde_hub.core.errors import DataError, StructureError, VariantNoMatch
from serde_hub.core.node import Node

logger = logging.getLogger(__name__)

Unpack = Callable[[Any, Any, Node], Any]
Pack = Callable[[Any, Any, Any], Node]

_SEQUENCE_VALUES = (list, tuple, collections.deque)


def unpack_optional(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> Any:
    if backend.is_null(node):
        return None
    return unpack(backend, shape.args[0], node)


def pack_optional(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    if value is None:
        return backend.null()
    return pack(backend, shape.args[0], value)


def unpack_variant(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> Any:
    """Decode node as the first alternative that accepts it.

    WHY: Wire formats carry no type tag, so a variant is resolved by trying
    each alternative. Declaration order is the tie-break when alternatives
    overlap structurally (an empty array is both an empty list and an empty
    pair-encoded map).
    """
    attempts: List[Tuple[str, DataError]] = []
    for alternative in shape.args:
        try:
            return unpack(backend, alternative, node)
        except DataError as exc:
            logger.debug("Variant alternative %s rejected: %s", type_name(alternative), exc)
            attempts.append((type_name(alternative), exc))
    raise VariantNoMatch(attempts)


def pack_variant(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    alternative = held_alternative(shape.args, value)
    if alternative is None:
        raise StructureError(
            "{} value matches no alternative of {}".format(
                type(value).__name__, ", ".join(type_name(a) for a in shape.args)
            )
        )
    return pack(backend, alternative, value)


def held_alternative(alternatives: Sequence[Any], value: Any) -> Optional[Any]:
    """Return the first alternative type the value is an instance of, or None."""
    for exact in (True, False):
        for alternative in alternatives:
            if holds(value, alternative, exact):
                return alternative
    return None


def holds(value: Any, tp: Any, exact: bool = True) -> bool:
    """Runtime shape check: could value have been declared as tp?

    Containers are checked element by element. With exact=False a float
    type also accepts an int.
    """
    shape = classify(tp)
    kind = shape.kind
    if kind in (Kind.RECORD, Kind.ENUM):
        return isinstance(value, tp)
    if kind is Kind.OPTIONAL:
        return value is None or holds(value, shape.args[0], exact)
    if kind is Kind.VARIANT:
        return any(holds(value, a, exact) for a in shape.args)
    if kind is Kind.SEQUENCE:
        return isinstance(value, _SEQUENCE_VALUES) and all(holds(v, shape.args[0], exact) for v in value)
    if kind is Kind.SET:
        return isinstance(value, (set, frozenset)) and all(holds(v, shape.args[0], exact) for v in value)
    if kind is Kind.TUPLE:
        return (
            isinstance(value, (tuple, list))
            and len(value) == len(shape.args)
            and all(holds(v, t, exact) for v, t in zip(value, shape.args))
        )
    if kind is Kind.MAP:
        key_tp, value_tp = shape.args
        return isinstance(value, Mapping) and all(
            holds(k, key_tp, exact) and holds(v, value_tp, exact) for k, v in value.items()
        )
    if kind is Kind.DURATION:
        return isinstance(value, datetime.timedelta)
    return _holds_leaf(value, tp, exact)


def _holds_leaf(value: Any, tp: Any, exact: bool) -> bool:
    if tp is Any:
        return True
    if tp is NoneType:
        return value is None
    if tp is bool:
        return isinstance(value, bool)
    if tp is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if tp is float:
        if isinstance(value, float):
            return True
        return not exact and isinstance(value, int) and not isinstance(value, bool)
    return isinstance(tp, type) and isinstance(value, tp)


def unpack_sequence(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> Any:
    element = shape.args[0]
    items = []
    for index, item in enumerate(backend.sequence_items(node)):
        items.append(_unpack_element(backend, element, item, unpack, "[{}]".format(index)))
    return shape.factory(items)


def pack_sequence(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
        raise StructureError("expected a sequence, got {}".format(type(value).__name__))
    element = shape.args[0]
    values = list(value)
    if shape.kind is Kind.SET:
        # Stable output for sets of orderable values
        try:
            values = sorted(values)
        except TypeError:
            pass
    return backend.sequence(
        [_pack_element(backend, element, v, pack, "[{}]".format(i)) for i, v in enumerate(values)]
    )


def unpack_tuple(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> Any:
    items = backend.sequence_items(node)
    if len(items) != len(shape.args):
        raise StructureError(
            "expected a sequence of {} items, got {}".format(len(shape.args), len(items))
        )
    return tuple(
        _unpack_element(backend, tp, item, unpack, "[{}]".format(i))
        for i, (tp, item) in enumerate(zip(shape.args, items))
    )


def pack_tuple(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    if not isinstance(value, (tuple, list)) or len(value) != len(shape.args):
        raise StructureError(
            "expected a tuple of {} items, got {!r}".format(len(shape.args), value)
        )
    return backend.sequence(
        [_pack_element(backend, tp, v, pack, "[{}]".format(i))
         for i, (tp, v) in enumerate(zip(shape.args, value))]
    )


def unpack_map(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> Any:
    key_tp, value_tp = shape.args
    result = shape.factory()
    for key_node, value_node in backend.mapping_items(node, key_tp):
        key = _unpack_element(backend, key_tp, key_node, unpack, "<key>")
        result[key] = _unpack_element(backend, value_tp, value_node, unpack, str(key))
    return result


def pack_map(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    if not isinstance(value, Mapping):
        raise StructureError("expected a mapping, got {}".format(type(value).__name__))
    key_tp, value_tp = shape.args
    pairs = [
        (_pack_element(backend, key_tp, k, pack, "<key>"), _pack_element(backend, value_tp, v, pack, str(k)))
        for k, v in value.items()
    ]
    return backend.mapping(pairs, key_tp)


def unpack_duration(backend: Any, shape: TypeShape, node: Node, unpack: Unpack) -> datetime.timedelta:
    return datetime.timedelta(seconds=unpack(backend, float, node))


def pack_duration(backend: Any, shape: TypeShape, value: Any, pack: Pack) -> Node:
    if not isinstance(value, datetime.timedelta):
        raise StructureError("expected a timedelta, got {}".format(type(value).__name__))
    return pack(backend, float, value.total_seconds())


def _unpack_element(backend: Any, tp: Any, node: Node, unpack: Unpack, where: str) -> Any:
    try:
        return unpack(backend, tp, node)
    except DataError as exc:
        exc.add_context(where)
        raise


def _pack_element(backend: Any, tp: Any, value: Any, pack: Pack, where: str) -> Node:
    try:
        return pack(backend, tp, value)
    except DataError as exc:
        exc.add_context(where)
        raise


UNPACKERS = {
    Kind.OPTIONAL: unpack_optional,
    Kind.VARIANT: unpack_variant,
    Kind.SEQUENCE: unpack_sequence,
    Kind.SET: unpack_sequence,
    Kind.TUPLE: unpack_tuple,
    Kind.MAP: unpack_map,
    Kind.DURATION: unpack_duration,
}

PACKERS = {
    Kind.OPTIONAL: pack_optional,
    Kind.VARIANT: pack_variant,
    Kind.SEQUENCE: pack_sequence,
    Kind.SET: pack_sequence,
    Kind.TUPLE: pack_tuple,
    Kind.MAP: pack_map,
    Kind.DURATION: pack_duration,
}
