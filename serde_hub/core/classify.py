"""Type classification for the core dispatcher.

WHY: Every conversion starts by asking "what kind of type is this?". A
registered record or enum runs the core's schema algorithms, a generic
container (Optional, Union, list, dict, ...) runs the core's container
rules, and everything else is a leaf the backend converts natively. Doing
this analysis once per type keeps the dispatcher a flat branch.

HOW: classify() first checks the registration markers that the schema
module attaches to classes. Those checks are never cached, because a
class may be registered after it was first seen. The structural analysis
of typing constructs (get_origin/get_args) is pure and cached per type.
The cache key spells out the argument order, because typing compares
Union[A, B] equal to Union[B, A].

RULES:
- Optional[T] is a Union containing NoneType; Union[A, B, None] is an
  Optional of the variant Union[A, B]
- Union order is preserved and is the variant decode priority
- tuple[T, ...] and bare tuple are sequences; tuple[A, B] is a fixed tuple
- Bare containers (list, dict, set) hold typing.Any
- Annotated[T, ...] classifies as T
"""

from __future__ import annotations

import collections
import collections.abc
import datetime
import enum
import functools
import types
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, Tuple, Union, get_args, get_origin

# Attribute names under which registered classes carry their schema.
SCHEMA_ATTR = "__serde_schema__"
ENUM_ATTR = "__serde_enum__"

NoneType = type(None)

# types.UnionType exists from Python 3.10 (``int | str``).
_UNION_TYPES: Tuple[Any, ...] = tuple(
    t for t in (Union, getattr(types, "UnionType", None)) if t is not None
)

_SEQUENCE_ORIGINS = {
    list: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.deque: collections.deque,
}

_SET_ORIGINS = {
    set: set,
    frozenset: frozenset,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}

_MAP_ORIGINS = {
    dict: dict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.OrderedDict: collections.OrderedDict,
}


class Kind(enum.Enum):
    RECORD = "record"
    ENUM = "enum"
    OPTIONAL = "optional"
    VARIANT = "variant"
    SEQUENCE = "sequence"
    SET = "set"
    TUPLE = "tuple"
    MAP = "map"
    DURATION = "duration"
    LEAF = "leaf"


@dataclass(frozen=True)
class TypeShape:
    """The classified shape of one type.

    Attributes:
        kind: Which algorithm converts values of this type.
        args: Element types. OPTIONAL holds (inner,), VARIANT the ordered
              alternatives, SEQUENCE/SET (element,), TUPLE one type per
              position, MAP (key, value).
        factory: Python container type rebuilt on unpack (list, tuple,
                 deque, set, frozenset, dict, OrderedDict), else None.
    """

    kind: Kind
    args: Tuple[Any, ...] = ()
    factory: Optional[Callable[..., Any]] = None


_RECORD_SHAPE = TypeShape(Kind.RECORD)
_ENUM_SHAPE = TypeShape(Kind.ENUM)


def is_record(tp: Any) -> bool:
    """True if tp is a class registered with a record schema (not inherited)."""
    return isinstance(tp, type) and SCHEMA_ATTR in tp.__dict__


def is_enum(tp: Any) -> bool:
    """True if tp is an Enum subclass registered with an enum schema."""
    return isinstance(tp, type) and ENUM_ATTR in tp.__dict__


def classify(tp: Any) -> TypeShape:
    if is_record(tp):
        return _RECORD_SHAPE
    if is_enum(tp):
        return _ENUM_SHAPE
    try:
        return _shape(_ordered_key(tp), tp)
    except TypeError:
        # Unhashable typing construct (e.g. Annotated with dict metadata)
        return _shape.__wrapped__(None, tp)


def is_string_key(tp: Any) -> bool:
    """True if keys of type tp pack to string leaves (str or registered enum)."""
    return tp is str or is_enum(tp)


def type_name(tp: Any) -> str:
    """Readable name of a type for error messages."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace("typing.", "")


def _ordered_key(tp: Any) -> Any:
    args = get_args(tp)
    if not args:
        return tp
    return get_origin(tp), tuple(_ordered_key(a) for a in args)


@functools.lru_cache(maxsize=None)
def _shape(key: Any, tp: Any) -> TypeShape:
    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        return classify(args[0])

    if origin in _UNION_TYPES:
        alternatives = tuple(a for a in args if a is not NoneType)
        if len(alternatives) < len(args):
            if len(alternatives) == 1:
                return TypeShape(Kind.OPTIONAL, alternatives)
            return TypeShape(Kind.OPTIONAL, (Union[alternatives],))
        return TypeShape(Kind.VARIANT, alternatives)

    if tp is datetime.timedelta:
        return TypeShape(Kind.DURATION)

    container = origin if origin is not None else tp

    if container is tuple:
        if not args:
            return TypeShape(Kind.SEQUENCE, (Any,), tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeShape(Kind.SEQUENCE, (args[0],), tuple)
        return TypeShape(Kind.TUPLE, args, tuple)

    if not isinstance(container, type):
        return TypeShape(Kind.LEAF)

    if container in _SEQUENCE_ORIGINS:
        return TypeShape(Kind.SEQUENCE, args or (Any,), _SEQUENCE_ORIGINS[container])

    if container in _SET_ORIGINS:
        return TypeShape(Kind.SET, args or (Any,), _SET_ORIGINS[container])

    if container in _MAP_ORIGINS:
        return TypeShape(Kind.MAP, args or (Any, Any), _MAP_ORIGINS[container])

    return TypeShape(Kind.LEAF)
