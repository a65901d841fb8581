"""Record and enum schemas: field descriptors, defaults and registration.

WHY: A record type is described once, as an ordered list of named fields
with optional defaults, and every backend converts it from that single
description. The same goes for enumerations: one ordered list of
(symbolic name, value) pairs drives the name mapping in every format.

HOW: Registration attaches a Schema (records) or EnumSchema (enums) to
the class itself. Two forms are offered for each:
  @serde_record / @serde_enum         : derive the schema from a dataclass
                                        or Enum declaration
  register_record / register_enum     : spell the fields or names out
                                        explicitly, for classes that are
                                        not dataclasses or for symbolic
                                        names that differ from Python names
Record field types are resolved lazily, on first conversion, so a record
may refer to a record declared further down the same module.

RULES:
- A type is registered exactly once; a second registration is a LogicError
- Field names within a record are unique; so are enumerator names
- An enum schema covers every enumerator of its class
- A field typed Optional[T], Any or None without a default gets the
  implicit default None
- default_factory is called per conversion (fresh mutable defaults)
"""

from __future__ import annotations

import dataclasses
import enum
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Type, TypeVar, Union

from serde_hub.core.classify import (
    ENUM_ATTR,
    SCHEMA_ATTR,
    Kind,
    NoneType,
    classify,
    is_enum,
    is_record,
)
from serde_hub.core.errors import LogicError, StructureError
from serde_hub.core.node import Node


class _Missing:
    """Marker for a field without a default."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class Field:
    """Descriptor for one record field.

    Attributes:
        name: Key used in every wire format.
        type: Declared Python type; drives recursive conversion.
        default: Value used when the field is absent, or MISSING.
        default_factory: Zero-argument callable producing the default,
                         or MISSING. Mutually exclusive with default.
    """

    name: str
    type: Any = Any
    default: Any = MISSING
    default_factory: Any = MISSING

    def __post_init__(self) -> None:
        if self.default is not MISSING and self.default_factory is not MISSING:
            raise LogicError(
                "field '{}' declares both default and default_factory".format(self.name)
            )

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not MISSING

    def make_default(self) -> Any:
        if self.default_factory is not MISSING:
            return self.default_factory()
        if self.default is not MISSING:
            return self.default
        raise LogicError("field '{}' has no default".format(self.name))


@dataclass(frozen=True)
class EnumMember:
    """Descriptor for one enumerator: its symbolic name and its value."""

    name: str
    value: Any


@dataclass
class Member:
    """One record field paired with its packed node.

    node is None when the instance being packed lacks the attribute, which
    pack_record reports as a LogicError.
    """

    name: str
    node: Optional[Node]


FieldSpec = Union[Field, Tuple[Any, ...]]


class Schema:
    """The ordered field descriptors of one record type.

    WHY: Backends need the field list to build or inspect a keyed
    structure, and the core needs a way to construct the record once all
    fields are resolved.

    HOW: Holds the declared fields (or derives them from the dataclass on
    first access) and a factory called with one keyword argument per field.
    """

    def __init__(
        self,
        cls: type,
        fields: Optional[Sequence[Field]] = None,
        factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.cls = cls
        self.name = cls.__name__
        self._declared = tuple(fields) if fields is not None else None
        self._factory = factory or cls
        self._fields: Optional[Tuple[Field, ...]] = None

    @property
    def fields(self) -> Tuple[Field, ...]:
        if self._fields is None:
            declared = self._declared if self._declared is not None else _dataclass_fields(self.cls)
            self._fields = tuple(_with_implicit_default(f) for f in declared)
        return self._fields

    def build(self, values: Dict[str, Any]) -> Any:
        """Construct one record instance from fully resolved field values."""
        try:
            return self._factory(**values)
        except TypeError as exc:
            raise LogicError("cannot construct {}: {}".format(self.name, exc)) from exc
        except ValueError as exc:
            raise StructureError("{}: {}".format(self.name, exc)) from exc

    def __repr__(self) -> str:
        return "Schema({}, [{}])".format(self.name, ", ".join(f.name for f in self.fields))


class EnumSchema:
    """The ordered enumerator descriptors of one enum type."""

    def __init__(self, cls: type, members: Sequence[EnumMember]) -> None:
        self.cls = cls
        self.name = cls.__name__
        self.members: Tuple[EnumMember, ...] = tuple(members)

    def __repr__(self) -> str:
        return "EnumSchema({}, [{}])".format(self.name, ", ".join(m.name for m in self.members))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def serde_record(cls: C) -> C:
    """Class decorator registering a dataclass as a record.

    Field order, types and defaults come from the dataclass declaration.
    Apply it above @dataclass::

        @serde_record
        @dataclass
        class Client:
            ip: str
            port: int = 8080
    """
    if not dataclasses.is_dataclass(cls):
        raise LogicError(
            "@serde_record needs a dataclass; use register_record() for {}".format(cls.__name__)
        )
    _attach(cls, SCHEMA_ATTR, Schema(cls))
    return cls


def register_record(
    cls: C,
    fields: Iterable[FieldSpec],
    factory: Optional[Callable[..., Any]] = None,
) -> C:
    """Register any class as a record with an explicit field list.

    WHY: Not every type is a dataclass. This is the non-intrusive form:
    spell out each field as a Field or as a (name, type[, default]) tuple.

    RULES:
    - factory(**values) builds an instance; defaults to cls itself
    - Packing reads each field with getattr(instance, name)
    """
    declared = [_as_field(spec) for spec in fields]
    names = [f.name for f in declared]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise LogicError("{}: duplicate field names {}".format(cls.__name__, duplicates))
    _attach(cls, SCHEMA_ATTR, Schema(cls, declared, factory))
    return cls


def schema_of(tp: Any) -> Schema:
    if not is_record(tp):
        raise LogicError("{!r} is not a registered record".format(tp))
    return tp.__dict__[SCHEMA_ATTR]


def _as_field(spec: FieldSpec) -> Field:
    if isinstance(spec, Field):
        return spec
    if isinstance(spec, tuple) and len(spec) in (2, 3):
        return Field(*spec)
    raise LogicError("bad field spec {!r}; expected Field or (name, type[, default])".format(spec))


def _dataclass_fields(cls: type) -> Tuple[Field, ...]:
    try:
        hints = typing.get_type_hints(cls)
    except NameError as exc:
        raise LogicError("cannot resolve field types of {}: {}".format(cls.__name__, exc)) from exc
    return tuple(
        Field(
            f.name,
            hints.get(f.name, Any),
            _default_or_missing(f.default),
            _default_or_missing(f.default_factory),
        )
        for f in dataclasses.fields(cls)
        if f.init
    )


def _default_or_missing(value: Any) -> Any:
    return MISSING if value is dataclasses.MISSING else value


def _with_implicit_default(f: Field) -> Field:
    # Types that hold None read an absent or null entry as None
    holds_none = f.type is Any or f.type is NoneType or classify(f.type).kind is Kind.OPTIONAL
    if not f.has_default and holds_none:
        return dataclasses.replace(f, default=None)
    return f


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


def serde_enum(cls: Type[enum.Enum]) -> Type[enum.Enum]:
    """Class decorator registering an Enum; symbolic names are member names."""
    return register_enum(cls)


def register_enum(
    cls: Type[enum.Enum],
    members: Optional[Iterable[Tuple[str, Any]]] = None,
) -> Type[enum.Enum]:
    """Register an Enum with an explicit (name, value) list.

    WHY: Wire names sometimes differ from Python member names
    ("external" vs Mode.EXTERNAL). Declaring the pairs explicitly keeps the
    mapping in one place.

    RULES:
    - Every enumerator of cls must appear exactly once among the values
    - Names must be unique; matching is exact and case-sensitive
    """
    if not (isinstance(cls, type) and issubclass(cls, enum.Enum)):
        raise LogicError("{!r} is not an Enum".format(cls))
    pairs = list(members) if members is not None else [(m.name, m) for m in cls]
    declared = [EnumMember(name, value) for name, value in pairs]

    names = [m.name for m in declared]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise LogicError("{}: duplicate enumerator names {}".format(cls.__name__, duplicates))
    strays = [m.value for m in declared if not isinstance(m.value, cls)]
    if strays:
        raise LogicError("{}: values {!r} are not members".format(cls.__name__, strays))
    uncovered = [m.name for m in cls if m not in {d.value for d in declared}]
    if uncovered:
        raise LogicError("{}: enumerators without a name {}".format(cls.__name__, uncovered))

    _attach(cls, ENUM_ATTR, EnumSchema(cls, declared))
    return cls


def enum_schema_of(tp: Any) -> EnumSchema:
    if not is_enum(tp):
        raise LogicError("{!r} is not a registered enum".format(tp))
    return tp.__dict__[ENUM_ATTR]


def _attach(cls: type, attr: str, schema: Any) -> None:
    if is_record(cls) or is_enum(cls):
        raise LogicError("{} is already registered".format(cls.__name__))
    setattr(cls, attr, schema)
