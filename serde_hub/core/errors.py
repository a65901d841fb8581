"""Exception taxonomy for the conversion engine.

WHY: Every conversion either succeeds or fails for one identifiable reason.
Callers of the top-level API only ever see a Result, but inside the
pipeline each failure is raised where it is detected so the message can
name exactly what went wrong (which field, which enumerator, which
alternative).

HOW: Two branches under SerdeError. DataError covers everything caused by
the input not fitting the schema; those are the only errors a variant
decode treats as "this alternative does not match". LogicError covers
broken invariants in a schema or in the library itself and is never
recovered from. FileNotFound sits apart because it happens before any
parsing.

RULES:
- Raise at the point of detection, never catch-and-retry inside the core
- Only the top-level API converts exceptions into Result errors
- Backends map third-party library exceptions to ParseError/StructureError
- DataError carries an optional field path, extended as the error bubbles
  up through nested records
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class SerdeError(Exception):
    """Base class for every error raised by serde_hub."""


class DataError(SerdeError):
    """The input does not fit the target type.

    WHY: Nested records produce errors deep inside the tree. A bare
    "missing field: port" is not enough to locate the problem in a large
    document, so the record routine prepends each enclosing field name.

    RULES:
    - path is outermost-first, e.g. ["clients", "alpha", "port"]
    - Sequence positions are recorded as "[3]" and attach without a dot
    - str() renders "at clients.alpha.port: <message>" when a path exists
    """

    def __init__(self, message: str, path: Optional[Sequence[str]] = None) -> None:
        self.message = message
        self.path: List[str] = list(path or [])
        super().__init__(message)

    def add_context(self, name: str) -> None:
        """Prepend an enclosing field or key name to the error path."""
        self.path.insert(0, name)

    @property
    def location(self) -> str:
        text = ""
        for part in self.path:
            if text and not part.startswith("["):
                text += "."
            text += part
        return text

    def __str__(self) -> str:
        if self.path:
            return "at {}: {}".format(self.location, self.message)
        return self.message


class ParseError(DataError):
    """The raw text or bytes are not valid for the wire format."""


class StructureError(DataError):
    """A Node does not have the shape the target type expects."""


class UnsupportedKeyError(StructureError):
    """A map key cannot be expressed in the backend's key space.

    WHY: TOML tables only have string keys, and the empty key is not
    accepted either. Coercing keys silently would break the round-trip
    property, so the backend refuses instead.
    """


class MissingField(DataError):
    """A required record field is absent and declares no default."""

    def __init__(self, record: str, field: str) -> None:
        self.record = record
        self.field = field
        super().__init__("{}: missing field '{}'".format(record, field))


class UnknownEnumName(DataError):
    """A decoded string matches no enumerator of the target enum."""

    def __init__(self, enum: str, name: str) -> None:
        self.enum = enum
        self.name = name
        super().__init__("{}: bad enum value '{}'".format(enum, name))


class VariantNoMatch(DataError):
    """No alternative of a variant decoded the Node.

    HOW: Carries one (alternative, reason) pair per attempt so the message
    explains why each alternative was rejected.
    """

    def __init__(self, attempts: Sequence[tuple]) -> None:
        self.attempts = list(attempts)
        reasons = "; ".join("{}: {}".format(alt, reason) for alt, reason in self.attempts)
        super().__init__("no variant alternative matched ({})".format(reasons))


class FileNotFound(SerdeError):
    """The input file could not be read."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("file not found: {}".format(path))


class LogicError(SerdeError):
    """A schema or library invariant was violated.

    WHY: Some failures can only happen when the caller or the library is
    wrong, never because of the input: packing an enum value that has no
    descriptor, a record member without a value, a Node handed to the wrong
    backend. These must not be mistaken for data errors, so variant
    decoding lets them propagate.
    """
