"""Value-or-error wrapper returned by every public conversion.

WHY: Conversions fail for ordinary reasons (bad input, missing fields) and
callers should not need try/except around every call. A Result is
truthy on success and carries a readable message on failure.

HOW: Two named constructors, Result.ok() and Result.fail(). The value is
stored alongside an explicit success flag because None is a legitimate
converted value (an empty Optional at the document root).

RULES:
- A success has error == ""
- A failure has a non-empty error; an empty message is a LogicError
- Reading .value on a failure raises LogicError with the error message
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from serde_hub.core.errors import LogicError

T = TypeVar("T")

_NO_VALUE: Any = object()


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Any, error: str) -> None:
        if value is _NO_VALUE and not error:
            raise LogicError("Result error message must not be empty")
        if value is not _NO_VALUE and error:
            raise LogicError("Result cannot hold both a value and an error")
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(value, "")

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        return cls(_NO_VALUE, error)

    def __bool__(self) -> bool:
        return self._value is not _NO_VALUE

    @property
    def value(self) -> T:
        if self._value is _NO_VALUE:
            raise LogicError("Result holds no value: {}".format(self._error))
        return self._value

    @property
    def error(self) -> str:
        return self._error

    def __repr__(self) -> str:
        if self:
            return "Result.ok({!r})".format(self._value)
        return "Result.fail({!r})".format(self._error)
