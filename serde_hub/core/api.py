"""Top-level conversion API: from_string, from_file, to_string.

WHY: Callers want one call per conversion and a value-or-error answer,
not a tree of exception types to catch. This is the single place where
exceptions raised anywhere in the pipeline are turned into a Result.

HOW: Each function resolves the backend, runs parse → unpack (or
pack → render) through the core dispatcher, and wraps the outcome.
Failures become "serde: on <phase>: <message>".

RULES:
- Never raises; every failure is reported inside the Result
- Phases: "parsing string", "parsing file", "emitting to string"
- from_file reads bytes for binary formats and text otherwise
- A file that cannot be read → "serde: on parsing file: file not found: <path>"
- Parse/convert errors after a file was read still report "parsing string"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

from serde_hub import config
from serde_hub.backends import get_backend
from serde_hub.backends.base import Data
from serde_hub.core import dispatch
from serde_hub.core.errors import FileNotFound, ParseError, SerdeError
from serde_hub.core.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

PARSING_STRING = "parsing string"
PARSING_FILE = "parsing file"
EMITTING = "emitting to string"


def from_string(fmt: Any, tp: Any, data: Data) -> Result[Any]:
    """Parse raw text or bytes in the given format into a value of type tp.

    Args:
        fmt: Format key ("json", "yaml", ...), backend class or instance.
        tp: Target type: a registered record or enum, a container, a leaf,
            or typing.Any for the untyped native tree.
        data: Document text, or bytes for the binary formats.

    Returns:
        Result holding the converted value, or the error message.
    """
    return _guard(PARSING_STRING, lambda: _decode(fmt, tp, data))


def from_file(fmt: Any, tp: Any, path: Union[str, Path]) -> Result[Any]:
    """Read a file and parse it like from_string()."""
    try:
        backend = get_backend(fmt)
        data = _read(path, backend.binary)
    except SerdeError as exc:
        return _failure(PARSING_FILE, exc)
    return _guard(PARSING_STRING, lambda: _decode(backend, tp, data))


def to_string(fmt: Any, value: Any, tp: Optional[Any] = None) -> Result[Data]:
    """Serialize a value in the given format.

    tp defaults to type(value); pass it explicitly for Optional, Union
    or container element types that cannot be inferred from the value.
    """
    def run() -> Data:
        backend = get_backend(fmt)
        return backend.render(dispatch.pack(backend, tp, value))

    return _guard(EMITTING, run)


def _decode(fmt: Any, tp: Any, data: Data) -> Any:
    backend = get_backend(fmt)
    return dispatch.unpack(backend, tp, backend.parse(data))


def _read(path: Union[str, Path], binary: bool) -> Data:
    path = Path(path)
    try:
        if binary:
            return path.read_bytes()
        return path.read_text(encoding=config.FILE_ENCODING)
    except UnicodeDecodeError as exc:
        raise ParseError(str(exc)) from exc
    except OSError as exc:
        raise FileNotFound(str(path)) from exc


def _guard(phase: str, run: Callable[[], T]) -> Result[T]:
    try:
        return Result.ok(run())
    except SerdeError as exc:
        return _failure(phase, exc)
    except Exception as exc:
        logger.exception("Unexpected error while %s", phase)
        return Result.fail("serde: on {}: {}".format(phase, str(exc) or type(exc).__name__))


def _failure(phase: str, exc: SerdeError) -> Result[Any]:
    logger.debug("Conversion failed while %s: %s", phase, exc)
    return Result.fail("serde: on {}: {}".format(phase, exc))
