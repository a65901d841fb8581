"""Wire format backend registry.

WHY: The API and the CLI need a single lookup to find the right backend
by name. A central dict makes it trivial to add new formats: create the
backend class, import it here, add one line.

HOW: BACKENDS maps format keys to backend *classes* (not instances).
get_backend() accepts a key, a class or an instance and returns an
instance ready to use.

RULES:
- Keys are lowercase identifiers (used in CLI flags and file lookups)
- Values are BaseBackend subclasses (not instances)
- Every backend listed here must be importable without side effects
"""

from __future__ import annotations

from typing import Any, Union

from serde_hub.backends.base import BaseBackend
from serde_hub.backends.binary_json import CborBackend, MsgPackBackend, UbjsonBackend
from serde_hub.backends.json_backend import JsonBackend
from serde_hub.backends.toml_backend import TomlBackend
from serde_hub.backends.yaml_backend import YamlBackend
from serde_hub.core.errors import LogicError

BACKENDS: dict[str, type[BaseBackend]] = {
    "json": JsonBackend,
    "cbor": CborBackend,
    "msgpack": MsgPackBackend,
    "ubjson": UbjsonBackend,
    "toml": TomlBackend,
    "yaml": YamlBackend,
}

Format = Union[str, BaseBackend, "type[BaseBackend]"]


def get_backend(fmt: Any) -> BaseBackend:
    """Resolve a format key, backend class or backend instance.

    Raises LogicError for unknown keys and for objects that are not
    backends.
    """
    if isinstance(fmt, BaseBackend):
        return fmt
    if isinstance(fmt, type) and issubclass(fmt, BaseBackend):
        return fmt()
    if isinstance(fmt, str):
        try:
            return BACKENDS[fmt.lower()]()
        except KeyError:
            raise LogicError(
                "unknown format '{}'. Available: {}".format(fmt, ", ".join(BACKENDS))
            ) from None
    raise LogicError("not a format: {!r}".format(fmt))


__all__ = [
    "BACKENDS",
    "BaseBackend",
    "CborBackend",
    "Format",
    "JsonBackend",
    "MsgPackBackend",
    "TomlBackend",
    "UbjsonBackend",
    "YamlBackend",
    "get_backend",
]
