"""Configuration defaults, file-extension mapping, and .env loading.

WHY: Output style (JSON indentation, YAML indentation) and file handling
(text encoding, which suffix means which format) are plain data that
users want to tweak without touching code. Keeping them here, as
module-level constants, makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Each setting reads an
environment variable with a fallback. FORMAT_EXTENSIONS maps file
suffixes to backend keys; format_for_path() gives a clear error for
unknown suffixes.

RULES:
- SERDE_JSON_INDENT unset or empty → compact JSON (no whitespace)
- SERDE_YAML_INDENT defaults to 2
- SERDE_FILE_ENCODING is used for text formats only; binary formats
  are always read and written as bytes
- Suffix matching is case-insensitive
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from the working directory (where the tool is run from)
load_dotenv()


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw)) from None


# ---------------------------------------------------------------------------
# Output style
# ---------------------------------------------------------------------------

JSON_INDENT: Optional[int] = _int_env("SERDE_JSON_INDENT", None)
YAML_INDENT: int = _int_env("SERDE_YAML_INDENT", 2) or 2

# ---------------------------------------------------------------------------
# File handling
# ---------------------------------------------------------------------------

FILE_ENCODING = os.getenv("SERDE_FILE_ENCODING", "utf-8")

FORMAT_EXTENSIONS: dict[str, str] = {
    ".json": "json",
    ".cbor": "cbor",
    ".msgpack": "msgpack",
    ".mpk": "msgpack",
    ".ubj": "ubjson",
    ".ubjson": "ubjson",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
}
"""File suffix (lowercase, with dot) → backend key."""


def format_for_path(path: str | Path) -> str:
    """Guess the backend key from a file's suffix.

    RULES:
    - Raises ValueError for suffixes not in FORMAT_EXTENSIONS
    """
    suffix = Path(path).suffix.lower()
    try:
        return FORMAT_EXTENSIONS[suffix]
    except KeyError:
        known = ", ".join(sorted(FORMAT_EXTENSIONS))
        raise ValueError(
            "Cannot tell the format of '{}' from its suffix. Known suffixes: {}".format(path, known)
        ) from None
