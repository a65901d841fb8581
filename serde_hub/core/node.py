"""Intermediate Node shared between the core and the backends.

WHY: The core never looks inside a backend's tree. It only passes Nodes
from one backend operation to another, so the Node has to remember which
backend produced it. Handing a YAML node to the JSON backend is a library
bug, and the backends use the tag to catch it.

RULES:
- backend is the format key of the producing backend ("json", "yaml", ...)
- value is the backend's native representation and is opaque to the core
- A Node is owned by the call that produced it and is not shared
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Node:
    """One parsed document, or one value about to be serialized."""

    backend: str
    value: Any
