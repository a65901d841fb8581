"""Shared fixtures for the serde_hub test suite.

WHY: Several test modules need the same sample records and files.
Centralizing them here avoids duplication and keeps every module on the
same data.

HOW: The schema types themselves live in samples.py (registered once at
import); these fixtures build instances of them and write sample
documents under tmp_path.

RULES:
- All file I/O fixtures use tmp_path for isolation
"""

import pytest

from samples import Client, Config, Mode


@pytest.fixture
def sample_client():
    return Client(ip="127.0.0.1", port=8080)


@pytest.fixture
def sample_config():
    """A Config with two clients, the shape of a typical service config."""
    return Config(
        mode=Mode.Internal,
        clients={
            "alpha": Client(ip="127.0.0.1", port=8080),
            "beta": Client(ip="10.0.0.2", port=9090),
        },
        filters=["errors", "warnings"],
    )


@pytest.fixture
def sample_yaml(tmp_path):
    """A YAML service config file on disk."""
    path = tmp_path / "service.yaml"
    path.write_text(
        "mode: Internal\n"
        "clients:\n"
        "  alpha:\n"
        "    ip: 127.0.0.1\n"
        "    port: 8080\n"
        "filters:\n"
        "- errors\n",
        encoding="utf-8",
    )
    return path
