"""Pytest configuration for fluent_validator tests."""

import os
import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from fluent_validator import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings and no environment overrides."""
    for key in list(os.environ):
        if key.startswith("FLUENT_VALIDATOR_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()
