"""
Shared fixtures for fsguard tests.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from fsguard.filesystem import config as config_module


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Isolate tests from the process-wide settings and FSGUARD_* variables."""
    for name in list(os.environ):
        if name.startswith("FSGUARD_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(config_module, "_settings", None)
    yield


@pytest.fixture
def temp_dir(tmp_path):
    """A temporary directory with symlinks in its own path resolved."""
    return Path(os.path.realpath(tmp_path))


@pytest.fixture
def shared_dir():
    """
    A directory every user can traverse.

    pytest's own temporary root is private to its owner, so tests that drop
    to another identity work below the system temporary directory instead.
    """
    path = Path(os.path.realpath(tempfile.mkdtemp(prefix="fsguard-")))
    path.chmod(0o755)
    yield path
    shutil.rmtree(path, ignore_errors=True)
