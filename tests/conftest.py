"""Shared fixtures: keep tests away from real persisted environments."""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from dynamic_env.config import BACKEND_VAR, MACHINE_FILE_VAR, USER_FILE_VAR
from dynamic_env.logging import get_audit_log


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point user/machine scope at temp files and restore os.environ afterwards."""
    saved = dict(os.environ)
    monkeypatch.setenv(BACKEND_VAR, "file")
    monkeypatch.setenv(USER_FILE_VAR, str(tmp_path / "user.env"))
    monkeypatch.setenv(MACHINE_FILE_VAR, str(tmp_path / "machine.env"))
    get_audit_log().clear()
    yield
    os.environ.clear()
    os.environ.update(saved)
