"""Runtime settings, read from the process environment.

The package has very little to configure: where the user and machine
scopes live on platforms without a registry, which backend to use, and
how many audit entries to keep.  All of it comes from ``DYNAMIC_ENV_*``
variables so that deployments and test suites can redirect the
persisted scopes without touching code:

=============================  ==========================================
``DYNAMIC_ENV_BACKEND``        ``auto``, ``file`` or ``registry``
``DYNAMIC_ENV_USER_FILE``      environment file for the user scope
``DYNAMIC_ENV_MACHINE_FILE``   environment file for the machine scope
``DYNAMIC_ENV_LOG_CAPACITY``   number of audit log entries retained
=============================  ==========================================

Settings are cheap to build and are re-read on every store lookup, so a
change to one of these variables takes effect on the next operation.
"""

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

BACKEND_VAR = "DYNAMIC_ENV_BACKEND"
USER_FILE_VAR = "DYNAMIC_ENV_USER_FILE"
MACHINE_FILE_VAR = "DYNAMIC_ENV_MACHINE_FILE"
LOG_CAPACITY_VAR = "DYNAMIC_ENV_LOG_CAPACITY"

DEFAULT_MACHINE_FILE = Path("/etc/environment")
DEFAULT_LOG_CAPACITY = 1000


class ConfigError(ValueError):
    """Raised when a ``DYNAMIC_ENV_*`` setting has an unusable value."""


class Backend(StrEnum):
    """Storage backend for the persisted (user and machine) scopes."""

    AUTO = "auto"
    FILE = "file"
    REGISTRY = "registry"


def default_user_file() -> Path:
    """Return the default environment file for the user scope."""
    return Path.home() / ".config" / "environment.d" / "dynamic-env.conf"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration.

    Attributes:
        backend: Backend for user/machine scope; never ``AUTO``.
        user_file: Environment file used for user scope by the file backend.
        machine_file: Environment file used for machine scope by the file backend.
        log_capacity: Maximum number of audit log entries retained.

    """

    backend: Backend
    user_file: Path
    machine_file: Path
    log_capacity: int = DEFAULT_LOG_CAPACITY

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from *environ* (``os.environ`` by default).

        Raises:
            ConfigError: If the backend name or log capacity is invalid.

        """
        env = os.environ if environ is None else environ
        return cls(
            backend=_parse_backend(env.get(BACKEND_VAR)),
            user_file=_parse_path(env.get(USER_FILE_VAR)) or default_user_file(),
            machine_file=_parse_path(env.get(MACHINE_FILE_VAR)) or DEFAULT_MACHINE_FILE,
            log_capacity=_parse_capacity(env.get(LOG_CAPACITY_VAR)),
        )


def load_settings() -> Settings:
    """Return settings for the current process environment."""
    return Settings.from_environ()


def _parse_backend(raw: str | None) -> Backend:
    text = (raw or Backend.AUTO).strip().lower()
    try:
        backend = Backend(text)
    except ValueError:
        choices = ", ".join(b.value for b in Backend)
        msg = f"{BACKEND_VAR} must be one of {choices}, got {raw!r}"
        raise ConfigError(msg) from None
    if backend is Backend.AUTO:
        return Backend.REGISTRY if sys.platform == "win32" else Backend.FILE
    if backend is Backend.REGISTRY and sys.platform != "win32":
        msg = f"{BACKEND_VAR}=registry is only available on Windows"
        raise ConfigError(msg)
    return backend


def _parse_path(raw: str | None) -> Path | None:
    if not raw:
        return None
    return Path(raw).expanduser()


def _parse_capacity(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_LOG_CAPACITY
    try:
        capacity = int(raw)
    except ValueError:
        msg = f"{LOG_CAPACITY_VAR} must be an integer, got {raw!r}"
        raise ConfigError(msg) from None
    if capacity <= 0:
        msg = f"{LOG_CAPACITY_VAR} must be positive, got {capacity}"
        raise ConfigError(msg)
    return capacity
