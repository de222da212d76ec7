"""Audit log for environment variable changes.

Every write to an environment store is a change to shared, long-lived
state: a persisted user or machine variable outlives the process that
set it.  The audit log answers "who touched ``PATH`` in the user scope,
and was anything refused?" for the lifetime of the process.

Handles record:

- an INFO entry for each successful ``set`` or ``delete``;
- a WARNING entry for each refused value or index, written just before
  the error is raised.

Reads are not recorded, and neither are values: environment variables
often hold credentials, so an entry names the variable and never its
content.  The buffer is bounded like ``dmesg``; past its capacity the
oldest entries fall off.

Recording an event must never change the outcome of the operation that
caused it, so the shared log never raises on a bad setting: an unusable
``DYNAMIC_ENV_LOG_CAPACITY`` falls back to the default capacity.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum

from dynamic_env.config import DEFAULT_LOG_CAPACITY, ConfigError, load_settings


class LogLevel(IntEnum):
    """How notable an audit event is; refusals rank above changes."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One audited operation.

    Attributes:
        level: INFO for changes, WARNING for refusals.
        message: What happened, e.g. ``"set PATH"`` or ``"rejected index 0"``.
        source: Lower-case scope name: ``process``, ``user`` or ``machine``.
        variable: The variable concerned; ``None`` when no name was resolved.

    """

    level: LogLevel
    message: str
    source: str
    variable: str | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] scope: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Bounded buffer of audit entries, oldest first."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        """Create an empty log holding at most *capacity* entries.

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity <= 0:
            msg = f"Log capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Return the maximum number of retained entries."""
        return self._entries.maxlen or 0

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of the retained entries."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        variable: str | None = None,
    ) -> None:
        """Record one event, evicting the oldest entry when full."""
        self._entries.append(
            LogEntry(level=level, message=message, source=source, variable=variable)
        )

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        variable: str | None = None,
    ) -> list[LogEntry]:
        """Return the entries matching every given criterion.

        Args:
            min_level: Keep entries at or above this level.
            source: Keep entries for this scope name.
            variable: Keep entries about this variable.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (variable is None or e.variable == variable)
        ]

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of retained entries."""
        return len(self._entries)


_audit_log: Logger | None = None


def _configured_capacity() -> int:
    try:
        return load_settings().log_capacity
    except ConfigError:
        return DEFAULT_LOG_CAPACITY


def get_audit_log() -> Logger:
    """Return the process-wide audit log, creating it on first use.

    The capacity is taken from ``DYNAMIC_ENV_LOG_CAPACITY`` at the time of
    the first call, or the default if the setting is unusable.
    """
    global _audit_log  # noqa: PLW0603
    if _audit_log is None:
        _audit_log = Logger(capacity=_configured_capacity())
    return _audit_log
