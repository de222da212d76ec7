"""Tests for the audit log.

The audit log records structured entries for environment changes and
rejected operations: what happened, in which scope, to which variable.
"""

import pytest

from dynamic_env.config import DEFAULT_LOG_CAPACITY
from dynamic_env.logging import LogEntry, Logger, LogLevel, get_audit_log


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, source, and variable."""
        entry = LogEntry(
            level=LogLevel.INFO,
            message="set PATH",
            source="user",
            variable="PATH",
        )
        assert entry.level is LogLevel.INFO
        assert entry.message == "set PATH"
        assert entry.source == "user"
        assert entry.variable == "PATH"

    def test_variable_is_optional(self) -> None:
        """Entries not about one variable should default to None."""
        entry = LogEntry(level=LogLevel.WARNING, message="rejected index 0", source="process")
        assert entry.variable is None

    def test_entry_str(self) -> None:
        """String representation should include level, source, and message."""
        entry = LogEntry(level=LogLevel.WARNING, message="rejected int value", source="machine")
        assert str(entry) == "[WARNING] machine: rejected int value"


class TestLogger:
    """Verify the logger."""

    def test_log_stores_entries(self) -> None:
        """Logged entries should be retrievable."""
        logger = Logger()
        logger.log(LogLevel.INFO, "set A", source="process", variable="A")
        assert len(logger.entries) == 1
        assert logger.entries[0].variable == "A"

    def test_entries_are_ordered(self) -> None:
        """Entries should be in chronological order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="process")
        logger.log(LogLevel.INFO, "second", source="process")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_entries_is_a_copy(self) -> None:
        """Mutating the returned list should not affect the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "kept", source="user")
        logger.entries.clear()
        assert len(logger) == 1

    def test_filter_by_level(self) -> None:
        """Filtering should return only entries at or above the level."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "debug msg", source="process")
        logger.log(LogLevel.INFO, "info msg", source="process")
        logger.log(LogLevel.ERROR, "error msg", source="process")
        warnings_and_above = logger.filter(min_level=LogLevel.WARNING)
        assert len(warnings_and_above) == 1
        assert warnings_and_above[0].level is LogLevel.ERROR

    def test_filter_by_source(self) -> None:
        """Filtering by source should return matching entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "user event", source="user")
        logger.log(LogLevel.INFO, "machine event", source="machine")
        user_logs = logger.filter(source="user")
        assert len(user_logs) == 1
        assert user_logs[0].source == "user"

    def test_filter_by_variable(self) -> None:
        """Filtering by variable should return that variable's history."""
        logger = Logger()
        logger.log(LogLevel.INFO, "set PATH", source="user", variable="PATH")
        logger.log(LogLevel.INFO, "set HOME", source="user", variable="HOME")
        logger.log(LogLevel.INFO, "deleted PATH", source="machine", variable="PATH")
        assert [e.message for e in logger.filter(variable="PATH")] == ["set PATH", "deleted PATH"]
        assert len(logger.filter(source="user", variable="PATH")) == 1

    def test_filter_without_criteria_returns_everything(self) -> None:
        """No criteria should return every entry."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "a", source="user")
        logger.log(LogLevel.ERROR, "b", source="machine")
        assert len(logger.filter()) == 2

    def test_capacity_drops_oldest(self) -> None:
        """Past the capacity, the oldest entries should be discarded."""
        logger = Logger(capacity=3)
        for i in range(5):
            logger.log(LogLevel.INFO, f"event {i}", source="process")
        assert logger.capacity == 3
        assert [e.message for e in logger.entries] == ["event 2", "event 3", "event 4"]

    def test_capacity_must_be_positive(self) -> None:
        """A zero capacity should be rejected."""
        with pytest.raises(ValueError, match="positive"):
            Logger(capacity=0)

    def test_clear(self) -> None:
        """Clearing should remove all log entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "test", source="process")
        logger.clear()
        assert len(logger.entries) == 0


class TestAuditLog:
    """Verify the process-wide audit log."""

    def test_unusable_capacity_falls_back_to_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A bad DYNAMIC_ENV_LOG_CAPACITY should not stop the log from being built."""
        monkeypatch.setattr("dynamic_env.logging._audit_log", None)
        monkeypatch.setenv("DYNAMIC_ENV_LOG_CAPACITY", "-3")
        assert get_audit_log().capacity == DEFAULT_LOG_CAPACITY

    def test_shared_instance(self) -> None:
        """get_audit_log should always return the same logger."""
        assert get_audit_log() is get_audit_log()

    def test_default_capacity(self) -> None:
        """The shared logger should use the configured capacity."""
        assert get_audit_log().capacity == 1000
