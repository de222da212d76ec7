"""Scoped access to process, user, and machine environment variables.

Re-exports public symbols so callers can write::

    from dynamic_env import PROCESS, USER, EnvironmentHandle, Scope
"""

from dynamic_env.config import ConfigError, Settings, load_settings
from dynamic_env.env import (
    MACHINE,
    PROCESS,
    USER,
    EnvironmentHandle,
    IndexOutOfRangeError,
    InvalidArgumentError,
    resolve_index_key,
)
from dynamic_env.logging import LogEntry, Logger, LogLevel, get_audit_log
from dynamic_env.scope import Scope
from dynamic_env.stores import EnvironmentFileStore, ProcessStore, VariableStore, open_store

__all__ = [
    "MACHINE",
    "PROCESS",
    "USER",
    "ConfigError",
    "EnvironmentFileStore",
    "EnvironmentHandle",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "LogEntry",
    "LogLevel",
    "Logger",
    "ProcessStore",
    "Scope",
    "Settings",
    "VariableStore",
    "get_audit_log",
    "load_settings",
    "open_store",
    "resolve_index_key",
]
