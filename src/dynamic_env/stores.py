"""Variable stores — the backends behind each scope.

A store is the concrete place an environment scope lives on this
platform.  Every store offers the same four operations (``get``, ``set``,
``delete``, ``names``) so the handle never needs to know which one it
is talking to:

**ProcessStore** — the environment block of the running process
    (``os.environ``).  Changes are inherited by child processes started
    afterwards and vanish when the process exits.

**EnvironmentFileStore** — a persisted ``NAME=VALUE`` file.  Used for
    the user and machine scopes on Unix, where the OS reads such files
    (``/etc/environment``, ``environment.d``) at login.

**RegistryStore** — the Windows registry keys the OS loads user and
    machine variables from.

Stores hold no cached state: every call re-reads the backing storage,
so external changes are always visible.
"""

import os
import sys
from pathlib import Path
from typing import Protocol

from dynamic_env.config import Backend, Settings, load_settings
from dynamic_env.persistence import read_environment_file, remove_variable, write_variable
from dynamic_env.scope import Scope

if sys.platform == "win32":
    import ctypes
    import winreg


class VariableStore(Protocol):
    """The operations every scope backend supports."""

    def get(self, name: str) -> str | None:
        """Return the value of *name*, or ``None`` if it is not defined."""
        ...

    def set(self, name: str, value: str) -> None:
        """Define *name* as *value*."""
        ...

    def delete(self, name: str) -> None:
        """Remove *name*; a missing name is not an error."""
        ...

    def names(self) -> list[str]:
        """Return the currently defined names."""
        ...


class ProcessStore:
    """The current process's environment block."""

    def get(self, name: str) -> str | None:
        """Return the value of *name*, or ``None``."""
        return os.environ.get(name)

    def set(self, name: str, value: str) -> None:
        """Define *name*; illegal names raise whatever ``os.putenv`` raises."""
        os.environ[name] = value

    def delete(self, name: str) -> None:
        """Remove *name* if present."""
        os.environ.pop(name, None)

    def names(self) -> list[str]:
        """Return all names in the environment block."""
        return list(os.environ)

    def __repr__(self) -> str:
        """Return a readable representation."""
        return "ProcessStore()"


class EnvironmentFileStore:
    """A scope persisted as an environment file."""

    def __init__(self, path: Path) -> None:
        """Create a store backed by *path* (which need not exist yet)."""
        self._path = path

    @property
    def path(self) -> Path:
        """Return the backing file."""
        return self._path

    def get(self, name: str) -> str | None:
        """Return the value of *name* as currently persisted."""
        return read_environment_file(self._path).get(name)

    def set(self, name: str, value: str) -> None:
        """Persist *name* as *value*."""
        write_variable(self._path, name, value)

    def delete(self, name: str) -> None:
        """Remove *name*; the file is only rewritten if it changed."""
        remove_variable(self._path, name)

    def names(self) -> list[str]:
        """Return the persisted names."""
        return list(read_environment_file(self._path))

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"EnvironmentFileStore({str(self._path)!r})"


_USER_KEY = r"Environment"
_MACHINE_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"

# user32 constants for the settings-change broadcast.
_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002
_BROADCAST_TIMEOUT_MS = 1000


class RegistryStore:
    """A scope persisted in the Windows registry.

    Only constructible on Windows.  Writes notify running programs with
    a ``WM_SETTINGCHANGE`` broadcast so shells and Explorer pick up the
    new environment.
    """

    def __init__(self, scope: Scope) -> None:
        """Create a store for the user or machine scope.

        Raises:
            ValueError: If *scope* is the process scope.

        """
        if scope is Scope.PROCESS:
            msg = "The process scope is not stored in the registry"
            raise ValueError(msg)
        self._scope = scope

    def _open(self, access: int) -> "winreg.HKEYType":
        if self._scope is Scope.USER:
            return winreg.OpenKey(winreg.HKEY_CURRENT_USER, _USER_KEY, 0, access)
        return winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _MACHINE_KEY, 0, access)

    def get(self, name: str) -> str | None:
        """Return the registry value for *name*, or ``None``."""
        try:
            with self._open(winreg.KEY_READ) as key:
                value, _kind = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        return str(value)

    def set(self, name: str, value: str) -> None:
        """Write *name*, as ``REG_EXPAND_SZ`` if it references other variables."""
        kind = winreg.REG_EXPAND_SZ if "%" in value else winreg.REG_SZ
        with self._open(winreg.KEY_SET_VALUE) as key:
            winreg.SetValueEx(key, name, 0, kind, value)
        _broadcast_environment_change()

    def delete(self, name: str) -> None:
        """Remove *name* if present."""
        with self._open(winreg.KEY_SET_VALUE) as key:
            try:
                winreg.DeleteValue(key, name)
            except FileNotFoundError:
                return
        _broadcast_environment_change()

    def names(self) -> list[str]:
        """Return every value name under the scope's key."""
        result: list[str] = []
        with self._open(winreg.KEY_READ) as key:
            _subkeys, count, _modified = winreg.QueryInfoKey(key)
            for index in range(count):
                name, _value, _kind = winreg.EnumValue(key, index)
                result.append(name)
        return result

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"RegistryStore({self._scope.name})"


def _broadcast_environment_change() -> None:
    """Tell top-level windows that the environment changed."""
    result = ctypes.c_ulong()
    ctypes.windll.user32.SendMessageTimeoutW(
        _HWND_BROADCAST,
        _WM_SETTINGCHANGE,
        0,
        "Environment",
        _SMTO_ABORTIFHUNG,
        _BROADCAST_TIMEOUT_MS,
        ctypes.byref(result),
    )


def open_store(scope: Scope, settings: Settings | None = None) -> VariableStore:
    """Return the store that backs *scope* under *settings*.

    Args:
        scope: The scope to resolve.
        settings: Configuration to use; read from the environment if omitted.

    Returns:
        A store for the scope.

    """
    if scope is Scope.PROCESS:
        return ProcessStore()
    settings = settings or load_settings()
    if settings.backend is Backend.REGISTRY:
        return RegistryStore(scope)
    path = settings.user_file if scope is Scope.USER else settings.machine_file
    return EnvironmentFileStore(path)
