"""Environment files — persisted variables as ``NAME=VALUE`` lines.

On Linux and other Unix systems the machine-wide environment lives in
``/etc/environment`` and per-user additions in files such as
``~/.config/environment.d/*.conf``.  Both use the same simple format,
one assignment per line::

    # comments and blank lines are allowed
    PATH="/usr/local/bin:/usr/bin"
    EDITOR=vim

Parsing and rewriting are done by python-dotenv, which understands
quoting, ``export`` prefixes and comments.  This module adds what an
OS-level file needs on top of that:

    - ``read_environment_file(path)`` — the defined variables, read
      literally (no ``${VAR}`` interpolation; a missing file is empty).
    - ``write_variable(path, name, value)`` — define one variable.
    - ``remove_variable(path, name)`` — remove one variable.

Key properties:
    - **Comments survive** — only the assignment being changed is
      rewritten.
    - **Names are checked first** — a name that could not be read back
      as an assignment is refused with ``ValueError``.
    - **Permission bits are kept** — a rewritten file keeps its mode and
      a new file is created world-readable (``0644``), as
      ``/etc/environment`` must be.
"""

import re
from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key

NEW_FILE_MODE = 0o644

_VALID_NAME = re.compile(r"[^=#\s'\"][^=#\s]*")


def check_name(name: str) -> None:
    """Raise ``ValueError`` if *name* cannot be written as an assignment."""
    if not _VALID_NAME.fullmatch(name):
        msg = f"illegal environment variable name: {name!r}"
        raise ValueError(msg)


def read_environment_file(path: Path) -> dict[str, str]:
    """Return the variables defined in *path*, in file order.

    Lines without ``=`` define nothing and are skipped.  A file that does
    not exist reads as empty: no variables have been persisted yet.
    """
    values = dotenv_values(path, interpolate=False, encoding="utf-8")
    return {name: value for name, value in values.items() if value is not None}


def write_variable(path: Path, name: str, value: str) -> None:
    """Define *name* as *value* in *path*, creating the file if needed.

    Raises:
        ValueError: If *name* cannot be written as an assignment.
        PermissionError: If the process may not write to *path*.

    """
    check_name(name)
    mode = _mode_of(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(mode=mode)
    set_key(path, name, value, quote_mode="always", encoding="utf-8")
    path.chmod(mode)


def remove_variable(path: Path, name: str) -> bool:
    """Remove every definition of *name*; return whether any existed.

    The file is only rewritten when it actually defines *name*.
    """
    if name not in read_environment_file(path):
        return False
    mode = _mode_of(path)
    unset_key(path, name, encoding="utf-8")
    path.chmod(mode)
    return True


def _mode_of(path: Path) -> int:
    try:
        return path.stat().st_mode & 0o7777
    except FileNotFoundError:
        return NEW_FILE_MODE
