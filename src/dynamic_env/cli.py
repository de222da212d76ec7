"""Command-line interface — ``dynamic-env``.

Usage::

    dynamic-env [--scope process|user|machine] COMMAND [ARGS]

    get NAME           print the value of NAME (exit 1 if unset)
    set NAME=VALUE     define NAME
    unset NAME         remove NAME
    list               print every NAME=VALUE pair
    help               show this summary

Like the shell it borrows its structure from, command handlers return
their output (``None`` for no output) and never print; ``main`` is the
thin I/O wrapper that prints the result and picks the exit status.
As with ``printenv``, ``get`` of an unset variable prints nothing and
exits 1, while an empty variable prints an empty line and exits 0.
"""

import sys
from collections.abc import Callable
from typing import TypeAlias

from dynamic_env.env import EnvironmentHandle
from dynamic_env.scope import Scope

# Type alias for a command handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str | None]

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


class UsageError(Exception):
    """Raised when a command line cannot be interpreted."""


class NotSetError(LookupError):
    """Raised by ``get`` when the variable is not defined."""


class EnvCommands:
    """Dispatch ``dynamic-env`` commands against one environment handle."""

    def __init__(self, *, handle: EnvironmentHandle) -> None:
        """Create a dispatcher operating on *handle*."""
        self._handle = handle
        self._commands: dict[str, _Handler] = {
            "get": self._cmd_get,
            "set": self._cmd_set,
            "unset": self._cmd_unset,
            "list": self._cmd_list,
            "help": self._cmd_help,
        }

    @property
    def command_names(self) -> list[str]:
        """Return the available command names."""
        return sorted(self._commands)

    def execute(self, args: list[str]) -> str | None:
        """Run the command in ``args[0]`` with the remaining arguments.

        Raises:
            UsageError: If the command is unknown or malformed.
            NotSetError: If ``get`` names an undefined variable.

        """
        if not args:
            raise UsageError(self._cmd_help([]))
        handler = self._commands.get(args[0])
        if handler is None:
            msg = f"Unknown command: {args[0]}"
            raise UsageError(msg)
        return handler(args[1:])

    def _cmd_get(self, args: list[str]) -> str:
        """Print a variable's value."""
        if len(args) != 1:
            msg = "Usage: get NAME"
            raise UsageError(msg)
        value = self._handle.get(args[0])
        if value is None:
            raise NotSetError(args[0])
        return value

    def _cmd_set(self, args: list[str]) -> None:
        """Define a variable (NAME=VALUE)."""
        if len(args) != 1 or "=" not in args[0]:
            msg = "Usage: set NAME=VALUE"
            raise UsageError(msg)
        name, value = args[0].split("=", 1)
        if not name:
            msg = "Usage: set NAME=VALUE"
            raise UsageError(msg)
        self._handle.set(name, value)

    def _cmd_unset(self, args: list[str]) -> None:
        """Remove a variable."""
        if len(args) != 1:
            msg = "Usage: unset NAME"
            raise UsageError(msg)
        self._handle.delete(args[0])

    def _cmd_list(self, args: list[str]) -> str | None:
        """List every variable in the scope."""
        if args:
            msg = "Usage: list"
            raise UsageError(msg)
        items = sorted(self._handle.items())
        return "\n".join(f"{k}={v}" for k, v in items) if items else None

    def _cmd_help(self, _args: list[str]) -> str:
        """Show the command summary."""
        lines = ["Usage: dynamic-env [--scope process|user|machine] COMMAND [ARGS]", ""]
        lines.extend(f"  {name:<6} {self._commands[name].__doc__}" for name in self.command_names)
        return "\n".join(lines)


def split_scope(args: list[str]) -> tuple[Scope, list[str]]:
    """Pull a leading ``--scope NAME`` / ``--scope=NAME`` option off *args*.

    Raises:
        UsageError: If the option is missing its value or names no scope.

    """
    if not args or not args[0].startswith("--scope"):
        return Scope.PROCESS, args
    option, rest = args[0], args[1:]
    if option.startswith("--scope="):
        value = option.removeprefix("--scope=")
    elif option == "--scope" and rest:
        value, rest = rest[0], rest[1:]
    else:
        msg = "Usage: --scope process|user|machine"
        raise UsageError(msg)
    try:
        return Scope.parse(value), rest
    except ValueError as e:
        raise UsageError(str(e)) from None


def main(argv: list[str] | None = None) -> int:
    """Run one ``dynamic-env`` command and return its exit status.

    This is the ``dynamic-env`` console entry point.
    """
    args = sys.argv[1:] if argv is None else argv
    try:
        scope, rest = split_scope(args)
        output = EnvCommands(handle=EnvironmentHandle.for_scope(scope)).execute(rest)
    except UsageError as e:
        print(e, file=sys.stderr)  # noqa: T201
        return EXIT_USAGE
    except NotSetError:
        return EXIT_ERROR
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_ERROR
    if output is not None:
        print(output)  # noqa: T201
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
