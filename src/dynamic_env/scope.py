"""Scopes — which environment an operation targets."""

from enum import IntEnum


class Scope(IntEnum):
    """The three places an environment variable can live.

    ``PROCESS`` is the running process's own environment block.  ``USER``
    and ``MACHINE`` are persisted by the OS and applied to new sessions
    of the current user or of every user respectively.
    """

    PROCESS = 0
    USER = 1
    MACHINE = 2

    @classmethod
    def parse(cls, text: str) -> "Scope":
        """Return the scope named *text* (case-insensitive).

        Raises:
            ValueError: If *text* names no scope.

        """
        try:
            return cls[text.strip().upper()]
        except KeyError:
            choices = ", ".join(s.name.lower() for s in cls)
            msg = f"Unknown scope {text!r} (expected one of {choices})"
            raise ValueError(msg) from None
