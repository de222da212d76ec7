"""Environment handles — scoped access to environment variables.

An environment variable is a ``NAME=VALUE`` string pair.  Where it lives
depends on its **scope**:

    - **Process** — the running process's environment block, inherited
      by child processes started afterwards.
    - **User** — persisted for the current user; new sessions see it.
    - **Machine** — persisted for every user on the machine.

An ``EnvironmentHandle`` is bound to exactly one scope and forwards every
operation to that scope's store.  It has no other state, so two handles
for the same scope are interchangeable, and nothing is cached: each call
reads the live environment.

Three ways to reach a variable::

    PROCESS.get("HOME")          # explicit methods
    PROCESS["HOME"]              # index access
    PROCESS.HOME                 # member access

Key design properties:
    - **Absent is None** — a missing variable reads as ``None``, never as
      an error and never as ``""`` (an empty string is a real value).
    - **Strings only** — assigning anything other than ``str`` or ``None``
      raises ``InvalidArgumentError`` before any store is touched.
    - **One string index** — index access accepts exactly one ``str``;
      ``env[0]`` or ``env["A", "B"]`` raise ``IndexOutOfRangeError``.
    - **Assigning None deletes** — in the handle's own scope.
"""

from collections.abc import Iterator

from dynamic_env.logging import LogLevel, get_audit_log
from dynamic_env.scope import Scope
from dynamic_env.stores import open_store


class InvalidArgumentError(TypeError):
    """Raised when a variable is assigned a value that is not a string.

    Attributes:
        param: The name of the offending parameter.

    """

    def __init__(self, message: str, *, param: str) -> None:
        """Create the error for parameter *param*."""
        super().__init__(f"{message} (parameter '{param}')")
        self.param = param


class IndexOutOfRangeError(IndexError):
    """Raised when index access is not given exactly one string index."""


def resolve_index_key(indexes: tuple[object, ...]) -> str:
    """Return the variable name addressed by an index expression.

    Python delivers ``env["A"]`` as the single key ``"A"`` and
    ``env["A", "B"]`` as the tuple ``("A", "B")``; callers normalise to a
    tuple before calling this.

    Args:
        indexes: The index arguments.

    Returns:
        The single string index.

    Raises:
        IndexOutOfRangeError: Unless *indexes* holds exactly one ``str``.

    """
    if len(indexes) != 1 or not isinstance(indexes[0], str):
        msg = "Index must be of type str"
        raise IndexOutOfRangeError(msg)
    return indexes[0]


class EnvironmentHandle:
    """Accessor for the environment variables of one scope.

    Member access is routed to variables for any name that is not an
    attribute of the handle itself.  Names starting with an underscore
    and names shadowed by methods (``get``, ``items``, ``scope`` ...) are
    only reachable through ``get`` or index access.
    """

    __slots__ = ("_scope",)

    def __init__(self, scope: Scope = Scope.PROCESS) -> None:
        """Create a handle bound to *scope* (process scope by default)."""
        object.__setattr__(self, "_scope", Scope(scope))

    @classmethod
    def for_scope(cls, scope: Scope) -> "EnvironmentHandle":
        """Return the shared handle for *scope*."""
        return _SHARED[Scope(scope)]

    @property
    def scope(self) -> Scope:
        """Return the scope this handle is bound to."""
        return self._scope

    # -- Named operations -------------------------------------------------

    def get(self, name: str) -> str | None:
        """Return the value of *name*, or ``None`` if it is not defined."""
        return open_store(self._scope).get(name)

    def set(self, name: str, value: str | None) -> None:
        """Set *name* to *value*; ``None`` deletes the variable.

        Raises:
            InvalidArgumentError: If *value* is neither ``str`` nor ``None``.

        """
        if value is not None and not isinstance(value, str):
            self._audit(
                LogLevel.WARNING,
                f"rejected {type(value).__name__} value for {name}",
                name,
            )
            msg = "Value must be of type str"
            raise InvalidArgumentError(msg, param="value")
        if value is None:
            self.delete(name)
            return
        open_store(self._scope).set(name, value)
        self._audit(LogLevel.INFO, f"set {name}", name)

    def delete(self, name: str) -> None:
        """Remove *name* from this handle's scope; missing names are ignored."""
        open_store(self._scope).delete(name)
        self._audit(LogLevel.INFO, f"deleted {name}", name)

    def list_names(self) -> list[str]:
        """Return the names currently defined in this scope."""
        return open_store(self._scope).names()

    def items(self) -> list[tuple[str, str]]:
        """Return all ``(name, value)`` pairs currently defined."""
        store = open_store(self._scope)
        pairs: list[tuple[str, str]] = []
        for name in store.names():
            value = store.get(name)
            if value is not None:
                pairs.append((name, value))
        return pairs

    # -- Index access -----------------------------------------------------

    def _key(self, key: object) -> str:
        indexes = key if isinstance(key, tuple) else (key,)
        try:
            return resolve_index_key(indexes)
        except IndexOutOfRangeError:
            self._audit(LogLevel.WARNING, f"rejected index {key!r}", None)
            raise

    def __getitem__(self, key: object) -> str | None:
        """Return ``self.get(key)`` for a single string index."""
        return self.get(self._key(key))

    def __setitem__(self, key: object, value: object) -> None:
        """Call ``self.set(key, value)`` for a single string index."""
        self.set(self._key(key), value)  # type: ignore[arg-type]

    def __delitem__(self, key: object) -> None:
        """Call ``self.delete(key)`` for a single string index."""
        self.delete(self._key(key))

    # -- Member access ----------------------------------------------------

    def __getattr__(self, name: str) -> str | None:
        """Return the variable *name* (only reached for unknown attributes)."""
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: object) -> None:
        """Set the variable *name* to *value*."""
        self._check_member(name)
        self.set(name, value)  # type: ignore[arg-type]

    def __delattr__(self, name: str) -> None:
        """Delete the variable *name*."""
        self._check_member(name)
        self.delete(name)

    def _check_member(self, name: str) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            msg = f"'{type(self).__name__}' attribute {name!r} is not a variable"
            raise AttributeError(msg)

    def __dir__(self) -> list[str]:
        """Return the handle's attributes plus the variable names."""
        return sorted(set(super().__dir__()) | set(self.list_names()))

    # -- Container protocol -----------------------------------------------

    def __iter__(self) -> Iterator[str]:
        """Iterate over a snapshot of the defined names."""
        return iter(self.list_names())

    def __contains__(self, name: object) -> bool:
        """Return whether *name* is defined in this scope."""
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        """Return the number of defined variables."""
        return len(self.list_names())

    def __bool__(self) -> bool:
        """A handle is always truthy, even for an empty scope."""
        return True

    # -- Identity ---------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Handles are equal when they are bound to the same scope."""
        if not isinstance(other, EnvironmentHandle):
            return NotImplemented
        return self._scope is other._scope

    def __hash__(self) -> int:
        """Hash by scope."""
        return hash((EnvironmentHandle, self._scope))

    def __reduce__(self) -> tuple[type["EnvironmentHandle"], tuple[Scope]]:
        """Pickle and copy by scope."""
        return (type(self), (self._scope,))

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"EnvironmentHandle({self._scope.name})"

    def _audit(self, level: LogLevel, message: str, variable: str | None) -> None:
        get_audit_log().log(level, message, source=self._scope.name.lower(), variable=variable)


PROCESS = EnvironmentHandle(Scope.PROCESS)
USER = EnvironmentHandle(Scope.USER)
MACHINE = EnvironmentHandle(Scope.MACHINE)

_SHARED = {Scope.PROCESS: PROCESS, Scope.USER: USER, Scope.MACHINE: MACHINE}
