"""
Exception types raised by lpbridge.

Structural problems (duplicate names, unknown names, missing models, unknown
backends) are raised immediately. Numerical failures of a backend are never
raised: they come back as an infeasible Solution.
"""

from typing import Iterable, Optional


class LpBridgeError(Exception):
    """Base class for all lpbridge errors."""


class DuplicateNameError(LpBridgeError, ValueError):
    """A variable or constraint with this name already exists in the model."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} name already exists: {name!r}")


class NotFoundError(LpBridgeError, KeyError):
    """Lookup of a variable or constraint by a name the model does not know."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind}: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidModelError(LpBridgeError, ValueError):
    """The model handed to a solver is missing or references undeclared variables."""


class UnknownBackendError(LpBridgeError, KeyError):
    """No solver backend is registered under the requested name."""

    def __init__(self, name: Optional[str], known: Iterable[str] = ()) -> None:
        self.name = name
        self.known = tuple(sorted(known))
        if name is None or not str(name).strip():
            message = f"Solver name must not be empty (known: {', '.join(self.known)})"
        else:
            message = f"Unknown solver: {name!r} (known: {', '.join(self.known)})"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]
