"""
Name -> solver factory registry.

Names are normalised (stripped, lower-cased). The module keeps one
process-wide registry, ``REGISTRY``, pre-populated with the built-in
backends; the module-level functions operate on it. Registration and lookup
are safe to call from different threads.
"""

import logging
import threading
from typing import Callable, Dict, FrozenSet, Optional

from .errors import UnknownBackendError
from .pulp_solver import PulpSolver
from .scipy_solver import ScipySolver
from .solvers import SolverAdapter

logger = logging.getLogger(__name__)

SolverFactory = Callable[[], SolverAdapter]


def normalize_name(name: Optional[str]) -> Optional[str]:
    return None if name is None else str(name).strip().lower()


class SolverRegistry:
    """Thread-safe mapping of backend names (and aliases) to adapter factories."""

    def __init__(self) -> None:
        self._factories: Dict[str, SolverFactory] = {}
        self._lock = threading.RLock()

    def register(self, name: str, factory: SolverFactory) -> None:
        """Register ``factory`` under ``name``, replacing any previous entry."""
        key = normalize_name(name)
        if not key:
            raise ValueError("Solver name must not be empty")
        if not callable(factory):
            raise ValueError(f"Solver factory for {name!r} must be callable")
        with self._lock:
            if key in self._factories:
                logger.debug(f"Replacing solver factory for '{key}'")
            self._factories[key] = factory

    def register_alias(self, alias: str, canonical: str) -> None:
        """Make ``alias`` resolve to the factory currently registered as ``canonical``."""
        key = normalize_name(alias)
        if not key:
            raise ValueError("Solver alias must not be empty")
        with self._lock:
            factory = self._factories.get(normalize_name(canonical))
            if factory is None:
                raise UnknownBackendError(canonical, self._factories.keys())
            self._factories[key] = factory

    def has(self, name: Optional[str]) -> bool:
        key = normalize_name(name)
        if not key:
            return False
        with self._lock:
            return key in self._factories

    def create(self, name: Optional[str]) -> SolverAdapter:
        """
        Instantiate the backend registered under ``name``.

        Raises:
            UnknownBackendError: if ``name`` is empty or not registered; the
                error lists the known names
        """
        key = normalize_name(name)
        with self._lock:
            factory = self._factories.get(key) if key else None
            known = list(self._factories.keys())
        if factory is None:
            raise UnknownBackendError(name, known)
        return factory()

    def names(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._factories.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __repr__(self) -> str:
        return f"SolverRegistry({sorted(self.names())})"


BUILTIN_SOLVERS: Dict[str, SolverFactory] = {
    ScipySolver.name: ScipySolver,
    PulpSolver.name: PulpSolver,
}

BUILTIN_ALIASES: Dict[str, str] = {
    "linprog": ScipySolver.name,
    "highs": ScipySolver.name,
    "standard": ScipySolver.name,
    "cbc": PulpSolver.name,
    "coin": PulpSolver.name,
}


def create_default_registry() -> SolverRegistry:
    """A new registry holding the built-in backends and their aliases."""
    registry = SolverRegistry()
    for name, factory in BUILTIN_SOLVERS.items():
        registry.register(name, factory)
    for alias, canonical in BUILTIN_ALIASES.items():
        registry.register_alias(alias, canonical)
    return registry


REGISTRY = create_default_registry()


def register(name: str, factory: SolverFactory) -> None:
    REGISTRY.register(name, factory)


def register_alias(alias: str, canonical: str) -> None:
    REGISTRY.register_alias(alias, canonical)


def has(name: Optional[str]) -> bool:
    return REGISTRY.has(name)


def create(name: Optional[str]) -> SolverAdapter:
    return REGISTRY.create(name)


def names() -> FrozenSet[str]:
    return REGISTRY.names()
