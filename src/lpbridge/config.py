"""
Backend selection.

Which solver a model is handed to is decided by ``resolve`` in this order:

1. the explicit override passed by the caller
2. the model's own ``preferred_solver``
3. the process-wide setting, resolved once and cached, from
   a. a value set in-process with ``set_global_solver``
   b. the ``LPBRIDGE_SOLVER`` environment variable
   c. ``solver=<name>`` in ``~/.lpbridge/config.properties``
4. the fallback backend ``FALLBACK_SOLVER``

A global name that is not registered falls back to ``FALLBACK_SOLVER``.
"""

import configparser
import logging
import os
import threading
from pathlib import Path
from typing import Mapping, Optional, Union

from .data_models import Solution
from .registry import REGISTRY, SolverRegistry
from .solvers import SolverAdapter

logger = logging.getLogger(__name__)

ENV_VAR = "LPBRIDGE_SOLVER"
CONFIG_FILE = Path(".lpbridge") / "config.properties"
CONFIG_KEY = "solver"
FALLBACK_SOLVER = "scipy"


def read_config_file(path: Union[str, Path]) -> Optional[str]:
    """
    Read the ``solver`` entry of a properties-style file.

    Returns None when the file does not exist, has no usable entry, or cannot
    be read.
    """
    path = Path(path)
    if not path.is_file():
        return None
    parser = configparser.ConfigParser(interpolation=None)
    try:
        # properties files have no section header
        parser.read_string("[properties]\n" + path.read_text(encoding="utf-8"), source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        logger.warning(f"Ignoring unreadable solver config {path}: {e}")
        return None
    value = parser.get("properties", CONFIG_KEY, fallback="").strip()
    return value or None


def load_solver_name(
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Union[str, Path]] = None,
) -> str:
    """
    Look the global solver name up in the environment, then the user config
    file, then fall back to ``FALLBACK_SOLVER``.

    Args:
        environ: environment mapping (default: ``os.environ``)
        home: user home directory (default: ``Path.home()``)
    """
    environ = os.environ if environ is None else environ
    value = (environ.get(ENV_VAR) or "").strip()
    if value:
        logger.debug(f"Global solver '{value}' taken from ${ENV_VAR}")
        return value

    home_dir = Path.home() if home is None else Path(home)
    value = read_config_file(home_dir / CONFIG_FILE)
    if value:
        logger.debug(f"Global solver '{value}' taken from {home_dir / CONFIG_FILE}")
        return value

    return FALLBACK_SOLVER


class GlobalSolverSetting:
    """
    Lazily resolved, cached process-wide solver name.

    The first ``get()`` resolves the name with ``load_solver_name`` and caches
    it; ``set()`` replaces the cached value at any time. Concurrent first
    calls resolve it exactly once.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        home: Optional[Union[str, Path]] = None,
    ) -> None:
        self._environ = environ
        self._home = home
        self._value: Optional[str] = None
        self._lock = threading.Lock()

    def get(self) -> str:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = load_solver_name(self._environ, self._home)
            return self._value

    def set(self, name: str) -> None:
        if name is None or not str(name).strip():
            raise ValueError("Global solver name must not be empty")
        with self._lock:
            self._value = str(name).strip()

    def reset(self) -> None:
        """Forget the cached value; the next get() resolves it again."""
        with self._lock:
            self._value = None

    @property
    def is_resolved(self) -> bool:
        return self._value is not None


GLOBAL_SOLVER = GlobalSolverSetting()


def get_global_solver() -> str:
    return GLOBAL_SOLVER.get()


def set_global_solver(name: str) -> None:
    GLOBAL_SOLVER.set(name)


def reset_global_solver() -> None:
    GLOBAL_SOLVER.reset()


def resolve(
    model=None,
    explicit_override: Optional[str] = None,
    *,
    registry: Optional[SolverRegistry] = None,
    setting: Optional[GlobalSolverSetting] = None,
) -> SolverAdapter:
    """
    Pick the solver adapter for ``model``.

    Args:
        model: LpModel whose ``preferred_solver`` is consulted (may be None)
        explicit_override: backend name that wins over everything else
        registry: registry to create adapters from (default: the global one)
        setting: global setting to consult (default: the process-wide one)

    Raises:
        UnknownBackendError: if the explicit override or the model preference
            names an unregistered backend
    """
    registry = REGISTRY if registry is None else registry
    setting = GLOBAL_SOLVER if setting is None else setting

    if explicit_override is not None and explicit_override.strip():
        return registry.create(explicit_override)

    preferred = getattr(model, "preferred_solver", None) if model is not None else None
    if preferred is not None and preferred.strip():
        return registry.create(preferred)

    global_name = setting.get()
    if registry.has(global_name):
        return registry.create(global_name)

    logger.warning(f"Global solver '{global_name}' is not registered; using '{FALLBACK_SOLVER}'")
    return registry.create(FALLBACK_SOLVER)


def solve(model, solver: Optional[str] = None) -> Solution:
    """Resolve a backend for ``model`` and solve it."""
    return resolve(model, solver).solve(model)
