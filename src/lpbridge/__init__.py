"""
lpbridge: linear program modelling and solver dispatch.

Build an LpModel by name, then solve it with any registered backend through
the same ``solve(model) -> Solution`` contract.

Main Exports:
    From modeling / data_models:
        - LpModel, Variable, Constraint, Relation, OptimizationDirection, Solution
    From solvers:
        - SolverAdapter, ScipySolver, PulpSolver
    From registry / config:
        - SolverRegistry, register, register_alias, create, resolve, solve
"""

from .data_models import Constraint, DenseForm, OptimizationDirection, Relation, Solution, Variable
from .errors import (
    DuplicateNameError,
    InvalidModelError,
    LpBridgeError,
    NotFoundError,
    UnknownBackendError,
)
from .modeling import LpModel
from .solvers import DEFAULT_MAX_ITERATIONS, SolverAdapter
from .scipy_solver import ScipySolver
from .pulp_solver import PulpSolver
from .registry import REGISTRY, SolverRegistry, create, has, names, register, register_alias
from .config import (
    FALLBACK_SOLVER,
    GlobalSolverSetting,
    get_global_solver,
    resolve,
    set_global_solver,
    solve,
)
from .utils import compute_objective, validate_solution

__version__ = "0.1.0"

__all__ = [
    # Model
    "LpModel",
    "Variable",
    "Constraint",
    "Relation",
    "OptimizationDirection",
    "Solution",
    "DenseForm",
    # Errors
    "LpBridgeError",
    "DuplicateNameError",
    "NotFoundError",
    "InvalidModelError",
    "UnknownBackendError",
    # Solvers
    "SolverAdapter",
    "ScipySolver",
    "PulpSolver",
    "DEFAULT_MAX_ITERATIONS",
    # Registry and resolution
    "SolverRegistry",
    "REGISTRY",
    "register",
    "register_alias",
    "has",
    "create",
    "names",
    "FALLBACK_SOLVER",
    "GlobalSolverSetting",
    "get_global_solver",
    "set_global_solver",
    "resolve",
    "solve",
    # Utilities
    "compute_objective",
    "validate_solution",
]
