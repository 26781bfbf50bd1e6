"""
Solver adapter contract.

Every backend implements ``SolverAdapter._optimize``; the shared ``solve``
takes care of building and lowering the model, collapsing backend failures
into an infeasible Solution and raising the native point back into named
variables.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np

from .data_models import DenseForm, Solution
from .errors import InvalidModelError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10_000

OPTIMAL = "optimal"
INFEASIBLE = "infeasible"
UNBOUNDED = "unbounded"
ITERATION_LIMIT = "iteration_limit"
ERROR = "error"


def _safe_float(x) -> float:
    try:
        if x is None:
            return 0.0
        value = float(x)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def normalize_status(success: bool, message: Optional[str]) -> str:
    """Map a backend success flag and message to one of the status labels."""
    if success:
        return OPTIMAL
    if message:
        low = message.lower()
        if "infeasible" in low:
            return INFEASIBLE
        if "unbounded" in low:
            return UNBOUNDED
        if "iteration" in low or "limit" in low or "not solved" in low:
            return ITERATION_LIMIT
    return ERROR


def raise_point(form: DenseForm, point: Optional[Sequence[float]]) -> np.ndarray:
    """
    Read a native solution vector back in declared variable order.

    Shorter vectors are zero-padded, longer ones truncated, missing or
    non-finite entries become 0.0.
    """
    values = np.zeros(form.num_variables)
    if point is None:
        return values
    for i, x in enumerate(list(point)[:form.num_variables]):
        values[i] = _safe_float(x)
    return values


class SolverAdapter(ABC):
    """
    Uniform contract of all LP backends: ``solve(model) -> Solution``.

    Subclasses set ``name`` and implement ``_optimize``, which receives the
    lowered DenseForm and returns ``(point, status)``. ``point`` may be None
    when the backend produced nothing usable. Exceptions raised inside
    ``_optimize`` are treated as an infeasible result.
    """

    name: str = "abstract"

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> None:
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.max_iterations = int(max_iterations)

    def solve(self, model) -> Solution:
        """
        Solve ``model`` with this backend.

        An unbuilt model is built first. Infeasible, unbounded and otherwise
        failed solves return ``Solution(feasible=False, objective_value=nan)``.

        Raises:
            InvalidModelError: if ``model`` is None or references undeclared
                variables
        """
        if model is None:
            raise InvalidModelError(f"{type(self).__name__}.solve() requires a model, got None")

        form = model.to_dense_form()
        logger.debug(f"{self.name}: solving {form!r}")

        if form.num_variables == 0:
            return self._solve_trivial(form)

        try:
            point, status = self._optimize(form)
        except Exception as e:
            logger.warning(f"{self.name}: backend failed on model '{model.name}': {e}")
            return Solution.infeasible(form.variable_names, status=ERROR, backend=self.name)

        if status != OPTIMAL:
            logger.info(f"{self.name}: no solution for model '{model.name}' (status={status})")
            return Solution.infeasible(form.variable_names, status=status, backend=self.name)

        values = raise_point(form, point)
        objective = float(np.dot(form.objective, values))
        logger.debug(f"{self.name}: optimal objective {objective:.6g}")
        return Solution(
            values=dict(zip(form.variable_names, values.tolist())),
            objective_value=objective,
            feasible=True,
            status=OPTIMAL,
            backend=self.name,
        )

    def _solve_trivial(self, form: DenseForm) -> Solution:
        """A model without variables is feasible iff every constant constraint holds."""
        if all(ok for _, ok in form.constant_rows()):
            return Solution(values={}, objective_value=0.0, feasible=True,
                            status=OPTIMAL, backend=self.name)
        return Solution.infeasible([], status=INFEASIBLE, backend=self.name)

    @abstractmethod
    def _optimize(self, form: DenseForm) -> Tuple[Optional[Sequence[float]], str]:
        """Run the backend on ``form`` and return ``(point, status)``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_iterations={self.max_iterations})"
