"""
Standard-form backend on scipy.optimize.linprog (HiGHS).

The model is lowered to the pure inequality form

    min c^T x
    s.t. A_ub x <= b_ub

with no native variable bounds: finite bounds become explicit rows, ">=" rows
are negated, equalities are split into a "<=" and a ">=" row over the same
coefficients, and a maximisation is solved as the minimisation of -c.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import linprog

from .data_models import DenseForm, Relation
from .solvers import (
    ERROR,
    INFEASIBLE,
    ITERATION_LIMIT,
    OPTIMAL,
    UNBOUNDED,
    SolverAdapter,
    normalize_status,
)

# scipy.optimize.linprog result.status
LINPROG_STATUS = {
    0: OPTIMAL,
    1: ITERATION_LIMIT,
    2: INFEASIBLE,
    3: UNBOUNDED,
    4: ERROR,
}


def build_inequality_form(form: DenseForm) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Lower a DenseForm into ``(c, A_ub, b_ub)`` for a minimise-only solver.

    Row order: one row per finite lower bound and per finite upper bound (in
    variable order), then the model constraints in declared order.

    Returns:
        c: objective to minimise (negated when the model maximises)
        A_ub: (rows x variables) matrix, possibly with zero rows
        b_ub: right-hand sides
    """
    n = form.num_variables
    rows: List[np.ndarray] = []
    rhs: List[float] = []

    for i in range(n):
        lb = form.lower_bounds[i]
        ub = form.upper_bounds[i]
        if np.isfinite(lb):
            row = np.zeros(n)
            row[i] = -1.0
            rows.append(row)
            rhs.append(-lb)
        if np.isfinite(ub):
            row = np.zeros(n)
            row[i] = 1.0
            rows.append(row)
            rhs.append(ub)

    for k, relation in enumerate(form.relations):
        coeffs = form.rows[k]
        b = float(form.rhs[k])
        if relation is Relation.LEQ:
            rows.append(coeffs.copy())
            rhs.append(b)
        elif relation is Relation.GEQ:
            rows.append(-coeffs)
            rhs.append(-b)
        else:
            rows.append(coeffs.copy())
            rhs.append(b)
            rows.append(-coeffs)
            rhs.append(-b)

    c = -form.objective if form.maximize else form.objective.copy()
    A_ub = np.vstack(rows) if rows else np.zeros((0, n))
    b_ub = np.array(rhs, dtype=float)
    return c, A_ub, b_ub


class ScipySolver(SolverAdapter):
    """
    LP backend using ``scipy.optimize.linprog`` with the HiGHS method.

    Args:
        max_iterations: iteration ceiling handed to HiGHS; hitting it counts
            as infeasible
        method: linprog method name ("highs", "highs-ds" or "highs-ipm")
    """

    name = "scipy"

    def __init__(self, max_iterations: int = 10_000, method: str = "highs") -> None:
        super().__init__(max_iterations)
        self.method = method

    def _optimize(self, form: DenseForm) -> Tuple[Optional[Sequence[float]], str]:
        c, A_ub, b_ub = build_inequality_form(form)
        has_rows = A_ub.shape[0] > 0
        res = linprog(
            c,
            A_ub=A_ub if has_rows else None,
            b_ub=b_ub if has_rows else None,
            bounds=(None, None),
            method=self.method,
            options={"maxiter": self.max_iterations},
        )
        status = LINPROG_STATUS.get(res.status)
        if status is None:
            # status code outside the documented set: fall back to the message
            status = normalize_status(res.success, getattr(res, "message", None))
        elif status == OPTIMAL and not res.success:
            status = ERROR
        return res.x, status
