"""
General-bounds backend on PuLP (CBC).

Bounds, equalities and the optimisation sense are passed to PuLP natively.
Native variables are named by position so model names never go through
PuLP's name sanitising.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pulp

from .data_models import DenseForm, Relation
from .solvers import ERROR, INFEASIBLE, ITERATION_LIMIT, OPTIMAL, UNBOUNDED, SolverAdapter

logger = logging.getLogger(__name__)

PULP_STATUS = {
    pulp.LpStatusOptimal: OPTIMAL,
    pulp.LpStatusInfeasible: INFEASIBLE,
    pulp.LpStatusUnbounded: UNBOUNDED,
    pulp.LpStatusNotSolved: ITERATION_LIMIT,
    pulp.LpStatusUndefined: ERROR,
}

# CBC labels a run stopped on its iteration ceiling "Optimal"; only the
# solution status tells a proven optimum from the last point it reached
PULP_SOLUTION_STATUS = {
    pulp.LpSolutionOptimal: OPTIMAL,
    pulp.LpSolutionIntegerFeasible: ITERATION_LIMIT,
    pulp.LpSolutionNoSolutionFound: ITERATION_LIMIT,
    pulp.LpSolutionInfeasible: INFEASIBLE,
    pulp.LpSolutionUnbounded: UNBOUNDED,
}


def _native_bound(value: float) -> Optional[float]:
    return None if np.isinf(value) else float(value)


def _resting_value(form: DenseForm, i: int) -> float:
    """Value for a variable the solver never constrained: 0 clamped into its bounds."""
    return float(min(max(0.0, form.lower_bounds[i]), form.upper_bounds[i]))


def build_problem(form: DenseForm, name: str = "lpbridge") -> Optional[Tuple[pulp.LpProblem, List[pulp.LpVariable]]]:
    """
    Lower a DenseForm into a PuLP problem.

    Constraints without any non-zero coefficient are checked as constants
    instead of being handed to PuLP, and so are crossed variable bounds.

    Returns:
        ``(problem, variables)``, or None when a variable has lower > upper or
        a constant constraint can never hold, so the problem is infeasible as
        stated.
    """
    crossed = np.flatnonzero(form.lower_bounds > form.upper_bounds)
    if crossed.size:
        logger.debug(f"Variables with lower > upper bound: {[form.variable_names[i] for i in crossed]}")
        return None

    sense = pulp.LpMaximize if form.maximize else pulp.LpMinimize
    prob = pulp.LpProblem(name, sense)

    xs = [
        pulp.LpVariable(
            f"x{i}",
            lowBound=_native_bound(form.lower_bounds[i]),
            upBound=_native_bound(form.upper_bounds[i]),
        )
        for i in range(form.num_variables)
    ]

    prob += pulp.lpSum(
        float(form.objective[i]) * xs[i] for i in range(form.num_variables) if form.objective[i] != 0.0
    ), "objective"

    constant = dict(form.constant_rows())
    for k, relation in enumerate(form.relations):
        if k in constant:
            if not constant[k]:
                logger.debug(f"Constant constraint {k} ({relation.value} {form.rhs[k]}) can never hold")
                return None
            continue
        expr = pulp.lpSum(
            float(a) * xs[j] for j, a in enumerate(form.rows[k]) if a != 0.0
        )
        b = float(form.rhs[k])
        if relation is Relation.LEQ:
            prob += expr <= b, f"c{k}"
        elif relation is Relation.GEQ:
            prob += expr >= b, f"c{k}"
        else:
            prob += expr == b, f"c{k}"

    return prob, xs


class PulpSolver(SolverAdapter):
    """
    LP backend using PuLP with the bundled CBC command-line solver.

    Args:
        max_iterations: iteration ceiling passed to CBC; hitting it counts as
            infeasible
        time_limit: optional CBC time limit in seconds
    """

    name = "pulp"

    def __init__(self, max_iterations: int = 10_000, time_limit: Optional[float] = None) -> None:
        super().__init__(max_iterations)
        self.time_limit = time_limit

    def _make_solver(self):
        return pulp.PULP_CBC_CMD(
            msg=False,
            timeLimit=self.time_limit,
            options=[f"maxIterations {self.max_iterations}"],
        )

    def _optimize(self, form: DenseForm) -> Tuple[Optional[Sequence[float]], str]:
        built = build_problem(form)
        if built is None:
            return None, INFEASIBLE
        prob, xs = built

        if not prob.variables():
            # nothing for CBC to decide; every variable just sits inside its bounds
            return [_resting_value(form, i) for i in range(form.num_variables)], OPTIMAL

        prob.solve(self._make_solver())
        status = PULP_STATUS.get(prob.status, ERROR)
        if status == OPTIMAL:
            status = PULP_SOLUTION_STATUS.get(prob.sol_status, ERROR)
        logger.debug(
            f"CBC finished with status {pulp.LpStatus.get(prob.status, prob.status)}, "
            f"solution {pulp.LpSolution.get(prob.sol_status, prob.sol_status)}"
        )
        if status != OPTIMAL:
            return None, status

        point = []
        for i, x in enumerate(xs):
            value = x.varValue
            # variables with no coefficients anywhere are never seen by CBC
            point.append(_resting_value(form, i) if value is None else float(value))
        return point, status
