"""
Utility functions for checking solutions against their model.
"""

import math
from typing import List, Mapping

from .data_models import Solution
from .modeling import LpModel


def compute_objective(model: LpModel, values: Mapping[str, float]) -> float:
    """
    Compute the objective value of ``values`` under the model's objective.

    Variables missing from ``values`` count as 0.
    """
    return sum(coef * values.get(name, 0.0) for name, coef in model.objective.items())


def validate_solution(model: LpModel, solution: Solution, tolerance: float = 1e-6) -> List[str]:
    """
    Check a solution against the model's bounds and constraints.

    Args:
        model: The model the solution was computed for
        solution: Solution returned by a solver adapter
        tolerance: Absolute tolerance for bounds and constraints

    Returns:
        Human-readable violations; empty when the solution is valid
    """
    if not solution.feasible:
        return [f"Cannot validate infeasible solution (status: {solution.status})"]

    problems = []
    missing = [v.name for v in model.variables if v.name not in solution.values]
    if missing:
        problems.append(f"Missing values for variables: {', '.join(missing)}")

    for var in model.variables:
        value = solution.values.get(var.name, 0.0)
        if value < var.lower_bound - tolerance:
            problems.append(f"Variable {var.name} = {value:.6g} below lower bound {var.lower_bound:.6g}")
        if value > var.upper_bound + tolerance:
            problems.append(f"Variable {var.name} = {value:.6g} above upper bound {var.upper_bound:.6g}")

    for con in model.constraints:
        lhs = sum(coef * solution.values.get(name, 0.0) for name, coef in con.coefficients.items())
        if not con.relation.holds(lhs, con.rhs, tolerance):
            problems.append(
                f"Constraint {con.name} violated: {lhs:.6g} {con.relation.value} {con.rhs:.6g}"
            )

    objective = compute_objective(model, solution.values)
    if not math.isclose(objective, solution.objective_value, rel_tol=0.0, abs_tol=tolerance):
        problems.append(
            f"Objective mismatch: reported {solution.objective_value:.6g}, recomputed {objective:.6g}"
        )

    return problems


def solution_summary(solution: Solution) -> str:
    values = ", ".join(f"{name}={value:.6g}" for name, value in solution.values.items())
    if not solution.feasible:
        return f"[{solution.backend}] {solution.status}: no solution"
    return f"[{solution.backend}] {solution.status}: objective={solution.objective_value:.6g} ({values})"
