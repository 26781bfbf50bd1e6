"""
LP model construction.

LpModel collects variables, constraints and the objective by name, keeps the
build/mutate state and lowers itself into a DenseForm for the solver
backends. Mutating a built model does not fail: it resets the built flag and
the next build() (explicit, or implicit inside a solver) finalises it again.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from .data_models import Constraint, DenseForm, OptimizationDirection, Relation, Variable
from .errors import DuplicateNameError, InvalidModelError, NotFoundError

logger = logging.getLogger(__name__)

DirectionLike = Union[OptimizationDirection, str, bool]
RelationLike = Union[Relation, str]


class LpModel:
    """
    A linear program described by name.

    Example:
        >>> model = LpModel()
        >>> model.add_variable("x", 0, math.inf)
        0
        >>> model.add_variable("y", 0, math.inf)
        1
        >>> model.set_objective({"x": 3, "y": 5}, OptimizationDirection.MAXIMIZE)
        >>> _ = model.add_constraint("c1", {"x": 2, "y": 1}, Relation.LEQ, 6)
        >>> model.build().is_built
        True
    """

    def __init__(self, name: str = "lp", preferred_solver: Optional[str] = None) -> None:
        self.name = name
        self._variables: List[Variable] = []
        self._constraints: List[Constraint] = []
        # name -> index, always equal to the position in the lists above
        self._variable_indices: Dict[str, int] = {}
        self._constraint_indices: Dict[str, int] = {}
        self._objective: Dict[str, float] = {}
        self._direction = OptimizationDirection.MAXIMIZE
        self._built = False
        self._preferred_solver = preferred_solver

    # ---------- state ----------

    def _before_change(self) -> None:
        if self._built:
            self._built = False
            logger.warning(
                f"{type(self).__name__} '{self.name}' was changed after build(); "
                f"'built' status reset. Call build() again before solving."
            )

    def build(self) -> "LpModel":
        """
        Finalise the model. Calling it again without changes in between is a no-op.

        Returns:
            The model itself, so a fluent chain can end with build().
        """
        if self._built:
            return self
        logger.debug(
            f"Building model '{self.name}' with {len(self._variables)} variables "
            f"and {len(self._constraints)} constraints"
        )
        self._built = True
        return self

    @property
    def is_built(self) -> bool:
        return self._built

    # ---------- mutation ----------

    def add_variable(self, name: str, lower: float = 0.0, upper: float = math.inf) -> int:
        """
        Add a decision variable.

        Args:
            name: Unique variable name
            lower: Lower bound (may be -inf)
            upper: Upper bound (may be +inf)

        Returns:
            Index of the new variable

        Raises:
            DuplicateNameError: if a variable with this name already exists
        """
        if name in self._variable_indices:
            raise DuplicateNameError("variable", name)
        self._before_change()
        idx = len(self._variables)
        self._variables.append(Variable(name, float(lower), float(upper), idx))
        self._variable_indices[name] = idx
        logger.debug(f"Added variable: {name} [{lower}, {upper}]")
        return idx

    def add_constraint(
        self,
        name: str,
        coefficients: Mapping[str, float],
        relation: RelationLike,
        rhs: float,
    ) -> Constraint:
        """
        Add a linear constraint.

        The coefficient mapping is copied, so later changes to it by the caller
        do not reach the model. Keys are validated against the declared
        variables only when the model is lowered for a solver.

        Raises:
            DuplicateNameError: if a constraint with this name already exists
        """
        if name in self._constraint_indices:
            raise DuplicateNameError("constraint", name)
        constraint = Constraint(name, coefficients, Relation.parse(relation), rhs)
        self._before_change()
        idx = len(self._constraints)
        self._constraints.append(constraint)
        self._constraint_indices[name] = idx
        logger.debug(
            f"Added constraint: {name} ({constraint.relation.name}) rhs={constraint.rhs}, "
            f"vars={list(constraint.coefficients)}"
        )
        return constraint

    def set_objective(self, coefficients: Mapping[str, float], direction: DirectionLike) -> None:
        """Replace the whole objective and the direction."""
        new_objective = {str(k): float(v) for k, v in dict(coefficients).items()}
        new_direction = OptimizationDirection.parse(direction)
        self._before_change()
        self._objective = new_objective
        self._direction = new_direction

    def set_objective_coefficient(self, name: str, coefficient: float) -> None:
        self._before_change()
        self._objective[name] = float(coefficient)

    def set_direction(self, direction: DirectionLike) -> None:
        new_direction = OptimizationDirection.parse(direction)
        self._before_change()
        self._direction = new_direction

    # ---------- fluent builder ----------

    def direction(self, direction: DirectionLike) -> "LpModel":
        self.set_direction(direction)
        return self

    def var(self, name: str, lower: float = 0.0, upper: float = math.inf) -> "LpModel":
        self.add_variable(name, lower, upper)
        return self

    def obj(self, name: str, coefficient: float) -> "LpModel":
        self.set_objective_coefficient(name, coefficient)
        return self

    def leq(self, name: str, rhs: float, coefficients: Mapping[str, float]) -> "LpModel":
        self.add_constraint(name, coefficients, Relation.LEQ, rhs)
        return self

    def geq(self, name: str, rhs: float, coefficients: Mapping[str, float]) -> "LpModel":
        self.add_constraint(name, coefficients, Relation.GEQ, rhs)
        return self

    def eq(self, name: str, rhs: float, coefficients: Mapping[str, float]) -> "LpModel":
        self.add_constraint(name, coefficients, Relation.EQ, rhs)
        return self

    # ---------- preferred backend ----------

    @property
    def preferred_solver(self) -> Optional[str]:
        return self._preferred_solver

    @preferred_solver.setter
    def preferred_solver(self, name: Optional[str]) -> None:
        # not a structural change: the LP itself is the same
        self._preferred_solver = name

    def set_preferred_solver(self, name: Optional[str]) -> "LpModel":
        self.preferred_solver = name
        return self

    # ---------- lookup ----------

    def get_variable_index(self, name: str) -> int:
        try:
            return self._variable_indices[name]
        except KeyError:
            raise NotFoundError("variable", name) from None

    def get_constraint_index(self, name: str) -> int:
        try:
            return self._constraint_indices[name]
        except KeyError:
            raise NotFoundError("constraint", name) from None

    def get_variable(self, name: str) -> Variable:
        return self._variables[self.get_variable_index(name)]

    def get_constraint(self, name: str) -> Constraint:
        return self._constraints[self.get_constraint_index(name)]

    def has_variable(self, name: str) -> bool:
        return name in self._variable_indices

    def has_constraint(self, name: str) -> bool:
        return name in self._constraint_indices

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return tuple(self._variables)

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    @property
    def variable_names(self) -> List[str]:
        return [v.name for v in self._variables]

    @property
    def objective(self) -> Mapping[str, float]:
        return MappingProxyType(dict(self._objective))

    @property
    def objective_direction(self) -> OptimizationDirection:
        return self._direction

    @property
    def is_maximize(self) -> bool:
        return self._direction is OptimizationDirection.MAXIMIZE

    @property
    def num_variables(self) -> int:
        return len(self._variables)

    @property
    def num_constraints(self) -> int:
        return len(self._constraints)

    # ---------- lowering ----------

    def to_dense_form(self) -> DenseForm:
        """
        Lower the model into a DenseForm indexed by declared order, then build it.

        A model that fails validation is left unbuilt.

        Raises:
            InvalidModelError: if a constraint or the objective names a variable
                that was never declared
        """
        n = len(self._variables)
        m = len(self._constraints)

        c = np.zeros(n)
        for var_name, coef in self._objective.items():
            if var_name not in self._variable_indices:
                raise InvalidModelError(
                    f"Objective references unknown variable {var_name!r} in model '{self.name}'"
                )
            c[self._variable_indices[var_name]] = coef

        rows = np.zeros((m, n))
        rhs = np.zeros(m)
        for k, constraint in enumerate(self._constraints):
            for var_name, coef in constraint.coefficients.items():
                j = self._variable_indices.get(var_name)
                if j is None:
                    raise InvalidModelError(
                        f"Constraint {constraint.name!r} references unknown variable {var_name!r}"
                    )
                rows[k, j] = coef
            rhs[k] = constraint.rhs

        form = DenseForm(
            variable_names=self.variable_names,
            objective=c,
            lower_bounds=np.array([v.lower_bound for v in self._variables], dtype=float),
            upper_bounds=np.array([v.upper_bound for v in self._variables], dtype=float),
            rows=rows,
            relations=[con.relation for con in self._constraints],
            rhs=rhs,
            maximize=self.is_maximize,
            constraint_names=[con.name for con in self._constraints],
        )
        self.build()
        logger.debug(f"Lowered model '{self.name}': {form!r}")
        return form

    # ---------- display ----------

    def __str__(self) -> str:
        lines = [f"{type(self).__name__} '{self.name}':", "Variables:"]
        lines += [f"  {v!r}" for v in self._variables]
        lines.append("Constraints:")
        lines += [f"  {c!r}" for c in self._constraints]
        lines.append(f"Objective: {dict(self._objective)} direction={self._direction.name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"LpModel(name={self.name!r}, vars={len(self._variables)}, "
                f"constraints={len(self._constraints)}, built={self._built})")
