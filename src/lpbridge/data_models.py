"""
Data models for linear programs and their solutions.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple, Union

import numpy as np


class Relation(Enum):
    """Relation between the left-hand side of a constraint and its rhs."""

    LEQ = "<="
    GEQ = ">="
    EQ = "=="

    @classmethod
    def parse(cls, value: Union["Relation", str]) -> "Relation":
        """Accept a Relation, its name ("LEQ") or its symbol ("<=")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        if text == "=":
            return cls.EQ
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Constraint relation must be one of <=, >=, ==; got {value!r}")

    def holds(self, lhs: float, rhs: float, tolerance: float = 0.0) -> bool:
        if self is Relation.LEQ:
            return lhs <= rhs + tolerance
        if self is Relation.GEQ:
            return lhs >= rhs - tolerance
        return abs(lhs - rhs) <= tolerance


class OptimizationDirection(Enum):
    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"

    @classmethod
    def parse(cls, value: Union["OptimizationDirection", str, bool]) -> "OptimizationDirection":
        """
        Accept an OptimizationDirection, a bool (True = maximize) or a string
        such as "max", "Maximize", "min".
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.MAXIMIZE if value else cls.MINIMIZE
        low = str(value).strip().lower()
        if low.startswith("max"):
            return cls.MAXIMIZE
        if low.startswith("min"):
            return cls.MINIMIZE
        raise ValueError(f"Optimization direction must be maximize or minimize; got {value!r}")


@dataclass(frozen=True)
class Variable:
    """
    A named, bounded decision variable.

    ``index`` is the position of the variable in its model and never changes.
    Bounds may be infinite; lower <= upper is not checked.
    """
    name: str
    lower_bound: float = 0.0
    upper_bound: float = math.inf
    index: int = -1

    def __repr__(self) -> str:
        return f"Variable({self.name!r}, [{self.lower_bound}, {self.upper_bound}], index={self.index})"


@dataclass(frozen=True)
class Constraint:
    """
    A named linear constraint ``sum(coef * var) relation rhs``.

    Coefficients are copied on construction and exposed read-only, so the
    caller's mapping can be reused freely afterwards.
    """
    name: str
    coefficients: Mapping[str, float]
    relation: Relation
    rhs: float

    def __post_init__(self):
        snapshot = {str(k): float(v) for k, v in dict(self.coefficients).items()}
        # frozen dataclass needs object.__setattr__
        object.__setattr__(self, 'coefficients', MappingProxyType(snapshot))
        object.__setattr__(self, 'relation', Relation.parse(self.relation))
        object.__setattr__(self, 'rhs', float(self.rhs))

    def coefficient(self, variable_name: str) -> float:
        return self.coefficients.get(variable_name, 0.0)

    def __repr__(self) -> str:
        return (f"Constraint({self.name!r}, rel={self.relation.name}, rhs={self.rhs}, "
                f"coeffs={dict(self.coefficients)})")


@dataclass(frozen=True)
class Solution:
    """
    Result of one solve() call.

    ``values`` holds every model variable in declared order. When the solve
    failed for any numerical reason ``feasible`` is False and
    ``objective_value`` is NaN. ``status`` only gives a hint about why.
    """
    values: Mapping[str, float]
    objective_value: float
    feasible: bool
    status: str = "optimal"
    backend: str = ""

    # values is a read-only mapping, so solutions are compared but never hashed
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    @classmethod
    def infeasible(cls, variable_names: Iterable[str], status: str = "infeasible",
                   backend: str = "") -> "Solution":
        return cls(
            values={name: 0.0 for name in variable_names},
            objective_value=float("nan"),
            feasible=False,
            status=status,
            backend=backend,
        )

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def __repr__(self) -> str:
        return (f"Solution(backend={self.backend or '?'}, status={self.status}, "
                f"feasible={self.feasible}, obj={self.objective_value:.6g}, "
                f"values={dict(self.values)})")


@dataclass
class DenseForm:
    """
    Backend-agnostic lowered LP, indexed by declared variable order.

        opt  objective^T x
        s.t. rows[k] . x  relations[k]  rhs[k]
             lower_bounds <= x <= upper_bounds
    """
    variable_names: List[str]
    objective: np.ndarray
    lower_bounds: np.ndarray
    upper_bounds: np.ndarray
    rows: np.ndarray
    relations: List[Relation]
    rhs: np.ndarray
    maximize: bool
    constraint_names: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate dimensions."""
        n = len(self.variable_names)
        m = len(self.relations)
        assert self.objective.shape == (n,), "objective must have one entry per variable"
        assert self.lower_bounds.shape == (n,), "lower_bounds must have one entry per variable"
        assert self.upper_bounds.shape == (n,), "upper_bounds must have one entry per variable"
        assert self.rows.shape == (m, n), "rows must be (constraints x variables)"
        assert self.rhs.shape == (m,), "rhs must have one entry per constraint"

    @property
    def num_variables(self) -> int:
        return len(self.variable_names)

    @property
    def num_constraints(self) -> int:
        return len(self.relations)

    def constant_rows(self) -> List[Tuple[int, bool]]:
        """(row index, satisfied) for every constraint whose coefficients are all zero."""
        result = []
        for k in range(self.num_constraints):
            if not np.any(self.rows[k]):
                result.append((k, self.relations[k].holds(0.0, float(self.rhs[k]))))
        return result

    def __repr__(self) -> str:
        sense = "max" if self.maximize else "min"
        return f"DenseForm({sense}, vars={self.num_variables}, rows={self.num_constraints})"
