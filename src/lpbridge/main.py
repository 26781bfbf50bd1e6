"""
Command-line demo for lpbridge.

Solves a small example LP with the resolved backend, or with every built-in
backend when --compare is given.
"""

import argparse
import logging
import math
import sys
from typing import List, Optional

from .config import resolve
from .data_models import OptimizationDirection, Relation
from .errors import UnknownBackendError
from .modeling import LpModel
from .registry import BUILTIN_SOLVERS, REGISTRY
from .utils import solution_summary, validate_solution

AGREEMENT_TOLERANCE = 1e-6


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set logging level to DEBUG
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Solve an example linear program with a pluggable backend',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '-s', '--solver',
        type=str,
        default=None,
        help='Backend name; overrides $LPBRIDGE_SOLVER and ~/.lpbridge/config.properties'
    )

    parser.add_argument(
        '--list-solvers',
        action='store_true',
        help='Print the registered backend names and exit'
    )

    parser.add_argument(
        '--compare',
        action='store_true',
        help='Solve with every built-in backend and check that objectives agree'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    return parser.parse_args(argv)


def build_demo_model() -> LpModel:
    """max 3x + 5y  s.t.  2x + y <= 6,  x + y <= 4,  x, y >= 0"""
    model = LpModel(name="demo")
    model.add_variable("x", 0.0, math.inf)
    model.add_variable("y", 0.0, math.inf)
    model.set_objective({"x": 3.0, "y": 5.0}, OptimizationDirection.MAXIMIZE)
    model.add_constraint("c1", {"x": 2.0, "y": 1.0}, Relation.LEQ, 6.0)
    model.add_constraint("c2", {"x": 1.0, "y": 1.0}, Relation.LEQ, 4.0)
    return model.build()


def compare_backends(model: LpModel) -> bool:
    """Solve ``model`` with every built-in backend; True when all objectives agree."""
    logger = logging.getLogger(__name__)
    objectives = {}
    for name in BUILTIN_SOLVERS:
        solution = REGISTRY.create(name).solve(model)
        print(solution_summary(solution))
        objectives[name] = solution.objective_value

    reference = next(iter(objectives.values()))
    agree = all(
        math.isclose(value, reference, rel_tol=0.0, abs_tol=AGREEMENT_TOLERANCE)
        for value in objectives.values()
    )
    if not agree:
        logger.warning(f"Backends disagree on the objective: {objectives}")
    return agree


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.list_solvers:
        for name in sorted(REGISTRY.names()):
            print(name)
        return 0

    model = build_demo_model()
    logger.debug(str(model))

    if args.compare:
        return 0 if compare_backends(model) else 1

    try:
        solver = resolve(model, args.solver)
    except UnknownBackendError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Solving '{model.name}' with {solver!r}")
    solution = solver.solve(model)
    print(solution_summary(solution))

    if not solution.feasible:
        return 1
    for problem in validate_solution(model, solution):
        logger.warning(problem)
    return 0


if __name__ == '__main__':
    sys.exit(main())
