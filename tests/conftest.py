"""Shared pytest fixtures: backends, registries and an isolated global setting.

Example models live in ``lp_examples.py`` next to this file.
"""

from __future__ import annotations

import pytest

from lpbridge import config
from lpbridge.config import GlobalSolverSetting
from lpbridge.modeling import LpModel
from lpbridge.registry import BUILTIN_SOLVERS, create_default_registry

from lp_examples import scenario_a


@pytest.fixture(autouse=True)
def isolated_global_solver(monkeypatch, tmp_path):
    """Keep the real environment and home directory out of backend resolution."""
    setting = GlobalSolverSetting(environ={}, home=tmp_path)
    monkeypatch.setattr(config, "GLOBAL_SOLVER", setting)
    return setting


@pytest.fixture(params=sorted(BUILTIN_SOLVERS))
def backend(request):
    """Each built-in backend in turn."""
    return BUILTIN_SOLVERS[request.param]()


@pytest.fixture
def registry():
    """A private registry with the built-ins, safe to modify."""
    return create_default_registry()


@pytest.fixture
def model_a() -> LpModel:
    return scenario_a()
