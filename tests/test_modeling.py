"""Tests for LpModel: building, the built flag, lookups and dense lowering."""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from lpbridge.data_models import OptimizationDirection, Relation
from lpbridge.errors import DuplicateNameError, InvalidModelError, NotFoundError
from lpbridge.modeling import LpModel


def test_add_variable_assigns_indices_in_call_order():
    model = LpModel()
    assert model.add_variable("a", 0.0, 1.0) == 0
    assert model.add_variable("b", -5.0, math.inf) == 1
    assert model.add_variable("c", -math.inf, math.inf) == 2

    b = model.get_variable("b")
    assert (b.name, b.lower_bound, b.upper_bound, b.index) == ("b", -5.0, math.inf, 1)
    assert [v.index for v in model.variables] == [0, 1, 2]
    assert model.get_variable_index("c") == 2
    assert model.variable_names == ["a", "b", "c"]


def test_add_variable_defaults_to_non_negative():
    model = LpModel()
    model.add_variable("x")
    var = model.get_variable("x")
    assert var.lower_bound == 0.0
    assert var.upper_bound == math.inf


def test_duplicate_variable_leaves_model_unchanged():
    model = LpModel()
    model.add_variable("x1", 0, 10)

    with pytest.raises(DuplicateNameError) as excinfo:
        model.add_variable("x1", 0, 20)

    message = str(excinfo.value).lower()
    assert "x1" in message and "variable" in message
    assert model.num_variables == 1
    assert model.get_variable("x1").upper_bound == 10.0


def test_duplicate_constraint_leaves_model_unchanged():
    model = LpModel()
    model.add_variable("x1", 0, 10)
    model.add_constraint("c1", {"x1": 1.0}, Relation.LEQ, 5.0)

    with pytest.raises(DuplicateNameError) as excinfo:
        model.add_constraint("c1", {"x1": 2.0}, Relation.GEQ, 3.0)

    message = str(excinfo.value).lower()
    assert "c1" in message and "constraint" in message
    assert model.num_constraints == 1
    kept = model.get_constraint("c1")
    assert kept.relation is Relation.LEQ
    assert kept.rhs == 5.0


def test_duplicate_name_error_is_a_value_error():
    model = LpModel()
    model.add_variable("x")
    with pytest.raises(ValueError):
        model.add_variable("x")


def test_variable_and_constraint_names_are_independent():
    model = LpModel()
    model.add_variable("same")
    model.add_constraint("same", {"same": 1.0}, "<=", 1.0)
    assert model.get_variable_index("same") == 0
    assert model.get_constraint_index("same") == 0


def test_lookup_of_unknown_names_raises_not_found():
    model = LpModel()
    model.add_variable("x")
    with pytest.raises(NotFoundError):
        model.get_variable_index("y")
    with pytest.raises(NotFoundError):
        model.get_constraint_index("c")
    with pytest.raises(NotFoundError):
        model.get_variable("y")
    with pytest.raises(KeyError):
        model.get_constraint("c")


def test_build_is_idempotent():
    model = LpModel()
    model.add_variable("x1", 0.0, 10.0)
    assert not model.is_built

    assert model.build() is model
    assert model.is_built
    snapshot = (model.variables, model.constraints, dict(model.objective))

    model.build()
    assert model.is_built
    assert (model.variables, model.constraints, dict(model.objective)) == snapshot


@pytest.mark.parametrize(
    "mutate",
    [
        lambda m: m.add_variable("x2", 0, 5),
        lambda m: m.add_constraint("c9", {"x1": 1.0}, Relation.LEQ, 5.0),
        lambda m: m.set_objective({"x1": 2.0}, OptimizationDirection.MINIMIZE),
        lambda m: m.set_objective_coefficient("x1", 4.0),
        lambda m: m.set_direction(OptimizationDirection.MINIMIZE),
        lambda m: m.obj("x1", 1.0),
        lambda m: m.var("x3"),
        lambda m: m.direction("min"),
    ],
)
def test_mutation_after_build_resets_built(mutate):
    model = LpModel()
    model.add_variable("x1", 0, 10)
    model.build()
    assert model.is_built

    mutate(model)
    assert not model.is_built

    model.build()
    assert model.is_built


def test_mutation_while_unbuilt_stays_unbuilt():
    model = LpModel()
    model.add_variable("x1")
    model.add_variable("x2")
    assert not model.is_built


def test_built_reset_is_logged(caplog):
    model = LpModel(name="logged")
    model.add_variable("x1")
    model.build()
    with caplog.at_level(logging.WARNING, logger="lpbridge.modeling"):
        model.add_variable("x2")
    assert any("build()" in rec.getMessage() for rec in caplog.records)


def test_failed_add_does_not_reset_built():
    model = LpModel()
    model.add_variable("x1")
    model.build()
    with pytest.raises(DuplicateNameError):
        model.add_variable("x1")
    assert model.is_built


def test_preferred_solver_is_not_a_structural_change():
    model = LpModel()
    model.add_variable("x")
    model.build()
    model.preferred_solver = "pulp"
    assert model.is_built
    assert model.set_preferred_solver("scipy") is model
    assert model.preferred_solver == "scipy"
    assert LpModel(preferred_solver="cbc").preferred_solver == "cbc"


def test_set_objective_replaces_instead_of_merging():
    model = LpModel()
    model.add_variable("x")
    model.add_variable("y")
    model.set_objective({"x": 1.0, "y": 2.0}, OptimizationDirection.MAXIMIZE)
    model.set_objective({"y": 7.0}, "min")

    assert dict(model.objective) == {"y": 7.0}
    assert model.objective_direction is OptimizationDirection.MINIMIZE
    assert not model.is_maximize


def test_set_direction_keeps_objective():
    model = LpModel()
    model.add_variable("x")
    model.set_objective({"x": 3.0}, OptimizationDirection.MAXIMIZE)
    model.set_direction(OptimizationDirection.MINIMIZE)
    assert dict(model.objective) == {"x": 3.0}
    assert model.objective_direction is OptimizationDirection.MINIMIZE


def test_default_direction_is_maximize():
    assert LpModel().is_maximize


def test_add_constraint_snapshots_coefficients():
    model = LpModel()
    model.add_variable("x1", 0, 5)
    model.add_variable("x2", 0, 7)
    coeffs = {"x1": 2.0, "x2": 3.0}
    returned = model.add_constraint("c1", coeffs, Relation.LEQ, 10.0)

    coeffs["x1"] = -1.0
    del coeffs["x2"]

    found = model.constraints[0]
    assert found is returned
    assert found.name == "c1"
    assert found.relation is Relation.LEQ
    assert found.rhs == 10.0
    assert found.coefficients["x1"] == 2.0
    assert found.coefficients["x2"] == 3.0


def test_accessors_do_not_expose_internals():
    model = LpModel()
    model.add_variable("x")
    model.set_objective({"x": 1.0}, True)

    assert isinstance(model.variables, tuple)
    assert isinstance(model.constraints, tuple)
    with pytest.raises(TypeError):
        model.objective["x"] = 5.0  # type: ignore[index]

    names = model.variable_names
    names.append("ghost")
    assert model.variable_names == ["x"]
    assert not model.has_variable("ghost")


def test_fluent_builder_chain():
    model = (
        LpModel(name="fluent")
        .direction(OptimizationDirection.MAXIMIZE)
        .var("x", 0, 10).obj("x", 1.0)
        .var("y", 0, 10).obj("y", 2.0)
        .leq("c1", 8.0, {"x": 1.0, "y": 1.0})
        .geq("c2", 1.0, {"x": 1.0})
        .eq("c3", 3.0, {"y": 1.0})
        .build()
    )

    assert model.is_built
    assert model.variable_names == ["x", "y"]
    assert dict(model.objective) == {"x": 1.0, "y": 2.0}
    assert [c.relation for c in model.constraints] == [Relation.LEQ, Relation.GEQ, Relation.EQ]
    assert model.has_constraint("c3")


def test_str_lists_model_contents():
    model = LpModel()
    model.add_variable("x1", 0.0, 10.0)
    model.add_constraint("cap", {"x1": 1.0}, "<=", 4.0)
    text = str(model)
    assert "x1" in text
    assert "cap" in text
    assert "MAXIMIZE" in text


def test_to_dense_form_orders_by_declaration():
    model = LpModel()
    model.add_variable("b", 1.0, 2.0)
    model.add_variable("a", -math.inf, math.inf)
    model.set_objective({"a": 4.0}, OptimizationDirection.MINIMIZE)
    model.add_constraint("first", {"a": 1.0, "b": 2.0}, Relation.GEQ, 3.0)
    model.add_constraint("second", {}, Relation.LEQ, 1.0)

    form = model.to_dense_form()

    assert model.is_built
    assert form.variable_names == ["b", "a"]
    np.testing.assert_array_equal(form.objective, [0.0, 4.0])
    np.testing.assert_array_equal(form.lower_bounds, [1.0, -np.inf])
    np.testing.assert_array_equal(form.upper_bounds, [2.0, np.inf])
    np.testing.assert_array_equal(form.rows, [[2.0, 1.0], [0.0, 0.0]])
    np.testing.assert_array_equal(form.rhs, [3.0, 1.0])
    assert form.relations == [Relation.GEQ, Relation.LEQ]
    assert form.constraint_names == ["first", "second"]
    assert not form.maximize


def test_to_dense_form_rejects_unknown_constraint_variable():
    model = LpModel()
    model.add_variable("x")
    model.add_constraint("bad", {"x": 1.0, "ghost": 2.0}, Relation.LEQ, 1.0)
    with pytest.raises(InvalidModelError, match="ghost"):
        model.to_dense_form()


def test_to_dense_form_rejects_unknown_objective_variable():
    model = LpModel()
    model.add_variable("x")
    model.set_objective({"ghost": 1.0}, OptimizationDirection.MAXIMIZE)
    with pytest.raises(InvalidModelError, match="ghost"):
        model.to_dense_form()


def test_failed_lowering_leaves_model_unbuilt():
    model = LpModel()
    model.add_variable("x")
    model.add_constraint("bad", {"ghost": 1.0}, Relation.LEQ, 1.0)

    with pytest.raises(InvalidModelError):
        model.to_dense_form()
    assert not model.is_built

    model.add_variable("ghost")
    model.to_dense_form()
    assert model.is_built
