from __future__ import annotations

from typing import Any, Dict, Tuple

import pytest

from data_access.domain.entities import EntityDescriptor
from data_access.domain.errors import BadRequestError
from data_access.infrastructure.model_factory import build_model
from data_access.services.filters import OPERATORS, build_condition, equality_criteria


@pytest.fixture
def city_model(city_entity):
    return build_model("cities", EntityDescriptor.model_validate(city_entity))


def _render(condition) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Serialize a condition the way PynamoDB sends it to DynamoDB."""
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    expression = condition.serialize(names, values)
    return expression, names, values


def test_empty_criteria_means_full_scan(city_model) -> None:
    assert build_condition(city_model, None) is None
    assert build_condition(city_model, {}) is None


def test_bare_value_is_equality(city_model) -> None:
    expression, names, values = _render(build_condition(city_model, {"name": "Toronto"}))

    assert "=" in expression
    assert list(names) == ["name"]
    assert list(values.values()) == [{"S": "Toronto"}]


def test_operator_mapping_uses_attribute_serialization(city_model) -> None:
    expression, _, values = _render(build_condition(city_model, {"population": {"gt": 1000}}))

    assert ">" in expression
    assert list(values.values()) == [{"N": "1000"}]


def test_multiple_fields_and_operators_are_and_ed(city_model) -> None:
    condition = build_condition(
        city_model,
        {"name": {"begins_with": "To"}, "population": {"ge": 10, "lt": 20}},
    )
    expression, names, values = _render(condition)

    assert expression.count("AND") == 2
    assert "begins_with" in expression
    assert set(names) == {"name", "population"}
    assert len(values) == 3


@pytest.mark.parametrize(
    ("criteria", "fragment"),
    [
        ({"population": {"between": [1, 5]}}, "BETWEEN"),
        ({"name": {"in": ["Toronto", "Ottawa"]}}, "IN"),
        ({"name": {"contains": "ron"}}, "contains"),
        ({"name": {"not_contains": "ron"}}, "NOT"),
        ({"population": {"null": True}}, "attribute_not_exists"),
        ({"population": {"not_null": True}}, "attribute_exists"),
        ({"name": {"ne": "Toronto"}}, "<>"),
    ],
)
def test_supported_operators(city_model, criteria, fragment) -> None:
    expression, _, _ = _render(build_condition(city_model, criteria))
    assert fragment in expression


def test_unknown_field_is_rejected(city_model) -> None:
    with pytest.raises(BadRequestError, match="cities has no field country"):
        build_condition(city_model, {"country": "CA"})


def test_unknown_operator_is_rejected(city_model) -> None:
    with pytest.raises(BadRequestError, match="unsupported search operator"):
        build_condition(city_model, {"name": {"like": "To%"}})


@pytest.mark.parametrize("operand", [[1], "15", 3])
def test_between_requires_two_bounds(city_model, operand) -> None:
    with pytest.raises(BadRequestError, match="between"):
        build_condition(city_model, {"population": {"between": operand}})


def test_in_requires_non_empty_list(city_model) -> None:
    with pytest.raises(BadRequestError, match="in expects"):
        build_condition(city_model, {"name": {"in": []}})


def test_equality_criteria_pairs_keys_with_values() -> None:
    assert equality_criteria(["name", "countryCode"], ["Canada", "CAN"]) == {
        "name": {"eq": "Canada"},
        "countryCode": {"eq": "CAN"},
    }


def test_operator_table_lists_every_supported_operator() -> None:
    assert set(OPERATORS) == {
        "eq", "ne", "lt", "le", "gt", "ge", "between", "in",
        "begins_with", "contains", "not_contains", "null", "not_null",
    }
