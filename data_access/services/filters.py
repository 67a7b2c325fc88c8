"""
Translation of search criteria into PynamoDB scan conditions.

Criteria map a field name to either a bare value (shorthand for ``eq``) or a
mapping of operator to operand:

    {"name": "Canada", "population": {"gt": 1_000_000, "le": 50_000_000}}

All conditions are AND-ed together.
"""

from __future__ import annotations

import operator
from functools import reduce
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type

from pynamodb.attributes import Attribute
from pynamodb.expressions.condition import Condition
from pynamodb.models import Model

from data_access.domain.errors import BadRequestError


def _between(attr: Attribute, operand: Any) -> Condition:
    if isinstance(operand, (str, bytes)) or not isinstance(operand, Sequence) or len(operand) != 2:
        raise BadRequestError(f"between expects [lower, upper], got {operand!r}")
    lower, upper = operand
    return attr.between(lower, upper)


def _is_in(attr: Attribute, operand: Any) -> Condition:
    if isinstance(operand, (str, bytes)) or not isinstance(operand, Sequence) or not operand:
        raise BadRequestError(f"in expects a non-empty list, got {operand!r}")
    return attr.is_in(*operand)


def _null(attr: Attribute, operand: Any) -> Condition:
    return attr.does_not_exist() if operand else attr.exists()


def _not_null(attr: Attribute, operand: Any) -> Condition:
    return attr.exists() if operand else attr.does_not_exist()


OPERATORS: Dict[str, Callable[[Attribute, Any], Condition]] = {
    "eq": lambda attr, value: attr == value,
    "ne": lambda attr, value: attr != value,
    "lt": lambda attr, value: attr < value,
    "le": lambda attr, value: attr <= value,
    "gt": lambda attr, value: attr > value,
    "ge": lambda attr, value: attr >= value,
    "between": _between,
    "in": _is_in,
    "begins_with": lambda attr, value: attr.startswith(value),
    "contains": lambda attr, value: attr.contains(value),
    "not_contains": lambda attr, value: ~attr.contains(value),
    "null": _null,
    "not_null": _not_null,
}


def build_condition(
    model: Type[Model], criteria: Optional[Mapping[str, Any]]
) -> Optional[Condition]:
    """
    Build the filter condition for ``model.scan``.

    Returns
    -------
    Condition or None
        ``None`` when ``criteria`` is empty, meaning a full scan.

    Raises
    ------
    BadRequestError
        For unknown fields or operators, or malformed operands.
    """
    if not criteria:
        return None

    attributes = model.get_attributes()
    table_name = model.Meta.table_name
    conditions: List[Condition] = []
    for field_name, criterion in criteria.items():
        attr = attributes.get(field_name)
        if attr is None:
            raise BadRequestError(f"{table_name} has no field {field_name}")

        if isinstance(criterion, Mapping):
            unknown = [key for key in criterion if key not in OPERATORS]
            if unknown or not criterion:
                raise BadRequestError(
                    f"unsupported search operator(s) {unknown} for {field_name}"
                )
            for op_name, operand in criterion.items():
                conditions.append(OPERATORS[op_name](attr, operand))
        else:
            conditions.append(OPERATORS["eq"](attr, criterion))

    return reduce(operator.and_, conditions)


def equality_criteria(
    keys: Sequence[str], values: Sequence[Any]
) -> Dict[str, Dict[str, Any]]:
    """Pair field names with values as ``eq`` criteria."""
    return {key: {"eq": value} for key, value in zip(keys, values)}


__all__ = ["OPERATORS", "build_condition", "equality_criteria"]
