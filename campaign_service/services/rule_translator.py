"""
Targeting rules -> SQL filter over the customer table.

Rules form a flat conjunction: every rule becomes one column condition and
all conditions are ANDed. Rules on the same field narrow each other. The
negative operators also match customers that have no value for the field.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Sequence, Union, get_args

from pydantic import TypeAdapter, ValidationError
from pydantic.alias_generators import to_snake
from sqlalchemy import Column, and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from campaign_service.core.exceptions import InvalidRuleException, UnsupportedOperatorException
from campaign_service.models.campaign import Operator, TargetingRule
from campaign_service.models.common import as_naive_utc
from campaign_service.models.customer import Customer

logger = logging.getLogger(__name__)

RuleInput = Union[TargetingRule, Mapping[str, Any]]

# Storage internals that rules may not reference
_HIDDEN_FIELDS = {"id"}

_adapters: Dict[Any, TypeAdapter] = {}


def _equals(column: Column, value: Any) -> ColumnElement:
    if value is None:
        return column.is_(None)
    return column == value


def _not_equals(column: Column, value: Any) -> ColumnElement:
    if value is None:
        return column.is_not(None)
    return or_(column != value, column.is_(None))


def _greater_than(column: Column, value: Any) -> ColumnElement:
    return column > value


def _less_than(column: Column, value: Any) -> ColumnElement:
    return column < value


def _contains(column: Column, value: str) -> ColumnElement:
    return column.icontains(value, autoescape=True)


def _not_contains(column: Column, value: str) -> ColumnElement:
    return or_(~column.icontains(value, autoescape=True), column.is_(None))


def _in(column: Column, values: List[Any]) -> ColumnElement:
    return column.in_(values)


def _not_in(column: Column, values: List[Any]) -> ColumnElement:
    return or_(column.not_in(values), column.is_(None))


CONSTRAINTS: Dict[Operator, Callable[[Column, Any], ColumnElement]] = {
    Operator.EQUALS: _equals,
    Operator.NOT_EQUALS: _not_equals,
    Operator.GREATER_THAN: _greater_than,
    Operator.LESS_THAN: _less_than,
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: _not_contains,
    Operator.IN: _in,
    Operator.NOT_IN: _not_in,
}


def parse_operator(raw: Any) -> Operator:
    try:
        return Operator(raw)
    except ValueError:
        raise UnsupportedOperatorException(raw) from None


def targetable_fields() -> List[str]:
    return [c.name for c in Customer.__table__.columns if c.name not in _HIDDEN_FIELDS]


def resolve_column(field: str) -> Column:
    """Map a rule field (snake_case or camelCase) to a customer column."""
    name = to_snake(field)
    columns = Customer.__table__.columns
    if name in _HIDDEN_FIELDS or name not in columns:
        raise InvalidRuleException(
            message=f"Unknown targeting field: {field}",
            details={"field": field, "allowed": targetable_fields()},
        )
    return columns[name]


def _field_type(column: Column) -> Any:
    return Customer.model_fields[column.name].annotation


def _is_text(column: Column) -> bool:
    field_type = _field_type(column)
    return str in (get_args(field_type) or (field_type,))


def _coerce(column: Column, rule: TargetingRule, value: Any) -> Any:
    field_type = _field_type(column)
    adapter = _adapters.get(field_type)
    if adapter is None:
        adapter = _adapters[field_type] = TypeAdapter(field_type)
    try:
        coerced = adapter.validate_python(value)
    except ValidationError as e:
        raise InvalidRuleException(
            message=f"Invalid value for field '{rule.field}': {value!r}",
            details={"field": rule.field, "operator": rule.operator, "value": value},
        ) from e
    if isinstance(coerced, datetime):
        coerced = as_naive_utc(coerced)
    return coerced


def _shape_error(rule: TargetingRule, expected: str) -> InvalidRuleException:
    return InvalidRuleException(
        message=f"Operator '{rule.operator}' on field '{rule.field}' expects {expected}",
        details={"field": rule.field, "operator": rule.operator, "value": rule.value},
    )


def _prepare_value(operator: Operator, column: Column, rule: TargetingRule) -> Any:
    value = rule.value

    if operator in (Operator.IN, Operator.NOT_IN):
        if not isinstance(value, (list, tuple)):
            raise _shape_error(rule, "a list of values")
        return [_coerce(column, rule, item) for item in value]

    if operator in (Operator.CONTAINS, Operator.NOT_CONTAINS):
        if not _is_text(column):
            raise _shape_error(rule, "a text field")
        if not isinstance(value, str) or not value:
            raise _shape_error(rule, "a non-empty string")
        return value

    if isinstance(value, (list, tuple, dict)):
        raise _shape_error(rule, "a single value")

    if operator in (Operator.GREATER_THAN, Operator.LESS_THAN):
        if value is None or isinstance(value, bool):
            raise _shape_error(rule, "a number, date or string")
        return _coerce(column, rule, value)

    return None if value is None else _coerce(column, rule, value)


def _as_rule(rule: RuleInput) -> TargetingRule:
    if isinstance(rule, TargetingRule):
        return rule
    try:
        return TargetingRule.model_validate(rule)
    except ValidationError as e:
        raise InvalidRuleException(message="Malformed targeting rule", details={"rule": rule}) from e


def translate_rule(rule: RuleInput) -> ColumnElement:
    rule = _as_rule(rule)
    operator = parse_operator(rule.operator)
    column = resolve_column(rule.field)
    value = _prepare_value(operator, column, rule)
    return CONSTRAINTS[operator](column, value)


def build_customer_filter(rules: Sequence[RuleInput]) -> ColumnElement:
    """
    Translate ``rules`` into one boolean expression over the customer table.

    An empty rule set yields a predicate that matches every customer. Any
    invalid rule aborts the whole translation.
    """
    clauses = [translate_rule(rule) for rule in rules]
    if not clauses:
        return true()
    logger.debug(f"Translated {len(clauses)} targeting rules")
    return and_(*clauses)
