"""
Built-in rules that translate common validators into schema keywords.

| Rule       | Validator kinds                              | Schema keywords               |
|------------|----------------------------------------------|-------------------------------|
| Required   | not_null, not_empty (unconditional only)     | required                      |
| NotEmpty   | not_empty                                    | minLength / minItems          |
| Length     | length, minimum/maximum/exact_length         | minLength, maxLength (Items)  |
| Pattern    | regular_expression                           | pattern, or allOf of patterns |
| EMail      | email                                        | format                        |
| Comparison | greater/less than (or equal)                 | minimum, maximum, exclusive*  |
| Between    | inclusive/exclusive between                  | minimum, maximum, exclusive*  |

Length and bound rules tighten existing values and never relax them. NotEmpty
and Length only touch properties typed "string" or "array".
"""

import numbers
from typing import List

from .rule import RuleContext, SchemaRule
from .validators import PropertyValidator, ValidatorKind


def kind_is(*kinds: ValidatorKind):
    """Condition: validator kind is one of `kinds`."""
    wanted = frozenset(kinds)

    def condition(validator: PropertyValidator) -> bool:
        return validator.kind in wanted

    condition.__name__ = "kind_is_" + "_or_".join(sorted(k.value for k in wanted))
    return condition


def is_unconditional(validator: PropertyValidator) -> bool:
    """Condition: validator always runs (no `when` clause)."""
    return not validator.conditional


def has_numeric_option(*names: str):
    """Condition: every named option is a real number (bools excluded)."""

    def condition(validator: PropertyValidator) -> bool:
        for name in names:
            value = validator.option(name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                return False
        return True

    condition.__name__ = "has_numeric_" + "_".join(names)
    return condition


# ---------------------------------------------------------------------------
# Schema mutation helpers
# ---------------------------------------------------------------------------


def _set_new_min(context: RuleContext, keyword: str, value: int) -> None:
    prop = context.property_schema
    current = prop.get(keyword)
    prop[keyword] = value if current is None else max(current, value)

    if (
        keyword == "minLength"
        and prop[keyword] > 0
        and context.options.set_not_nullable_if_min_length_greater_than_zero
    ):
        prop["nullable"] = False


def _set_new_max(context: RuleContext, keyword: str, value: int) -> None:
    prop = context.property_schema
    current = prop.get(keyword)
    prop[keyword] = value if current is None else min(current, value)


def _set_lower_bound(context: RuleContext, value, exclusive: bool) -> None:
    _set_bound(context, "minimum", "exclusiveMinimum", value, exclusive, lower=True)


def _set_upper_bound(context: RuleContext, value, exclusive: bool) -> None:
    _set_bound(context, "maximum", "exclusiveMaximum", value, exclusive, lower=False)


def _current_bound(prop: dict, keyword: str, exclusive_keyword: str):
    """Return (value, exclusive) for the bound already in `prop`, or (None, False)."""
    exclusive = prop.get(exclusive_keyword)
    if isinstance(exclusive, numbers.Real) and not isinstance(exclusive, bool):
        return exclusive, True
    if keyword in prop:
        return prop[keyword], bool(exclusive)
    return None, False


def _set_bound(context, keyword, exclusive_keyword, value, exclusive, lower):
    prop = context.property_schema
    current, current_exclusive = _current_bound(prop, keyword, exclusive_keyword)

    if current is not None:
        tighter = value > current if lower else value < current
        if not tighter and not (value == current and exclusive and not current_exclusive):
            return

    prop.pop(keyword, None)
    prop.pop(exclusive_keyword, None)

    if context.options.schema_dialect == "jsonschema":
        # Draft 6+: exclusive bounds are numeric and replace minimum/maximum
        if exclusive:
            prop[exclusive_keyword] = value
        else:
            prop[keyword] = value
    else:
        # OpenAPI 3.0: exclusive bounds are boolean modifiers
        prop[keyword] = value
        if exclusive:
            prop[exclusive_keyword] = True


# ---------------------------------------------------------------------------
# Apply actions
# ---------------------------------------------------------------------------


def _apply_required(context: RuleContext) -> None:
    context.mark_required()


def _apply_not_empty(context: RuleContext) -> None:
    if context.is_array():
        _set_new_min(context, "minItems", 1)
    elif context.is_string():
        _set_new_min(context, "minLength", 1)


def _apply_length(context: RuleContext) -> None:
    if context.is_array():
        min_keyword, max_keyword = "minItems", "maxItems"
    elif context.is_string():
        min_keyword, max_keyword = "minLength", "maxLength"
    else:
        return
    min_length = context.validator.option("min")
    max_length = context.validator.option("max")

    if max_length is not None and max_length >= 0:
        _set_new_max(context, max_keyword, max_length)
    if min_length is not None and min_length > 0:
        _set_new_min(context, min_keyword, min_length)


def _apply_pattern(context: RuleContext) -> None:
    pattern = context.validator.option("pattern")
    if not pattern:
        return

    prop = context.property_schema
    existing = prop.get("pattern")
    all_of = prop.get("allOf")

    if context.options.use_all_of_for_multiple_rules and (existing or all_of):
        if existing and existing != pattern:
            prop.setdefault("allOf", []).append({"pattern": existing})
            del prop["pattern"]
        if existing == pattern:
            return
        entries = prop.setdefault("allOf", [])
        if {"pattern": pattern} not in entries:
            entries.append({"pattern": pattern})
    else:
        prop["pattern"] = pattern


def _apply_email(context: RuleContext) -> None:
    context.property_schema["format"] = "email"


def _apply_comparison(context: RuleContext) -> None:
    kind = context.validator.kind
    value = context.validator.option("value")

    if kind is ValidatorKind.GREATER_THAN:
        _set_lower_bound(context, value, exclusive=True)
    elif kind is ValidatorKind.GREATER_THAN_OR_EQUAL:
        _set_lower_bound(context, value, exclusive=False)
    elif kind is ValidatorKind.LESS_THAN:
        _set_upper_bound(context, value, exclusive=True)
    elif kind is ValidatorKind.LESS_THAN_OR_EQUAL:
        _set_upper_bound(context, value, exclusive=False)


def _apply_between(context: RuleContext) -> None:
    exclusive = context.validator.kind is ValidatorKind.EXCLUSIVE_BETWEEN
    _set_lower_bound(context, context.validator.option("from"), exclusive)
    _set_upper_bound(context, context.validator.option("to"), exclusive)


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


REQUIRED = SchemaRule(
    "Required",
    [kind_is(ValidatorKind.NOT_NULL, ValidatorKind.NOT_EMPTY), is_unconditional],
    _apply_required,
)

NOT_EMPTY = SchemaRule("NotEmpty", [kind_is(ValidatorKind.NOT_EMPTY)], _apply_not_empty)

LENGTH = SchemaRule(
    "Length",
    [
        kind_is(
            ValidatorKind.LENGTH,
            ValidatorKind.MINIMUM_LENGTH,
            ValidatorKind.MAXIMUM_LENGTH,
            ValidatorKind.EXACT_LENGTH,
        )
    ],
    _apply_length,
)

PATTERN = SchemaRule("Pattern", [kind_is(ValidatorKind.REGULAR_EXPRESSION)], _apply_pattern)

EMAIL = SchemaRule("EMail", [kind_is(ValidatorKind.EMAIL)], _apply_email)

COMPARISON = SchemaRule(
    "Comparison",
    [
        kind_is(
            ValidatorKind.GREATER_THAN,
            ValidatorKind.GREATER_THAN_OR_EQUAL,
            ValidatorKind.LESS_THAN,
            ValidatorKind.LESS_THAN_OR_EQUAL,
        ),
        has_numeric_option("value"),
    ],
    _apply_comparison,
)

BETWEEN = SchemaRule(
    "Between",
    [
        kind_is(ValidatorKind.INCLUSIVE_BETWEEN, ValidatorKind.EXCLUSIVE_BETWEEN),
        has_numeric_option("from", "to"),
    ],
    _apply_between,
)


def default_rules() -> List[SchemaRule]:
    """Return the built-in rules in registration order."""
    return [REQUIRED, NOT_EMPTY, LENGTH, PATTERN, EMAIL, COMPARISON, BETWEEN]
