"""
Tests for the built-in rule set

Each rule is exercised directly through a RuleContext so the expected schema
keywords are easy to read.
"""
import importlib

import pytest

from validation_schema import PropertyValidator, RuleContext, SchemaOptions, ValidatorKind

# The package re-exports the default_rules() function under the submodule's name.
rules = importlib.import_module("validation_schema.default_rules")


def apply(rule, prop, kind, options=None, conditional=False, schema_options=None):
    """Apply `rule` to a one-property schema if it matches; return the schema."""
    schema = {"type": "object", "properties": {"p": prop}}
    validator = PropertyValidator(kind, options or {}, conditional)
    if rule.is_matches(validator):
        rule.apply(RuleContext(schema, "p", validator, "T", schema_options or SchemaOptions()))
    return schema


class TestRuleSet:
    """Test default_rules() itself."""

    def test_order(self):
        names = [r.name for r in rules.default_rules()]
        assert names == ["Required", "NotEmpty", "Length", "Pattern", "EMail", "Comparison", "Between"]

    def test_returns_new_list(self):
        first = rules.default_rules()
        first.clear()
        assert len(rules.default_rules()) == 7


class TestRequired:

    def test_not_null_marks_required(self):
        schema = apply(rules.REQUIRED, {"type": "string"}, ValidatorKind.NOT_NULL)
        assert schema["required"] == ["p"]
        assert schema["properties"]["p"] == {"type": "string"}

    def test_not_empty_marks_required(self):
        schema = apply(rules.REQUIRED, {"type": "string"}, ValidatorKind.NOT_EMPTY)
        assert schema["required"] == ["p"]

    def test_conditional_validator_not_required(self):
        schema = apply(rules.REQUIRED, {"type": "string"}, ValidatorKind.NOT_NULL, conditional=True)
        assert "required" not in schema


class TestNotEmpty:

    def test_string_gets_min_length(self):
        schema = apply(rules.NOT_EMPTY, {"type": "string"}, ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"] == {"type": "string", "minLength": 1, "nullable": False}

    def test_array_gets_min_items(self):
        schema = apply(rules.NOT_EMPTY, {"type": "array"}, ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"] == {"type": "array", "minItems": 1}

    def test_existing_larger_min_length_kept(self):
        schema = apply(rules.NOT_EMPTY, {"type": "string", "minLength": 5}, ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"]["minLength"] == 5

    def test_integer_unchanged(self):
        schema = apply(rules.NOT_EMPTY, {"type": "integer"}, ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"] == {"type": "integer"}

    def test_ref_unchanged(self):
        schema = apply(rules.NOT_EMPTY, {"$ref": "#/components/schemas/Account"},
                       ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"] == {"$ref": "#/components/schemas/Account"}

    def test_type_list_with_string(self):
        schema = apply(rules.NOT_EMPTY, {"type": ["string", "null"]}, ValidatorKind.NOT_EMPTY)
        assert schema["properties"]["p"]["minLength"] == 1

    def test_nullable_option_off(self):
        options = SchemaOptions(set_not_nullable_if_min_length_greater_than_zero=False)
        schema = apply(rules.NOT_EMPTY, {"type": "string"}, ValidatorKind.NOT_EMPTY,
                       schema_options=options)
        assert "nullable" not in schema["properties"]["p"]


class TestLength:

    def test_maximum_length(self):
        schema = apply(rules.LENGTH, {"type": "string"}, ValidatorKind.MAXIMUM_LENGTH, {"max": 256})
        assert schema["properties"]["p"] == {"type": "string", "maxLength": 256}

    def test_minimum_length(self):
        schema = apply(rules.LENGTH, {"type": "string"}, ValidatorKind.MINIMUM_LENGTH, {"min": 3})
        assert schema["properties"]["p"]["minLength"] == 3
        assert schema["properties"]["p"]["nullable"] is False

    def test_length_range(self):
        schema = apply(rules.LENGTH, {"type": "string"}, ValidatorKind.LENGTH, {"min": 2, "max": 8})
        prop = schema["properties"]["p"]
        assert prop["minLength"] == 2
        assert prop["maxLength"] == 8

    def test_zero_min_length_not_written(self):
        schema = apply(rules.LENGTH, {"type": "string"}, ValidatorKind.LENGTH, {"min": 0, "max": 8})
        assert "minLength" not in schema["properties"]["p"]

    def test_array_uses_items_keywords(self):
        schema = apply(rules.LENGTH, {"type": "array"}, ValidatorKind.LENGTH, {"min": 1, "max": 4})
        assert schema["properties"]["p"] == {"type": "array", "minItems": 1, "maxItems": 4}

    def test_integer_unchanged(self):
        schema = apply(rules.LENGTH, {"type": "integer"}, ValidatorKind.LENGTH, {"min": 1, "max": 4})
        assert schema["properties"]["p"] == {"type": "integer"}

    def test_max_length_only_tightens(self):
        schema = apply(rules.LENGTH, {"type": "string", "maxLength": 20},
                       ValidatorKind.MAXIMUM_LENGTH, {"max": 50})
        assert schema["properties"]["p"]["maxLength"] == 20

        schema = apply(rules.LENGTH, {"type": "string", "maxLength": 100},
                       ValidatorKind.MAXIMUM_LENGTH, {"max": 50})
        assert schema["properties"]["p"]["maxLength"] == 50


class TestPattern:

    def test_sets_pattern(self):
        schema = apply(rules.PATTERN, {"type": "string"}, ValidatorKind.REGULAR_EXPRESSION,
                       {"pattern": "^[A-Z]+$"})
        assert schema["properties"]["p"]["pattern"] == "^[A-Z]+$"

    def test_second_pattern_goes_to_all_of(self):
        schema = apply(rules.PATTERN, {"type": "string", "pattern": "^[A-Z]+$"},
                       ValidatorKind.REGULAR_EXPRESSION, {"pattern": "^.{3}$"})
        prop = schema["properties"]["p"]
        assert "pattern" not in prop
        assert prop["allOf"] == [{"pattern": "^[A-Z]+$"}, {"pattern": "^.{3}$"}]

    def test_same_pattern_not_duplicated(self):
        schema = apply(rules.PATTERN, {"type": "string", "pattern": "^a$"},
                       ValidatorKind.REGULAR_EXPRESSION, {"pattern": "^a$"})
        assert schema["properties"]["p"] == {"type": "string", "pattern": "^a$"}

    def test_all_of_disabled_overwrites(self):
        options = SchemaOptions(use_all_of_for_multiple_rules=False)
        schema = apply(rules.PATTERN, {"type": "string", "pattern": "^a$"},
                       ValidatorKind.REGULAR_EXPRESSION, {"pattern": "^b$"},
                       schema_options=options)
        assert schema["properties"]["p"] == {"type": "string", "pattern": "^b$"}


class TestEmail:

    def test_sets_format(self):
        schema = apply(rules.EMAIL, {"type": "string"}, ValidatorKind.EMAIL)
        assert schema["properties"]["p"]["format"] == "email"


class TestComparison:

    @pytest.mark.parametrize("kind, expected", [
        (ValidatorKind.GREATER_THAN, {"minimum": 0, "exclusiveMinimum": True}),
        (ValidatorKind.GREATER_THAN_OR_EQUAL, {"minimum": 0}),
        (ValidatorKind.LESS_THAN, {"maximum": 0, "exclusiveMaximum": True}),
        (ValidatorKind.LESS_THAN_OR_EQUAL, {"maximum": 0}),
    ])
    def test_openapi3_bounds(self, kind, expected):
        schema = apply(rules.COMPARISON, {"type": "number"}, kind, {"value": 0})
        assert schema["properties"]["p"] == {"type": "number", **expected}

    def test_jsonschema_dialect_uses_numeric_exclusive(self):
        options = SchemaOptions(schema_dialect="jsonschema")
        schema = apply(rules.COMPARISON, {"type": "number"}, ValidatorKind.GREATER_THAN,
                       {"value": 0}, schema_options=options)
        assert schema["properties"]["p"] == {"type": "number", "exclusiveMinimum": 0}

    def test_non_numeric_value_not_matched(self):
        schema = apply(rules.COMPARISON, {"type": "string"}, ValidatorKind.GREATER_THAN,
                       {"value": "2020-01-01"})
        assert schema["properties"]["p"] == {"type": "string"}

    def test_bool_value_not_matched(self):
        schema = apply(rules.COMPARISON, {"type": "integer"}, ValidatorKind.GREATER_THAN,
                       {"value": True})
        assert schema["properties"]["p"] == {"type": "integer"}

    def test_lower_bound_only_tightens(self):
        schema = apply(rules.COMPARISON, {"type": "integer", "minimum": 10},
                       ValidatorKind.GREATER_THAN_OR_EQUAL, {"value": 5})
        assert schema["properties"]["p"] == {"type": "integer", "minimum": 10}

    def test_equal_bound_becomes_exclusive(self):
        schema = apply(rules.COMPARISON, {"type": "integer", "minimum": 10},
                       ValidatorKind.GREATER_THAN, {"value": 10})
        assert schema["properties"]["p"] == {
            "type": "integer", "minimum": 10, "exclusiveMinimum": True,
        }


class TestBetween:

    def test_inclusive(self):
        schema = apply(rules.BETWEEN, {"type": "integer"}, ValidatorKind.INCLUSIVE_BETWEEN,
                       {"from": 1, "to": 10})
        assert schema["properties"]["p"] == {"type": "integer", "minimum": 1, "maximum": 10}

    def test_exclusive(self):
        schema = apply(rules.BETWEEN, {"type": "number"}, ValidatorKind.EXCLUSIVE_BETWEEN,
                       {"from": 0.5, "to": 1.5})
        assert schema["properties"]["p"] == {
            "type": "number",
            "minimum": 0.5,
            "exclusiveMinimum": True,
            "maximum": 1.5,
            "exclusiveMaximum": True,
        }

    def test_exclusive_jsonschema_dialect(self):
        options = SchemaOptions(schema_dialect="jsonschema")
        schema = apply(rules.BETWEEN, {"type": "number"}, ValidatorKind.EXCLUSIVE_BETWEEN,
                       {"from": 0, "to": 1}, schema_options=options)
        assert schema["properties"]["p"] == {
            "type": "number", "exclusiveMinimum": 0, "exclusiveMaximum": 1,
        }
