"""
validation-schema: OpenAPI / JSON-Schema constraints from validation rules

This library derives schema constraints from declarative field validators:
- Validator descriptors with a fluent builder (ModelValidator)
- Immutable schema rules matched by predicate lists (SchemaRule)
- An ordered rule registry with override-by-name (RuleRegistry)
- Built-in rules for required, length, pattern, email and numeric bounds
- YAML configuration with local or remote overrides
- Schema checking and instance validation via jsonschema

Example:
    from validation_schema import ModelValidator, SchemaRuleService

    account = ModelValidator("Account")
    account.rule_for("password").maximum_length(256)

    service = SchemaRuleService()
    service.apply_rules(account_schema, account)
"""

from .api import SchemaRuleService
from .default_rules import default_rules, kind_is
from .registry import RuleRegistry
from .rule import RuleContext, SchemaOptions, SchemaRule
from .validators import ModelValidator, PropertyValidator, ValidatorKind

__version__ = "0.1.0"
__all__ = [
    "SchemaRuleService",
    "SchemaRule",
    "RuleContext",
    "SchemaOptions",
    "RuleRegistry",
    "ModelValidator",
    "PropertyValidator",
    "ValidatorKind",
    "default_rules",
    "kind_is",
]
