"""
Schema rules: a name, match predicates, and an action that mutates a schema.

A rule matches a validator descriptor when every one of its conditions
returns True. Conditions are evaluated in order and evaluation stops at the
first False, so ordering affects cost but never the result.

Rules are immutable. with_condition() and with_apply() return new rules that
share the unchanged parts with the original, so a rule held by one registry
can be narrowed or re-pointed by another consumer without affecting it.

Example:
    max_length = SchemaRule(
        "MaxLength",
        [kind_is(ValidatorKind.MAXIMUM_LENGTH)],
        lambda ctx: ctx.property_schema.update(maxLength=ctx.validator.option("max")),
    )
    only_short = max_length.with_condition(lambda v: v.option("max") < 100)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .validators import PropertyValidator

Condition = Callable[[PropertyValidator], bool]


def _noop(context: "RuleContext") -> None:
    pass


@dataclass(frozen=True)
class SchemaOptions:
    """Options that shape how default rules write schema keywords."""

    set_not_nullable_if_min_length_greater_than_zero: bool = True
    use_all_of_for_multiple_rules: bool = True
    schema_dialect: str = "openapi3"

    DIALECTS = ("openapi3", "jsonschema")

    def __post_init__(self):
        if self.schema_dialect not in self.DIALECTS:
            raise ValueError(
                f"Unsupported schema_dialect '{self.schema_dialect}'. "
                f"Must be one of: {', '.join(self.DIALECTS)}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SchemaOptions":
        """Build options from a config section, rejecting unknown keys."""
        data = dict(data or {})
        known = {
            "set_not_nullable_if_min_length_greater_than_zero",
            "use_all_of_for_multiple_rules",
            "schema_dialect",
        }
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown schema options: {', '.join(sorted(unknown))}")
        return cls(**data)


@dataclass
class RuleContext:
    """
    Everything an apply action needs to mutate a schema.

    Attributes:
        schema: Schema of the declaring type (has a "properties" mapping)
        property_name: Property the validator is attached to
        validator: The matched validator descriptor
        schema_type: Name of the declaring type
        options: Schema generation options
    """

    schema: Dict[str, Any]
    property_name: str
    validator: PropertyValidator
    schema_type: str = ""
    options: SchemaOptions = field(default_factory=SchemaOptions)

    @property
    def property_schema(self) -> Dict[str, Any]:
        """Schema of the property being described, created empty if missing."""
        properties = self.schema.setdefault("properties", {})
        return properties.setdefault(self.property_name, {})

    def mark_required(self) -> None:
        """Add the property to the schema's required list (once)."""
        required = self.schema.setdefault("required", [])
        if self.property_name not in required:
            required.append(self.property_name)

    def has_type(self, name: str) -> bool:
        """True if the property declares `name` as its type (or one of its types)."""
        declared = self.schema.get("properties", {}).get(self.property_name, {}).get("type")
        if isinstance(declared, list):
            return name in declared
        return declared == name

    def is_array(self) -> bool:
        return self.has_type("array")

    def is_string(self) -> bool:
        return self.has_type("string")


@dataclass(frozen=True, init=False, repr=False)
class SchemaRule:
    """
    A named rule: conditions that select validators, and an action to apply.

    Args:
        name: Rule identifier (used for diagnostics and registry overrides)
        conditions: Predicates over PropertyValidator; None means no conditions
        apply: Action taking a RuleContext; None means a no-op
    """

    name: str
    conditions: Tuple[Condition, ...] = ()
    apply: Callable[[RuleContext], None] = _noop

    def __init__(
        self,
        name: str,
        conditions: Optional[Iterable[Condition]] = None,
        apply: Optional[Callable[[RuleContext], None]] = None,
    ):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "conditions", tuple(conditions or ()))
        object.__setattr__(self, "apply", apply if apply is not None else _noop)

    def is_matches(self, validator: PropertyValidator) -> bool:
        """Return True if every condition accepts the validator."""
        for condition in self.conditions:
            if not condition(validator):
                return False
        return True

    def with_condition(self, condition: Condition) -> "SchemaRule":
        """Return a new rule with one more condition appended."""
        return SchemaRule(self.name, self.conditions + (condition,), self.apply)

    def with_apply(self, apply: Callable[[RuleContext], None]) -> "SchemaRule":
        """Return a new rule with the apply action replaced."""
        return SchemaRule(self.name, self.conditions, apply)

    def __repr__(self):
        return f"SchemaRule({self.name!r}, conditions={len(self.conditions)})"
