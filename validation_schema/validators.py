"""
Validator descriptors and a small fluent builder for declaring them.

A validator descriptor is the kind of one field-level check plus its options,
for example "not-empty" or "maximum-length: 256". Rules match on the kind tag,
so no type inspection of validator objects is needed.

Example:
    account = ModelValidator("Account")
    account.rule_for("userName").not_empty().maximum_length(50)
    account.rule_for("password").maximum_length(256)

    for name in account.properties():
        for validator in account.validators_for(name):
            print(name, validator.kind, dict(validator.options))
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional


class ValidatorKind(Enum):
    """Kinds of field-level validation checks."""

    NOT_NULL = "not_null"
    NOT_EMPTY = "not_empty"
    LENGTH = "length"
    MINIMUM_LENGTH = "minimum_length"
    MAXIMUM_LENGTH = "maximum_length"
    EXACT_LENGTH = "exact_length"
    REGULAR_EXPRESSION = "regular_expression"
    EMAIL = "email"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    INCLUSIVE_BETWEEN = "inclusive_between"
    EXCLUSIVE_BETWEEN = "exclusive_between"
    CHILD = "child"
    CUSTOM = "custom"


def _freeze(options: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(options))


@dataclass(frozen=True)
class PropertyValidator:
    """
    Descriptor of a single validation check attached to a property.

    Attributes:
        kind: What the check does
        options: Kind-specific options (read-only), e.g. {"max": 50}
        conditional: True if the check only runs under a `when` condition
        condition: The `when` predicate, if one was given. Schema generation
            never evaluates it
    """

    kind: ValidatorKind
    options: Mapping[str, Any] = field(default_factory=dict)
    conditional: bool = False
    condition: Optional[Callable[[Any], bool]] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.kind, ValidatorKind):
            raise ValueError(f"Unknown validator kind: {self.kind!r}")
        object.__setattr__(self, "options", _freeze(self.options))

    def option(self, name: str, default: Any = None) -> Any:
        """Return a single option value."""
        return self.options.get(name, default)

    def describe(self) -> str:
        """Short human-readable form, e.g. 'maximum_length(max=50)'."""
        shown = {k: v for k, v in self.options.items() if k != "validator"}
        if self.kind is ValidatorKind.CHILD and "validator" in self.options:
            shown["type"] = self.options["validator"].type_name
        args = ", ".join(f"{k}={v!r}" for k, v in sorted(shown.items()))
        suffix = " when ..." if self.conditional else ""
        return f"{self.kind.value}({args}){suffix}"


class PropertyRuleBuilder:
    """Fluent builder returned by ModelValidator.rule_for()."""

    def __init__(self, model: "ModelValidator", property_name: str):
        self._model = model
        self.property_name = property_name

    def _add(self, kind: ValidatorKind, **options) -> "PropertyRuleBuilder":
        self._model._append(self.property_name, PropertyValidator(kind, options))
        return self

    def not_null(self):
        return self._add(ValidatorKind.NOT_NULL)

    def not_empty(self):
        return self._add(ValidatorKind.NOT_EMPTY)

    def length(self, min_length: int, max_length: int):
        if min_length < 0 or max_length < min_length:
            raise ValueError(
                f"Invalid length bounds for '{self.property_name}': "
                f"{min_length}..{max_length}"
            )
        return self._add(ValidatorKind.LENGTH, min=min_length, max=max_length)

    def minimum_length(self, min_length: int):
        return self._add(ValidatorKind.MINIMUM_LENGTH, min=min_length)

    def maximum_length(self, max_length: int):
        return self._add(ValidatorKind.MAXIMUM_LENGTH, max=max_length)

    def exact_length(self, length: int):
        return self._add(ValidatorKind.EXACT_LENGTH, min=length, max=length)

    def matches(self, pattern: str):
        return self._add(ValidatorKind.REGULAR_EXPRESSION, pattern=pattern)

    def email_address(self):
        return self._add(ValidatorKind.EMAIL)

    def greater_than(self, value):
        return self._add(ValidatorKind.GREATER_THAN, value=value)

    def greater_than_or_equal_to(self, value):
        return self._add(ValidatorKind.GREATER_THAN_OR_EQUAL, value=value)

    def less_than(self, value):
        return self._add(ValidatorKind.LESS_THAN, value=value)

    def less_than_or_equal_to(self, value):
        return self._add(ValidatorKind.LESS_THAN_OR_EQUAL, value=value)

    def inclusive_between(self, lower, upper):
        return self._add(ValidatorKind.INCLUSIVE_BETWEEN, **{"from": lower, "to": upper})

    def exclusive_between(self, lower, upper):
        return self._add(ValidatorKind.EXCLUSIVE_BETWEEN, **{"from": lower, "to": upper})

    def set_validator(self, child: "ModelValidator"):
        """Validate the property's nested object with another model validator."""
        return self._add(ValidatorKind.CHILD, validator=child)

    def custom(self, name: str, **options):
        return self._add(ValidatorKind.CUSTOM, name=name, **options)

    def when(self, predicate: Optional[Callable[[Any], bool]] = None):
        """
        Mark the most recently added validator as conditional.

        The predicate is stored on the validator as `condition` but never
        evaluated here; schema generation only needs to know that the check
        does not always run.
        """
        self._model._mark_last_conditional(self.property_name, predicate)
        return self


class ModelValidator:
    """
    Ordered set of property validators for one type.

    Args:
        type_name: Name of the schema type this validator describes
    """

    def __init__(self, type_name: str):
        self.type_name = type_name
        self._validators: Dict[str, List[PropertyValidator]] = {}

    def rule_for(self, property_name: str) -> PropertyRuleBuilder:
        self._validators.setdefault(property_name, [])
        return PropertyRuleBuilder(self, property_name)

    def properties(self) -> List[str]:
        """Property names in declaration order."""
        return list(self._validators)

    def validators_for(self, property_name: str) -> List[PropertyValidator]:
        return list(self._validators.get(property_name, []))

    def _append(self, property_name: str, validator: PropertyValidator) -> None:
        self._validators.setdefault(property_name, []).append(validator)

    def _mark_last_conditional(
        self, property_name: str, predicate: Optional[Callable[[Any], bool]] = None
    ) -> None:
        validators = self._validators.get(property_name)
        if not validators:
            raise ValueError(
                f"when() called before any validator was added to '{property_name}'"
            )
        validators[-1] = replace(validators[-1], conditional=True, condition=predicate)

    def __repr__(self):
        return f"ModelValidator({self.type_name!r}, properties={self.properties()!r})"
