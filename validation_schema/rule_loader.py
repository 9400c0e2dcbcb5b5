"""
Rule Loader - Loading Extra Rules From Configuration

Extra rules are named in config as import references of the form
`package.module:attribute`. The attribute may be:

- a SchemaRule
- a list or tuple of SchemaRules
- a zero-argument callable returning either of the above

Example config:

    extra_rules:
      - myapp.schema_rules:UPPERCASE_CODES
      - myapp.schema_rules:tenant_rules

The module is imported with importlib, so it must be importable from sys.path.
Resolved rules are cached per reference.
"""

import importlib
from typing import Any, Dict, List

from .rule import SchemaRule


class RuleLoader:
    """Loads SchemaRules from `module:attribute` references"""

    def __init__(self):
        self.loaded_rules: Dict[str, List[SchemaRule]] = {}  # Cache: reference -> rules

    def load_rules(self, references: List[str]) -> List[SchemaRule]:
        """
        Load rules for all references, in order.

        Args:
            references: List of `module:attribute` strings

        Returns:
            Flattened list of SchemaRules
        """
        rules = []
        for reference in references:
            rules.extend(self.load_reference(reference))
        return rules

    def load_reference(self, reference: str) -> List[SchemaRule]:
        """
        Load the rules behind a single reference.

        Raises:
            ValueError: If the reference is not of the form module:attribute
            ImportError: If the module cannot be imported
            AttributeError: If the attribute does not exist
            TypeError: If the attribute does not resolve to SchemaRules
        """
        if reference in self.loaded_rules:
            return list(self.loaded_rules[reference])

        module_name, sep, attribute = reference.partition(":")
        if not sep or not module_name or not attribute:
            raise ValueError(
                f"Invalid rule reference '{reference}'. Expected 'module:attribute'."
            )

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ImportError(f"Failed to import rule module {module_name}: {e}") from e

        if not hasattr(module, attribute):
            raise AttributeError(
                f"Rule attribute '{attribute}' not found in module '{module_name}'"
            )

        rules = self._as_rules(reference, getattr(module, attribute))
        self.loaded_rules[reference] = rules
        return list(rules)

    def _as_rules(self, reference: str, value: Any) -> List[SchemaRule]:
        if callable(value) and not isinstance(value, SchemaRule):
            value = value()

        if isinstance(value, SchemaRule):
            return [value]

        if isinstance(value, (list, tuple)) and all(
            isinstance(item, SchemaRule) for item in value
        ):
            return list(value)

        raise TypeError(
            f"Rule reference '{reference}' must resolve to a SchemaRule or a list "
            f"of SchemaRules, got {type(value).__name__}"
        )
