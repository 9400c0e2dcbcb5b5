"""Ordered, name-addressable collection of schema rules."""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .rule import SchemaRule
from .validators import PropertyValidator

logger = logging.getLogger(__name__)


class RuleRegistry:
    """
    Holds schema rules in registration order.

    Registration order is the order in which matching rules are applied, so
    when two rules write the same schema keyword the one registered later wins.

    Names are not required to be unique; get(), override() and remove() act on
    the first rule with the given name.
    """

    def __init__(self, rules: Optional[Iterable[SchemaRule]] = None):
        self._entries: List[Tuple[SchemaRule, str]] = []  # (rule, source)
        for rule in rules or ():
            self.register(rule)

    def register(self, rule: SchemaRule, source: str = "default") -> "RuleRegistry":
        """Append a rule. Returns self so calls can be chained."""
        if not isinstance(rule, SchemaRule):
            raise TypeError(f"Expected SchemaRule, got {type(rule).__name__}")
        self._entries.append((rule, source))
        return self

    def override(self, rule: SchemaRule, source: str = "override") -> "RuleRegistry":
        """
        Replace the first rule named rule.name, keeping its position.

        Appends the rule if no rule with that name is registered.
        """
        index = self._index_of(rule.name)
        if index is None:
            return self.register(rule, source)

        self._entries[index] = (rule, source)
        logger.debug(f"Rule '{rule.name}' overridden at position {index}")
        return self

    def remove(self, name: str) -> bool:
        """Remove the first rule with this name. Returns True if one was removed."""
        index = self._index_of(name)
        if index is None:
            return False
        del self._entries[index]
        return True

    def get(self, name: str) -> SchemaRule:
        """
        Return the first rule with this name.

        Raises:
            KeyError: If no rule has this name
        """
        index = self._index_of(name)
        if index is None:
            raise KeyError(f"Rule not found: {name}")
        return self._entries[index][0]

    def names(self) -> List[str]:
        return [rule.name for rule, _ in self._entries]

    def entries(self) -> List[Tuple[SchemaRule, str]]:
        """(rule, source) pairs in registration order."""
        return list(self._entries)

    def matching(self, validator: PropertyValidator) -> List[SchemaRule]:
        """All rules that match the validator, in registration order."""
        return [rule for rule, _ in self._entries if rule.is_matches(validator)]

    def copy(self) -> "RuleRegistry":
        """Independent registry holding the same (immutable) rules."""
        clone = RuleRegistry()
        clone._entries = list(self._entries)
        return clone

    def _index_of(self, name: str) -> Optional[int]:
        for index, (rule, _) in enumerate(self._entries):
            if rule.name == name:
                return index
        return None

    def __iter__(self) -> Iterator[SchemaRule]:
        return iter([rule for rule, _ in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return self._index_of(name) is not None
