"""
Source rules deciding which entries a driver receives.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Union


@dataclass(frozen=True)
class AnySubsystem:
    """Every entry from `subsystem`, whatever its category."""
    subsystem: str

    def matches(self, subsystem: str, category: str) -> bool:
        return subsystem == self.subsystem


@dataclass(frozen=True)
class SubsystemAndCategories:
    """Entries from `subsystem` whose category is one of `categories`."""
    subsystem: str
    categories: FrozenSet[str]

    def __post_init__(self):
        if isinstance(self.categories, str):
            raise TypeError("categories must be a collection of strings, not a single string")
        object.__setattr__(self, "categories", frozenset(self.categories))

    def matches(self, subsystem: str, category: str) -> bool:
        return subsystem == self.subsystem and category in self.categories


SourceRule = Union[AnySubsystem, SubsystemAndCategories]


def matches_rules(rules: Iterable[SourceRule], subsystem: str, category: str) -> bool:
    """An empty rule set matches everything; otherwise any single rule is enough."""
    rules = tuple(rules)
    if not rules:
        return True
    return any(rule.matches(subsystem, category) for rule in rules)
