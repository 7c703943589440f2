"""Tag rule engine: decide whether an entity's tags select it for extraction.

A rule file maps a tag key to a matcher::

    boundary: true              # key present, any value
    disused: false              # switched off, never matches
    name: Central Park          # exact value
    route: [bus, tram]          # any of these values

Rules are OR-ed: an entity matches when any rule accepts its tags.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union, assert_never

import yaml

from osmsieve.entities import Node, Relation, Way
from osmsieve.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceRule:
    """Matches when ``key`` is present, regardless of value, if enabled."""

    key: str
    enabled: bool = True

    def matches(self, tags: Mapping[str, str]) -> bool:
        return self.enabled and self.key in tags

    def to_config(self) -> Any:
        return self.enabled


@dataclass(frozen=True)
class ValueRule:
    """Matches when ``tags[key]`` equals ``value`` exactly."""

    key: str
    value: str

    def matches(self, tags: Mapping[str, str]) -> bool:
        return tags.get(self.key) == self.value

    def to_config(self) -> Any:
        return self.value


@dataclass(frozen=True)
class SetRule:
    """Matches when ``tags[key]`` is one of ``values``."""

    key: str
    values: frozenset[str] = field(default_factory=frozenset)

    def matches(self, tags: Mapping[str, str]) -> bool:
        value = tags.get(self.key)
        return value is not None and value in self.values

    def to_config(self) -> Any:
        return sorted(self.values)


Rule = Union[PresenceRule, ValueRule, SetRule]


@dataclass(frozen=True)
class TagMatcher:
    """An OR over a set of tag rules."""

    rules: tuple[Rule, ...] = ()

    def matches(self, tags: Mapping[str, str]) -> bool:
        return any(rule.matches(tags) for rule in self.rules)

    def is_candidate(self, entity: Node | Way | Relation) -> bool:
        """Return True if ``entity`` is directly selected by the rules.

        Only relations are evaluated. Nodes and ways are never selected on
        their own tags and enter the output only as members of a selected
        relation.
        """
        match entity:
            case Relation():
                return self.matches(entity.tags)
            case Node():
                return False
            case Way():
                return False
            case _:
                assert_never(entity)

    def to_config(self) -> dict[str, Any]:
        """Return the rule set in rule-file form."""
        return {rule.key: rule.to_config() for rule in self.rules}

    def __len__(self) -> int:
        return len(self.rules)


def _scalar_to_str(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def parse_rules(data: Any, *, source: str = "<rules>") -> TagMatcher:
    """Build a TagMatcher from a parsed rule-file mapping.

    Raises:
        ConfigurationError: if the mapping or any matcher has an unsupported shape.
    """
    if data is None:
        return TagMatcher()
    if not isinstance(data, Mapping):
        raise ConfigurationError(source, f"expected a mapping of tag keys, got {type(data).__name__}")

    rules: list[Rule] = []
    for key, matcher in data.items():
        if not isinstance(key, str):
            raise ConfigurationError(source, f"tag key {key!r} must be a string")
        if isinstance(matcher, bool):
            rules.append(PresenceRule(key, matcher))
        elif isinstance(matcher, list):
            values: set[str] = set()
            for item in matcher:
                text = _scalar_to_str(item)
                if text is None:
                    raise ConfigurationError(
                        source, f"values for '{key}' must be strings, got {item!r}"
                    )
                values.add(text)
            rules.append(SetRule(key, frozenset(values)))
        else:
            text = _scalar_to_str(matcher)
            if text is None:
                raise ConfigurationError(
                    source,
                    f"matcher for '{key}' must be a boolean, a string or a list of strings",
                )
            rules.append(ValueRule(key, text))
    return TagMatcher(tuple(rules))


def load_matcher(path: str | Path) -> TagMatcher:
    """Load a TagMatcher from a YAML rule file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(str(path), e.strerror or str(e)) from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(str(path), f"YAML syntax error: {e}") from e

    matcher = parse_rules(data, source=str(path))
    logger.info("Loaded %d tag rule(s) from %s", len(matcher), path)
    return matcher
