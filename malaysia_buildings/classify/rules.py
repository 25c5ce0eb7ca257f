"""Ordered predicate/result rules shared by the tag classifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Union

from malaysia_buildings.common.tags import OsmTags

Predicate = Callable[[OsmTags], bool]
Result = Union[str, Callable[[OsmTags], str]]


@dataclass(frozen=True)
class Rule:
    predicate: Predicate
    result: Result

    def resolve(self, tags: OsmTags) -> str:
        if callable(self.result):
            return self.result(tags)
        return self.result


def first_match(rules: Iterable[Rule], tags: OsmTags) -> str | None:
    for rule in rules:
        if rule.predicate(tags):
            return rule.resolve(tags)
    return None


def tag_in(key: str, values: Sequence[str]) -> Predicate:
    allowed = frozenset(values)
    return lambda tags: tags.lowered(key) in allowed


def tag_present(key: str) -> Predicate:
    return lambda tags: tags.value(key) is not None


def any_of(*predicates: Predicate) -> Predicate:
    return lambda tags: any(predicate(tags) for predicate in predicates)


def humanize(value: str) -> str:
    """``fast_food`` -> ``Fast Food``."""
    words = value.replace("_", " ").replace(";", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)
