"""
Expected and observed entity collections for completion aggregation.

Equality between the two is multiset equality: order does not matter but
duplicates do, so ``["a", "a"]`` never equals ``["a"]``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .type_aliases import ActionTag, ChannelName, EntityName, GroupName


def split_names(csv: str) -> tuple[str, ...]:
    """Split a comma-separated name list; the empty string is no names."""
    if not csv:
        return ()
    return tuple(csv.split(","))


def same_elements(first: Iterable[EntityName], second: Iterable[EntityName]) -> bool:
    """Order-independent, count-sensitive equality."""
    return Counter(first) == Counter(second)


def missing_elements(
    expected: Iterable[EntityName], observed: Iterable[EntityName]
) -> list[EntityName]:
    """Expected names (with multiplicity) not yet covered by ``observed``."""
    return list((Counter(expected) - Counter(observed)).elements())


@dataclass(frozen=True, slots=True)
class ExpectedSet:
    """Entities a test expects to see for one action."""

    action: ActionTag
    channels: tuple[ChannelName, ...] = ()
    groups: tuple[GroupName, ...] = ()

    @classmethod
    def from_csv(cls, action: ActionTag, channels: str, groups: str) -> ExpectedSet:
        return cls(
            action=action, channels=split_names(channels), groups=split_names(groups)
        )

    @classmethod
    def of(
        cls,
        action: ActionTag,
        channels: Iterable[ChannelName] = (),
        groups: Iterable[GroupName] = (),
    ) -> ExpectedSet:
        return cls(action=action, channels=tuple(channels), groups=tuple(groups))


@dataclass(slots=True)
class ObservedSet:
    """Entities reported so far; append-only."""

    channels: list[ChannelName] = field(default_factory=list)
    groups: list[GroupName] = field(default_factory=list)

    def add_channel(self, name: ChannelName) -> None:
        self.channels.append(name)

    def add_group(self, name: GroupName) -> None:
        self.groups.append(name)

    def satisfies(self, expected: ExpectedSet) -> bool:
        return same_elements(self.channels, expected.channels) and same_elements(
            self.groups, expected.groups
        )

    def missing(self, expected: ExpectedSet) -> tuple[list[str], list[str]]:
        return (
            missing_elements(expected.channels, self.channels),
            missing_elements(expected.groups, self.groups),
        )

    def snapshot(self) -> tuple[Sequence[ChannelName], Sequence[GroupName]]:
        return tuple(self.channels), tuple(self.groups)
