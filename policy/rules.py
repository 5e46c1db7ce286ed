"""
policy/rules.py

Commercial policy decision table.

Each fleet model is placed in an age segment by its last production year,
then the segment's rules are tried in order against the model's quality
mix. The first matching rule decides status and action; when none match
the mix is considered correct.

Segments (inclusive upper bounds on ``year_to``)
------------------------------------------------
Vintage   year_to <= 2000          ideal: standard tier only
Modern    2000 < year_to <= 2015   ideal: premium/original AND standard
New       year_to > 2015           ideal: premium/original only
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum


class AgeSegment(str, Enum):
    VINTAGE = "Vintage"
    MODERN = "Modern"
    NEW = "New"


class PolicyStatus(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY: dict[PolicyStatus, int] = {
    PolicyStatus.OK: 1,
    PolicyStatus.WARNING: 2,
    PolicyStatus.CRITICAL: 3,
}


class ActionType(str, Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"
    EVAL = "EVAL"
    DEV = "DEV"
    OK = "OK"


# Owning team per action type. OK actions have no owner.
ACTION_TEAMS: dict[ActionType, str | None] = {
    ActionType.ADD: "Purchasing",
    ActionType.REMOVE: "Sales / Product",
    ActionType.EVAL: "Sales / Commercial",
    ActionType.DEV: "Development / Product",
    ActionType.OK: None,
}

# (inclusive upper bound on year_to, segment); anything later is NEW.
SEGMENT_BOUNDS: tuple[tuple[int, AgeSegment], ...] = (
    (2000, AgeSegment.VINTAGE),
    (2015, AgeSegment.MODERN),
)

MIX_CORRECT_TEXT = "mix correct"


@dataclass(frozen=True)
class QualityMix:
    original: int = 0
    premium: int = 0
    standard: int = 0

    @property
    def total(self) -> int:
        return self.original + self.premium + self.standard

    @property
    def has_premium_line(self) -> bool:
        return self.premium > 0 or self.original > 0

    @property
    def has_standard_line(self) -> bool:
        return self.standard > 0

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class PolicyRule:
    segment: AgeSegment
    name: str
    applies: Callable[[QualityMix], bool]
    status: PolicyStatus
    action_type: ActionType
    text: str

    @property
    def team(self) -> str | None:
        return ACTION_TEAMS[self.action_type]


POLICY_RULES: tuple[PolicyRule, ...] = (
    # Vintage
    PolicyRule(
        segment=AgeSegment.VINTAGE,
        name="vintage_no_coverage",
        applies=lambda mix: mix.is_empty,
        status=PolicyStatus.CRITICAL,
        action_type=ActionType.DEV,
        text="develop standard-tier option",
    ),
    PolicyRule(
        segment=AgeSegment.VINTAGE,
        name="vintage_premium_without_standard",
        applies=lambda mix: mix.standard == 0 and mix.premium > 0,
        status=PolicyStatus.WARNING,
        action_type=ActionType.EVAL,
        text="evaluate standard-tier alternative for cost",
    ),
    PolicyRule(
        segment=AgeSegment.VINTAGE,
        name="vintage_premium_alongside_standard",
        applies=lambda mix: mix.premium > 0 and mix.standard > 0,
        status=PolicyStatus.WARNING,
        action_type=ActionType.REMOVE,
        text="discontinue premium (low rotation)",
    ),
    # Modern
    PolicyRule(
        segment=AgeSegment.MODERN,
        name="modern_no_coverage",
        applies=lambda mix: not mix.has_premium_line and not mix.has_standard_line,
        status=PolicyStatus.CRITICAL,
        action_type=ActionType.ADD,
        text="no coverage: source a supplier",
    ),
    PolicyRule(
        segment=AgeSegment.MODERN,
        name="modern_missing_premium",
        applies=lambda mix: not mix.has_premium_line,
        status=PolicyStatus.WARNING,
        action_type=ActionType.ADD,
        text="add premium option",
    ),
    PolicyRule(
        segment=AgeSegment.MODERN,
        name="modern_missing_standard",
        applies=lambda mix: not mix.has_standard_line,
        status=PolicyStatus.WARNING,
        action_type=ActionType.ADD,
        text="add standard option",
    ),
    # New
    PolicyRule(
        segment=AgeSegment.NEW,
        name="new_missing_premium",
        applies=lambda mix: mix.premium == 0 and mix.original == 0,
        status=PolicyStatus.CRITICAL,
        action_type=ActionType.ADD,
        text="missing premium/original line",
    ),
    PolicyRule(
        segment=AgeSegment.NEW,
        name="new_standard_present",
        applies=lambda mix: mix.standard > 0,
        status=PolicyStatus.WARNING,
        action_type=ActionType.REMOVE,
        text="remove standard tier (brand risk)",
    ),
)


def classify_segment(year_to: int | None) -> AgeSegment:
    """
    Place a model in an age segment.

    A missing end year counts as year 0, i.e. the oldest segment.
    """
    year = year_to if year_to is not None else 0
    for upper_bound, segment in SEGMENT_BOUNDS:
        if year <= upper_bound:
            return segment
    return AgeSegment.NEW


def match_rule(
    segment: AgeSegment,
    mix: QualityMix,
    rules: Sequence[PolicyRule] = POLICY_RULES,
) -> PolicyRule | None:
    """Return the first rule of *segment* that applies to *mix*, if any."""
    for rule in rules:
        if rule.segment is segment and rule.applies(mix):
            return rule
    return None
