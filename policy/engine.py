"""
policy/engine.py

Rule-based commercial policy engine.

For every model in the target population:

    1. Tally the quality tier of every joined product (ORIGINAL / PREMIUM / STANDARD).
    2. Place the model in an age segment from its end-of-production year.
    3. Apply the first matching rule of that segment from :data:`POLICY_RULES`.

The result list is sorted CRITICAL → WARNING → OK, keeping input order
among findings of equal severity.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from crossref.join_index import JoinIndex
from crossref.keys import JoinKey
from crossref.records import FleetModel, ProductRecord
from policy.base import BasePolicyEngine
from policy.quality import QualityTier, classify
from policy.rules import (
    ACTION_TEAMS,
    MIX_CORRECT_TEXT,
    POLICY_RULES,
    ActionType,
    AgeSegment,
    PolicyRule,
    PolicyStatus,
    QualityMix,
    classify_segment,
    match_rule,
)


@dataclass(frozen=True)
class PolicyAction:
    action_type: ActionType
    text: str
    team: str | None

    def describe(self) -> str:
        """Render the action as ``[TYPE] text (team)``."""
        team = self.team if self.team is not None else "-"
        return f"[{self.action_type.value}] {self.text} ({team})"


@dataclass(frozen=True)
class PolicyFinding:
    model_id: JoinKey | None
    brand: str
    model_name: str
    year_to: int | None
    age_segment: AgeSegment
    quality_mix: QualityMix
    status: PolicyStatus
    actions: tuple[PolicyAction, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "brand": self.brand,
            "model_name": self.model_name,
            "year_to": self.year_to,
            "age_segment": self.age_segment.value,
            "quality_mix": {
                "original": self.quality_mix.original,
                "premium": self.quality_mix.premium,
                "standard": self.quality_mix.standard,
            },
            "status": self.status.value,
            "actions": [
                {
                    "action_type": action.action_type.value,
                    "text": action.text,
                    "team": action.team,
                }
                for action in self.actions
            ],
        }


def tally_quality(
    products: Iterable[ProductRecord],
    classifier: Callable[[object], QualityTier] = classify,
) -> QualityMix:
    original = premium = standard = 0
    for product in products:
        tier = classifier(product.supplier_code)
        if tier is QualityTier.ORIGINAL:
            original += 1
        elif tier is QualityTier.PREMIUM:
            premium += 1
        else:
            standard += 1
    return QualityMix(original=original, premium=premium, standard=standard)


class PolicyEngine(BasePolicyEngine):
    """
    Stateless policy engine driven by an ordered rule table.

    The rule table and quality classifier are injectable so alternative
    tables can be tested without touching evaluation flow.
    """

    def __init__(
        self,
        rules: Sequence[PolicyRule] = POLICY_RULES,
        classifier: Callable[[object], QualityTier] = classify,
    ) -> None:
        self._rules = tuple(rules)
        self._classifier = classifier

    def evaluate(
        self,
        fleet: Iterable[FleetModel],
        join_index: JoinIndex,
    ) -> list[PolicyFinding]:
        findings = [self.evaluate_model(model, join_index.products_for(model)) for model in fleet]
        return sorted(findings, key=lambda finding: -finding.status.severity)

    def evaluate_model(
        self,
        model: FleetModel,
        products: Iterable[ProductRecord],
    ) -> PolicyFinding:
        mix = tally_quality(products, self._classifier)
        segment = classify_segment(model.year_to)
        rule = match_rule(segment, mix, self._rules)

        if rule is None:
            status = PolicyStatus.OK
            action = PolicyAction(
                action_type=ActionType.OK,
                text=MIX_CORRECT_TEXT,
                team=ACTION_TEAMS[ActionType.OK],
            )
        else:
            status = rule.status
            action = PolicyAction(action_type=rule.action_type, text=rule.text, team=rule.team)

        return PolicyFinding(
            model_id=model.join_key,
            brand=model.brand,
            model_name=model.model_name,
            year_to=model.year_to,
            age_segment=segment,
            quality_mix=mix,
            status=status,
            actions=(action,),
        )


def select_population(fleet: Iterable[FleetModel], category: str) -> list[FleetModel]:
    """Return the fleet models in the given priority category."""
    return [model for model in fleet if model.priority_category == category]


def filter_by_segment(
    findings: Iterable[PolicyFinding],
    segment: AgeSegment | str | None,
) -> list[PolicyFinding]:
    """Narrow findings to one age segment; ``None`` keeps everything."""
    if segment is None:
        return list(findings)
    wanted = AgeSegment(segment)
    return [finding for finding in findings if finding.age_segment is wanted]


_default_engine = PolicyEngine()


def evaluate(fleet: Iterable[FleetModel], join_index: JoinIndex) -> list[PolicyFinding]:
    """Evaluate *fleet* with the default rule table."""
    return _default_engine.evaluate(fleet, join_index)
