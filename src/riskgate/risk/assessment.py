"""Deterministic risk scoring for a set of changed files.

The assessment combines three families of signals:

1. the contract's explicit ``high`` tier patterns,
2. fixed semantic path classes (public API, auth, migrations, workflows),
3. historical operational memory (flaky tests, incidents, rollbacks).

Inputs are sorted before scoring, so the result depends only on the set of
files, never on their order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from riskgate.policy.patterns import filter_matches
from riskgate.policy.types import PolicyContract, Tier
from riskgate.risk.signals import (
    CONTRACT_RULE_RATIONALE,
    CONTRACT_RULE_SIGNAL,
    CONTRACT_RULE_WEIGHT,
    HIGH_RISK_THRESHOLD,
    HISTORICAL_CATEGORIES,
    SEMANTIC_SIGNALS,
)
from riskgate.risk.types import (
    EMPTY_HISTORICAL_METADATA,
    HistoricalRiskMetadata,
    HistoricalSignalEntry,
    RiskAssessment,
    RiskExplanation,
    RiskSignal,
    SignalCategory,
)

logger = logging.getLogger(__name__)


def assess(
    changed_files: Iterable[str],
    contract: PolicyContract,
    historical: HistoricalRiskMetadata | None = None,
) -> RiskAssessment:
    """Compute risk tier, score, and a transparent explanation."""
    metadata = historical if historical is not None else EMPTY_HISTORICAL_METADATA
    files = sorted(changed_files)
    signals: list[RiskSignal] = []

    high_matches = filter_matches(files, contract.risk_tier_rules["high"])
    if high_matches:
        signals.append(
            RiskSignal(
                category=SignalCategory.CONTRACT_RULE,
                signal=CONTRACT_RULE_SIGNAL,
                weight=CONTRACT_RULE_WEIGHT,
                rationale=CONTRACT_RULE_RATIONALE,
                matched_files=tuple(high_matches),
            )
        )

    for definition in SEMANTIC_SIGNALS:
        matches = filter_matches(files, definition.patterns)
        if matches:
            signals.append(
                RiskSignal(
                    category=definition.category,
                    signal=definition.signal,
                    weight=definition.weight,
                    rationale=definition.rationale,
                    matched_files=tuple(matches),
                )
            )

    for attribute, category, prefix in HISTORICAL_CATEGORIES:
        signals.extend(_historical_signals(files, getattr(metadata, attribute), category, prefix))

    score = sum(signal.weight for signal in signals)
    tier: Tier = "high" if score >= HIGH_RISK_THRESHOLD else "low"
    for signal in signals:
        logger.debug("risk signal %s (+%d) on %d file(s)", signal.signal, signal.weight, len(signal.matched_files))

    return RiskAssessment(
        tier=tier,
        score=score,
        threshold=HIGH_RISK_THRESHOLD,
        changed_files=tuple(files),
        explanation=RiskExplanation(
            triggered_signals=tuple(signals),
            score_breakdown=tuple(signal.breakdown_line() for signal in signals),
        ),
    )


def _historical_signals(
    files: list[str],
    entries: tuple[HistoricalSignalEntry, ...],
    category: SignalCategory,
    prefix: str,
) -> list[RiskSignal]:
    signals: list[RiskSignal] = []
    for entry in entries:
        matches = filter_matches(files, [entry.pattern])
        if matches:
            signals.append(
                RiskSignal(
                    category=category,
                    signal=f"{prefix}:{entry.pattern}",
                    weight=entry.weight,
                    rationale=entry.reason,
                    matched_files=tuple(matches),
                )
            )
    return signals


def compute_risk_tier(
    changed_files: Iterable[str],
    contract: PolicyContract,
    historical: HistoricalRiskMetadata | None = None,
) -> Tier:
    return assess(changed_files, contract, historical).tier


def compute_required_checks(
    changed_files: Iterable[str],
    contract: PolicyContract,
    historical: HistoricalRiskMetadata | None = None,
) -> tuple[str, ...]:
    tier = compute_risk_tier(changed_files, contract, historical)
    return contract.merge_policy[tier].required_checks


def needs_code_review_agent(
    changed_files: Iterable[str],
    contract: PolicyContract,
    historical: HistoricalRiskMetadata | None = None,
) -> bool:
    tier = compute_risk_tier(changed_files, contract, historical)
    return contract.merge_policy[tier].require_code_review_agent


def needs_browser_evidence(
    changed_files: Iterable[str],
    contract: PolicyContract,
    historical: HistoricalRiskMetadata | None = None,
) -> bool:
    tier = compute_risk_tier(changed_files, contract, historical)
    return contract.merge_policy[tier].require_browser_evidence
