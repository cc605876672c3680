"""Risk assessment domain types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from riskgate.policy.types import Tier


class SignalCategory(StrEnum):
    CONTRACT_RULE = "contract-rule"
    SEMANTIC_PUBLIC_API = "semantic-public-api"
    SEMANTIC_AUTH_PERMISSIONS = "semantic-auth-permissions"
    SEMANTIC_MIGRATION = "semantic-migration"
    SEMANTIC_WORKFLOW = "semantic-workflow"
    HISTORY_FLAKY_TESTS = "history-flaky-tests"
    HISTORY_INCIDENTS = "history-incidents"
    HISTORY_ROLLBACKS = "history-rollbacks"


@dataclass(frozen=True)
class HistoricalSignalEntry:
    """One externally maintained risk memory entry."""

    pattern: str
    weight: int
    reason: str


@dataclass(frozen=True)
class HistoricalRiskMetadata:
    version: str = "1"
    recent_flaky_tests: tuple[HistoricalSignalEntry, ...] = ()
    incident_tagged_files: tuple[HistoricalSignalEntry, ...] = ()
    prior_rollback_areas: tuple[HistoricalSignalEntry, ...] = ()


EMPTY_HISTORICAL_METADATA = HistoricalRiskMetadata()


@dataclass(frozen=True)
class SemanticSignal:
    """Fixed path-class signal definition."""

    category: SignalCategory
    signal: str
    patterns: tuple[str, ...]
    weight: int
    rationale: str


@dataclass(frozen=True)
class RiskSignal:
    """A triggered, weighted piece of risk evidence."""

    category: SignalCategory
    signal: str
    weight: int
    rationale: str
    matched_files: tuple[str, ...]

    def breakdown_line(self) -> str:
        return f"{self.signal} (+{self.weight}) => {', '.join(self.matched_files)}"


@dataclass(frozen=True)
class RiskExplanation:
    triggered_signals: tuple[RiskSignal, ...]
    score_breakdown: tuple[str, ...]


@dataclass(frozen=True)
class RiskAssessment:
    """Deterministic score, tier, and explanation for a change set."""

    tier: Tier
    score: int
    threshold: int
    changed_files: tuple[str, ...]
    explanation: RiskExplanation
