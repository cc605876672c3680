"""Risk assessment engine."""

from riskgate.risk.assessment import (
    assess,
    compute_required_checks,
    compute_risk_tier,
    needs_browser_evidence,
    needs_code_review_agent,
)
from riskgate.risk.history import load_historical_metadata, parse_historical_metadata
from riskgate.risk.signals import HIGH_RISK_THRESHOLD, SEMANTIC_SIGNALS
from riskgate.risk.types import (
    EMPTY_HISTORICAL_METADATA,
    HistoricalRiskMetadata,
    HistoricalSignalEntry,
    RiskAssessment,
    RiskSignal,
    SignalCategory,
)

__all__ = [
    "EMPTY_HISTORICAL_METADATA",
    "HIGH_RISK_THRESHOLD",
    "SEMANTIC_SIGNALS",
    "HistoricalRiskMetadata",
    "HistoricalSignalEntry",
    "RiskAssessment",
    "RiskSignal",
    "SignalCategory",
    "assess",
    "compute_required_checks",
    "compute_risk_tier",
    "load_historical_metadata",
    "needs_browser_evidence",
    "needs_code_review_agent",
    "parse_historical_metadata",
]
