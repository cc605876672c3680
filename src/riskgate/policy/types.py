"""Policy contract domain types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Tier = Literal["high", "low"]

TIERS: tuple[Tier, ...] = ("high", "low")

DEFAULT_CONTRACT_RELATIVE_PATH = Path("risk-policy.contract.json")
DEFAULT_METADATA_RELATIVE_PATH = Path("risk-signals.metadata.json")

CONTRACT_TOP_LEVEL_KEYS: tuple[str, ...] = (
    "version",
    "riskTierRules",
    "mergePolicy",
    "docsDriftRules",
    "browserEvidence",
    "reviewAgent",
    "remediationAgent",
    "harnessGapLoop",
)


@dataclass(frozen=True)
class MergePolicyEntry:
    """Merge requirements for one risk tier."""

    required_checks: tuple[str, ...]
    require_code_review_agent: bool
    require_browser_evidence: bool


@dataclass(frozen=True)
class PathClassCoverage:
    """Docs coverage rule scoped to one class of paths."""

    id: str
    trigger_paths: tuple[str, ...]
    required_doc_paths: tuple[str, ...]
    reason: str


@dataclass(frozen=True)
class DocsDriftRules:
    control_plane_paths: tuple[str, ...]
    required_doc_paths: tuple[str, ...]
    coverage_by_path_class: tuple[PathClassCoverage, ...] = ()


@dataclass(frozen=True)
class BrowserEvidenceConfig:
    required_flows: tuple[str, ...]
    required_fields: tuple[str, ...]
    max_age_days: float


@dataclass(frozen=True)
class ReviewAgentConfig:
    name: str
    rerun_workflow: str
    auto_resolve_workflow: str
    timeout_minutes: float
    bot_user: str


@dataclass(frozen=True)
class RemediationAgentConfig:
    name: str
    enabled: bool
    pin_model: bool
    skip_stale_comments: bool
    max_attempts: int


@dataclass(frozen=True)
class HarnessGapLoopConfig:
    enabled: bool
    issue_label: str
    sla_tracking: bool


@dataclass(frozen=True)
class PolicyContract:
    """Validated, immutable risk-policy contract."""

    version: str
    risk_tier_rules: dict[Tier, tuple[str, ...]]
    merge_policy: dict[Tier, MergePolicyEntry]
    docs_drift_rules: DocsDriftRules
    browser_evidence: BrowserEvidenceConfig
    review_agent: ReviewAgentConfig
    remediation_agent: RemediationAgentConfig
    harness_gap_loop: HarnessGapLoopConfig
    path: Path | None = None
