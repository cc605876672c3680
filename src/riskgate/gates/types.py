"""Gate input and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from riskgate.policy.types import Tier
from riskgate.risk.types import RiskAssessment

CheckStatus = Literal["queued", "in_progress", "completed"]
ReviewStatus = Literal["success", "failure", "pending"]

# Manifest field name -> EvidenceEntry attribute
MANIFEST_FIELDS: dict[str, str] = {
    "flowName": "flow_name",
    "entrypoint": "entrypoint",
    "accountIdentity": "account_identity",
    "timestamp": "timestamp",
    "artifacts": "artifacts",
}


@dataclass(frozen=True)
class CheckRun:
    """Externally reported check-run result."""

    name: str
    revision: str
    status: str
    conclusion: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckRun:
        return cls(
            name=str(data["name"]),
            revision=str(data.get("revision", data.get("headSha", ""))),
            status=str(data.get("status", "")),
            conclusion=data.get("conclusion"),
        )


@dataclass(frozen=True)
class ReviewState:
    """Review-agent state for one revision."""

    revision: str
    status: str
    has_actionable_findings: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewState:
        return cls(
            revision=str(data.get("revision", data.get("headSha", ""))),
            status=str(data.get("status", "pending")),
            has_actionable_findings=bool(data.get("hasActionableFindings", False)),
        )


@dataclass(frozen=True)
class EvidenceEntry:
    flow_name: str
    entrypoint: str
    account_identity: str
    timestamp: str
    artifacts: tuple[str, ...] = ()

    def value_of(self, manifest_field: str) -> Any:
        """Look up an entry value by its manifest (camelCase) field name."""
        attribute = MANIFEST_FIELDS.get(manifest_field, manifest_field)
        return getattr(self, attribute, None)


@dataclass(frozen=True)
class EvidenceManifest:
    """Browser/UI evidence captured for one revision."""

    revision: str
    entries: tuple[EvidenceEntry, ...]


@dataclass
class PreflightResult:
    """Single pass/fail verdict of the preflight gate."""

    risk_tier: Tier
    required_checks: list[str]
    review_required: bool
    review_clean: bool
    passed: bool
    errors: list[str] = field(default_factory=list)
    assessment: RiskAssessment | None = None
