"""Review finding, thread, and remediation types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from riskgate.policy.types import PolicyContract

SEVERITIES: tuple[str, ...] = ("critical", "high", "medium", "low", "info")
CONFIDENCES: tuple[str, ...] = ("high", "medium", "low")
CATEGORIES: tuple[str, ...] = (
    "style",
    "security",
    "architecture",
    "correctness",
    "performance",
    "maintainability",
    "other",
)

DEFAULT_SEVERITY = "medium"
DEFAULT_CONFIDENCE = "medium"
DEFAULT_CATEGORY = "other"

SEVERITY_RANK: dict[str, int] = {"critical": 5, "high": 4, "medium": 3, "low": 2, "info": 1}
CONFIDENCE_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class Finding:
    """A reviewer-reported issue in the shared schema."""

    providers: tuple[str, ...]
    file: str
    line: int
    message: str
    severity: str = DEFAULT_SEVERITY
    confidence: str = DEFAULT_CONFIDENCE
    category: str = DEFAULT_CATEGORY
    revision: str = ""
    fingerprint: str | None = None

    @property
    def priority(self) -> int:
        return SEVERITY_RANK[self.severity] * 10 + CONFIDENCE_RANK[self.confidence]

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "providers": list(self.providers),
            "file": self.file,
            "line": self.line,
            "message": self.message,
            "severity": self.severity,
            "confidence": self.confidence,
            "category": self.category,
            "revision": self.revision,
        }
        if self.fingerprint is not None:
            data["fingerprint"] = self.fingerprint
        return data


@dataclass(frozen=True)
class ThreadComment:
    author: str
    body: str


@dataclass(frozen=True)
class ReviewThread:
    id: str
    is_resolved: bool
    comments: tuple[ThreadComment, ...] = ()


@dataclass(frozen=True)
class AutoResolveResult:
    resolved: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


@dataclass(frozen=True)
class RemediationConfig:
    """Remediation guardrails."""

    pin_model: bool = True
    skip_stale_comments: bool = True
    max_attempts: int = 3
    enabled: bool = True

    @classmethod
    def from_contract(cls, contract: PolicyContract, max_attempts: int | None = None) -> RemediationConfig:
        agent = contract.remediation_agent
        return cls(
            pin_model=agent.pin_model,
            skip_stale_comments=agent.skip_stale_comments,
            max_attempts=agent.max_attempts if max_attempts is None else max_attempts,
            enabled=agent.enabled,
        )


@dataclass
class RemediationResult:
    """Outcome of one remediation loop invocation."""

    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
