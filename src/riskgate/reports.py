"""Preflight and assessment reports.

Writes a machine-readable PREFLIGHT_REPORT.json (validated against the
``preflight_report`` schema) plus a human-readable PREFLIGHT_REPORT.md.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal, TextIO

from riskgate.gates.types import PreflightResult
from riskgate.risk.types import RiskAssessment
from riskgate.schemas.validator import validate_data
from riskgate.utils.canonical_json import canonical_dumps, sha256_text, write_json

REPORT_JSON_FILENAME = "PREFLIGHT_REPORT.json"
REPORT_MD_FILENAME = "PREFLIGHT_REPORT.md"

TimestampMode = Literal["deterministic", "wallclock"]


@dataclass
class PreflightReport:
    """Serializable preflight report."""

    schema_version: str = "1.0"
    generated_at: str = ""
    timestamp_mode: str = "deterministic"
    revision: str = ""
    status: Literal["passed", "failed"] = "passed"
    risk: dict[str, Any] = field(default_factory=dict)
    review: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    report_hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "generated_at": self.generated_at,
            "timestamp_mode": self.timestamp_mode,
            "revision": self.revision,
            "status": self.status,
            "risk": self.risk,
            "review": self.review,
            "errors": list(self.errors),
            "report_hash": self.report_hash,
        }


def _get_deterministic_timestamp() -> str:
    """Get deterministic timestamp for testing."""
    return "1970-01-01T00:00:00Z"


def _get_wallclock_timestamp() -> str:
    return datetime.now(UTC).isoformat()


def assessment_to_dict(assessment: RiskAssessment, required_checks: list[str] | None = None) -> dict[str, Any]:
    """Render an assessment as a JSON-compatible mapping."""
    return {
        "tier": assessment.tier,
        "score": assessment.score,
        "threshold": assessment.threshold,
        "changed_files": list(assessment.changed_files),
        "signals": [
            {
                "category": str(signal.category),
                "signal": signal.signal,
                "weight": signal.weight,
                "rationale": signal.rationale,
                "matched_files": list(signal.matched_files),
            }
            for signal in assessment.explanation.triggered_signals
        ],
        "score_breakdown": list(assessment.explanation.score_breakdown),
        "required_checks": list(required_checks or []),
    }


def build_preflight_report(
    result: PreflightResult,
    revision: str,
    timestamp_mode: TimestampMode = "deterministic",
) -> PreflightReport:
    """Build the report for a preflight result.

    ``report_hash`` leaves out ``generated_at`` and ``timestamp_mode`` so the same
    verdict hashes identically in both timestamp modes.
    """
    report = PreflightReport()
    report.timestamp_mode = timestamp_mode
    if timestamp_mode == "deterministic":
        report.generated_at = _get_deterministic_timestamp()
    else:
        report.generated_at = _get_wallclock_timestamp()

    report.revision = revision
    report.status = "passed" if result.passed else "failed"
    if result.assessment is not None:
        report.risk = assessment_to_dict(result.assessment, result.required_checks)
    report.review = {"required": result.review_required, "clean": result.review_clean}
    report.errors = list(result.errors)

    hashed = report.to_dict()
    hashed.pop("generated_at")
    hashed.pop("timestamp_mode")
    hashed.pop("report_hash")
    report.report_hash = sha256_text(canonical_dumps(hashed))
    return report


def write_preflight_report(
    out_dir: Path,
    result: PreflightResult,
    revision: str,
    timestamp_mode: TimestampMode = "deterministic",
) -> PreflightReport:
    """Write PREFLIGHT_REPORT.json and PREFLIGHT_REPORT.md into ``out_dir``.

    Raises:
        ValueError: If the built report does not match its schema
    """
    report = build_preflight_report(result, revision, timestamp_mode)
    data = report.to_dict()
    validate_data(data, "preflight_report", strict=True)

    out_dir.mkdir(parents=True, exist_ok=True)
    write_json(out_dir / REPORT_JSON_FILENAME, data)
    with open(out_dir / REPORT_MD_FILENAME, "w", encoding="utf-8") as f:
        _write_markdown_report(f, report)
    return report


def render_assessment_markdown(assessment: RiskAssessment) -> str:
    """Render the score breakdown as a Markdown section."""
    lines = [
        "## Risk Assessment",
        "",
        f"**Tier**: {assessment.tier}",
        f"**Score**: {assessment.score} (threshold {assessment.threshold})",
        "",
    ]
    if assessment.explanation.score_breakdown:
        lines.append("### Score Breakdown")
        lines.append("")
        lines.extend(f"- {line}" for line in assessment.explanation.score_breakdown)
    else:
        lines.append("No risk signals triggered.")
    lines.append("")
    return "\n".join(lines)


def _write_markdown_report(f: TextIO, report: PreflightReport) -> None:
    """Write human-readable markdown report."""
    f.write("# Risk Policy Preflight Report\n\n")

    status_emoji = "✅" if report.status == "passed" else "❌"
    f.write(f"**Status**: {status_emoji} {report.status.upper()}\n\n")
    f.write(f"**Revision**: `{report.revision}`\n\n")
    f.write(f"**Generated**: {report.generated_at} ({report.timestamp_mode})\n\n")

    if report.risk:
        f.write("## Risk\n\n")
        f.write(f"**Tier**: {report.risk['tier']}\n")
        f.write(f"**Score**: {report.risk['score']} (threshold {report.risk['threshold']})\n\n")
        if report.risk["score_breakdown"]:
            f.write("### Score Breakdown\n\n")
            for line in report.risk["score_breakdown"]:
                f.write(f"- {line}\n")
            f.write("\n")
        f.write("### Required Checks\n\n")
        for check in report.risk["required_checks"]:
            f.write(f"- `{check}`\n")
        f.write("\n")

    f.write("## Code Review Agent\n\n")
    if report.review["required"]:
        review_emoji = "✅" if report.review["clean"] else "❌"
        f.write("**Required**: Yes\n")
        f.write(f"**Clean**: {review_emoji} {report.review['clean']}\n\n")
    else:
        f.write("**Required**: No (skipped)\n\n")

    if report.errors:
        f.write("## Errors\n\n")
        for error in report.errors:
            f.write(f"- {error}\n")
        f.write("\n")

    f.write("## Exit Code\n\n")
    if report.status == "passed":
        f.write("0 (success - gate passed)\n")
    else:
        f.write("2 (policy violation - gate failed)\n")
