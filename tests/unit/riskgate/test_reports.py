"""Preflight report artifacts."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from riskgate.gates.types import PreflightResult
from riskgate.reports import build_preflight_report, render_assessment_markdown, write_preflight_report
from riskgate.risk.assessment import assess
from riskgate.schemas.validator import validate_data

if TYPE_CHECKING:
    from pathlib import Path


def _result(contract, files, errors=None) -> PreflightResult:
    assessment = assess(files, contract)
    policy = contract.merge_policy[assessment.tier]
    return PreflightResult(
        risk_tier=assessment.tier,
        required_checks=list(policy.required_checks),
        review_required=policy.require_code_review_agent,
        review_clean=True,
        passed=not errors,
        errors=list(errors or []),
        assessment=assessment,
    )


def test_writes_schema_valid_json_and_markdown(tmp_path: Path, contract) -> None:
    result = _result(contract, ["db/schema.ts"])
    write_preflight_report(tmp_path, result, "abc123")

    payload = json.loads((tmp_path / "PREFLIGHT_REPORT.json").read_text(encoding="utf-8"))
    ok, errors = validate_data(payload, "preflight_report", strict=False)
    assert ok, errors
    assert payload["status"] == "passed"
    assert payload["generated_at"] == "1970-01-01T00:00:00Z"
    assert payload["risk"]["tier"] == "high"
    assert payload["risk"]["required_checks"][0] == "risk-policy-gate"

    markdown = (tmp_path / "PREFLIGHT_REPORT.md").read_text(encoding="utf-8")
    assert "PASSED" in markdown
    assert "high-tier-contract-pattern (+70)" in markdown


def test_failed_report_lists_errors(tmp_path: Path, contract) -> None:
    result = _result(contract, ["risk-policy.contract.json"], errors=["drift!"])
    report = write_preflight_report(tmp_path, result, "abc123")

    assert report.status == "failed"
    markdown = (tmp_path / "PREFLIGHT_REPORT.md").read_text(encoding="utf-8")
    assert "- drift!" in markdown
    assert "2 (policy violation" in markdown


def test_report_hash_ignores_timestamp_mode(contract) -> None:
    result = _result(contract, ["README.md"])
    deterministic = build_preflight_report(result, "abc123", "deterministic")
    wallclock = build_preflight_report(result, "abc123", "wallclock")

    assert deterministic.generated_at != wallclock.generated_at
    assert deterministic.report_hash == wallclock.report_hash


def test_render_assessment_markdown_without_signals(contract) -> None:
    rendered = render_assessment_markdown(assess(["README.md"], contract))
    assert "**Tier**: low" in rendered
    assert "No risk signals triggered." in rendered
