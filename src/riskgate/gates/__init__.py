"""Policy gates: docs drift, revision freshness, evidence, preflight."""

from riskgate.gates.docs_drift import DriftViolation, assert_no_drift, find_drift
from riskgate.gates.evidence import (
    default_manifest_path,
    evidence_violations,
    load_manifest,
    validate_evidence,
)
from riskgate.gates.freshness import (
    assert_all_checks_current,
    assert_check_current,
    assert_review_clean,
    await_review_completion,
    check_runs_from_payload,
)
from riskgate.gates.preflight import run_preflight_gate
from riskgate.gates.types import CheckRun, EvidenceEntry, EvidenceManifest, PreflightResult, ReviewState

__all__ = [
    "CheckRun",
    "DriftViolation",
    "EvidenceEntry",
    "EvidenceManifest",
    "PreflightResult",
    "ReviewState",
    "assert_all_checks_current",
    "assert_check_current",
    "assert_no_drift",
    "assert_review_clean",
    "await_review_completion",
    "check_runs_from_payload",
    "default_manifest_path",
    "evidence_violations",
    "find_drift",
    "load_manifest",
    "run_preflight_gate",
    "validate_evidence",
]
