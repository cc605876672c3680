"""Browser evidence manifest validation."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from riskgate.errors import (
    MalformedEvidenceError,
    MissingFieldError,
    MissingFlowError,
    SchemaError,
    StaleError,
    StaleEvidenceError,
)
from riskgate.gates.evidence import default_manifest_path, evidence_violations, load_manifest, validate_evidence
from riskgate.gates.types import EvidenceEntry, EvidenceManifest
from riskgate.policy.contract import validate_contract

if TYPE_CHECKING:
    from pathlib import Path

HEAD = "abc123"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _entry(**overrides) -> EvidenceEntry:
    values = {
        "flow_name": "legal-chat-login",
        "entrypoint": "/legal-chat",
        "account_identity": "test-user@example.com",
        "timestamp": (NOW - timedelta(days=1)).isoformat(),
        "artifacts": ("screenshots/login.png",),
    }
    values.update(overrides)
    return EvidenceEntry(**values)


def test_valid_manifest_passes(contract) -> None:
    validate_evidence(EvidenceManifest(HEAD, (_entry(),)), contract, HEAD, now=NOW)


def test_stale_revision_fails_and_short_circuits(contract) -> None:
    manifest = EvidenceManifest("old999", ())
    violations = evidence_violations(manifest, contract, HEAD, now=NOW)

    assert len(violations) == 1
    assert isinstance(violations[0], StaleError)
    assert "revision mismatch" in str(violations[0])


def test_missing_required_flow(contract) -> None:
    with pytest.raises(MissingFlowError, match="legal-chat-login"):
        validate_evidence(EvidenceManifest(HEAD, (_entry(flow_name="other-flow"),)), contract, HEAD, now=NOW)


def test_missing_required_field(contract) -> None:
    manifest = EvidenceManifest(HEAD, (_entry(account_identity=""),))
    with pytest.raises(MissingFieldError, match="missing required field: accountIdentity"):
        validate_evidence(manifest, contract, HEAD, now=NOW)


def test_entry_without_artifacts(contract) -> None:
    manifest = EvidenceManifest(HEAD, (_entry(artifacts=()),))
    with pytest.raises(MissingFieldError, match="at least one artifact"):
        validate_evidence(manifest, contract, HEAD, now=NOW)


def test_missing_artifacts_reported_once_when_required_field(contract_data) -> None:
    contract_data["browserEvidence"]["requiredFields"].append("artifacts")
    contract = validate_contract(contract_data)
    manifest = EvidenceManifest(HEAD, (_entry(artifacts=()),))

    violations = evidence_violations(manifest, contract, HEAD, now=NOW)

    assert [str(v) for v in violations] == [
        'Browser evidence entry "legal-chat-login" missing required field: artifacts'
    ]


def test_naive_now_is_treated_as_utc(contract) -> None:
    naive_now = NOW.replace(tzinfo=None)
    validate_evidence(EvidenceManifest(HEAD, (_entry(),)), contract, HEAD, now=naive_now)

    stale = EvidenceManifest(HEAD, (_entry(timestamp=(NOW - timedelta(days=8)).isoformat()),))
    with pytest.raises(StaleEvidenceError):
        validate_evidence(stale, contract, HEAD, now=naive_now)


def test_evidence_older_than_max_age(contract) -> None:
    manifest = EvidenceManifest(HEAD, (_entry(timestamp=(NOW - timedelta(days=8)).isoformat()),))
    with pytest.raises(StaleEvidenceError, match="older than 7 days"):
        validate_evidence(manifest, contract, HEAD, now=NOW)


def test_malformed_timestamp(contract) -> None:
    manifest = EvidenceManifest(HEAD, (_entry(timestamp="yesterday-ish"),))
    with pytest.raises(MalformedEvidenceError, match="invalid timestamp"):
        validate_evidence(manifest, contract, HEAD, now=NOW)


def test_violations_collected_in_check_order(contract) -> None:
    manifest = EvidenceManifest(HEAD, (_entry(flow_name="other-flow", artifacts=()),))
    violations = evidence_violations(manifest, contract, HEAD, now=NOW)
    assert [type(v) for v in violations] == [MissingFlowError, MissingFieldError]


def test_load_manifest_accepts_head_sha(tmp_path: Path) -> None:
    path = default_manifest_path(tmp_path, HEAD)
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps(
            {
                "headSha": HEAD,
                "entries": [
                    {
                        "flowName": "legal-chat-login",
                        "entrypoint": "/legal-chat",
                        "accountIdentity": "test-user@example.com",
                        "timestamp": "2026-03-01T00:00:00Z",
                        "artifacts": ["login.png"],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )

    manifest = load_manifest(path)
    assert path.parts[-3:] == ("browser-evidence", HEAD, "manifest.json")
    assert manifest.revision == HEAD
    assert manifest.entries[0].artifacts == ("login.png",)


def test_load_manifest_rejects_schema_violation(tmp_path: Path) -> None:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps({"entries": []}), encoding="utf-8")
    with pytest.raises(SchemaError, match="schema validation failed"):
        load_manifest(path)
