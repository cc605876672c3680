"""Pytest configuration and shared fixtures for riskgate tests."""
from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any

import pytest

from riskgate.policy.contract import validate_contract
from riskgate.risk.history import parse_historical_metadata

CONTRACT_DATA: dict[str, Any] = {
    "version": "1",
    "riskTierRules": {
        "high": ["app/api/legal-chat/**", "lib/tools/**", "db/schema.ts"],
        "low": ["**"],
    },
    "mergePolicy": {
        "high": {
            "requiredChecks": ["risk-policy-gate", "harness-smoke", "Browser Evidence", "CI Pipeline"],
            "requireCodeReviewAgent": True,
            "requireBrowserEvidence": True,
        },
        "low": {
            "requiredChecks": ["risk-policy-gate", "CI Pipeline"],
            "requireCodeReviewAgent": False,
            "requireBrowserEvidence": False,
        },
    },
    "docsDriftRules": {
        "controlPlanePaths": ["risk-policy.contract.json", ".github/workflows/**"],
        "requiredDocPaths": ["docs/playbooks/**", "docs/operating-model/**"],
    },
    "browserEvidence": {
        "requiredFlows": ["legal-chat-login"],
        "requiredFields": ["entrypoint", "accountIdentity", "timestamp", "flowName"],
        "maxAgeDays": 7,
    },
    "reviewAgent": {
        "name": "Greptile",
        "rerunWorkflow": "greptile-rerun.yml",
        "autoResolveWorkflow": "greptile-auto-resolve-threads.yml",
        "timeoutMinutes": 20,
    },
    "remediationAgent": {
        "name": "Codex Action",
        "enabled": True,
        "pinModel": True,
        "skipStaleComments": True,
    },
    "harnessGapLoop": {
        "enabled": True,
        "issueLabel": "harness-gap",
        "slaTracking": True,
    },
}

METADATA_DATA: dict[str, Any] = {
    "version": "1",
    "recentFlakyTests": [{"pattern": "tests/smoke/**", "weight": 10, "reason": "smoke flake"}],
    "incidentTaggedFiles": [{"pattern": "app/api/legal-chat/**", "weight": 20, "reason": "incident area"}],
    "priorRollbackAreas": [{"pattern": ".github/workflows/**", "weight": 12, "reason": "prior rollback"}],
}


@pytest.fixture
def contract_data() -> dict[str, Any]:
    """A fresh, mutable copy of a valid contract document."""
    return deepcopy(CONTRACT_DATA)


@pytest.fixture
def contract(contract_data):
    return validate_contract(contract_data)


@pytest.fixture
def historical():
    return parse_historical_metadata(deepcopy(METADATA_DATA))


@pytest.fixture
def policy_repo(tmp_path: Path, contract_data) -> Path:
    """Repository directory holding a valid risk-policy contract."""
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "risk-policy.contract.json").write_text(json.dumps(contract_data, indent=2), encoding="utf-8")
    return repo


def pytest_sessionfinish(session, exitstatus):
    """Fail the run when --cov was requested but no coverage data was collected."""
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    if not list(Path.cwd().glob(".coverage*")):
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'riskgate' (the package) not 'src/riskgate' (filesystem path).",
            returncode=1
        )
