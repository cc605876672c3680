"""Load and validate the risk-policy contract."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from riskgate.errors import ParseError, SchemaError
from riskgate.policy.types import (
    CONTRACT_TOP_LEVEL_KEYS,
    DEFAULT_CONTRACT_RELATIVE_PATH,
    TIERS,
    BrowserEvidenceConfig,
    DocsDriftRules,
    HarnessGapLoopConfig,
    MergePolicyEntry,
    PathClassCoverage,
    PolicyContract,
    RemediationAgentConfig,
    ReviewAgentConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_REMEDIATION_ATTEMPTS = 3


def contract_path_for_repo(repo_root: Path) -> Path:
    """Return canonical contract file path for a repository."""
    return repo_root.resolve() / DEFAULT_CONTRACT_RELATIVE_PATH


def load_structured_file(path: Path) -> Any:
    """Parse a JSON or YAML document, raising ParseError on bad syntax.

    Raises:
        FileNotFoundError: If the file does not exist
        ParseError: If the content is not valid JSON/YAML
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ParseError(f"{path.name} parse error: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{path.name} parse error: {exc}") from exc


def load_contract(repo_root: Path, path: Path | None = None) -> PolicyContract:
    """Load, validate, and normalize the risk-policy contract.

    Args:
        repo_root: Repository root holding ``risk-policy.contract.json``
        path: Explicit contract path (overrides the canonical location)

    Raises:
        FileNotFoundError: If the contract file is missing
        ParseError: If the contract is not valid structured data
        SchemaError: On the first missing or malformed field
    """
    contract_path = path if path is not None else contract_path_for_repo(repo_root)
    raw = load_structured_file(contract_path)
    contract = validate_contract(raw, path=contract_path)
    logger.debug("loaded risk-policy contract version %s from %s", contract.version, contract_path)
    return contract


def validate_contract(data: Any, path: Path | None = None) -> PolicyContract:
    """Validate raw contract data and build a PolicyContract (fail-fast)."""
    if not isinstance(data, dict):
        raise SchemaError("Contract must be a non-null object")

    for key in CONTRACT_TOP_LEVEL_KEYS:
        if key not in data:
            raise SchemaError(f"Contract missing required key: {key}")

    tiers_raw = _require_mapping(data["riskTierRules"], "riskTierRules")
    for tier in TIERS:
        if tier not in tiers_raw or tiers_raw[tier] is None:
            raise SchemaError("riskTierRules must contain 'high' and 'low' entries")
    risk_tier_rules = {
        tier: _string_tuple(tiers_raw[tier], f"riskTierRules.{tier}") for tier in TIERS
    }

    policy_raw = _require_mapping(data["mergePolicy"], "mergePolicy")
    merge_policy: dict[str, MergePolicyEntry] = {}
    for tier in TIERS:
        merge_policy[tier] = _merge_policy_entry(policy_raw.get(tier), tier)
    for tier in sorted(set(policy_raw) - set(TIERS)):
        # Extra tiers are tolerated but must still be well formed.
        _merge_policy_entry(policy_raw[tier], tier)

    return PolicyContract(
        version=str(data["version"]),
        risk_tier_rules=risk_tier_rules,  # type: ignore[arg-type]
        merge_policy=merge_policy,  # type: ignore[arg-type]
        docs_drift_rules=_docs_drift_rules(data["docsDriftRules"]),
        browser_evidence=_browser_evidence(data["browserEvidence"]),
        review_agent=_review_agent(data["reviewAgent"]),
        remediation_agent=_remediation_agent(data["remediationAgent"]),
        harness_gap_loop=_harness_gap_loop(data["harnessGapLoop"]),
        path=path,
    )


def _merge_policy_entry(value: Any, tier: str) -> MergePolicyEntry:
    if not isinstance(value, dict) or not isinstance(value.get("requiredChecks"), list):
        raise SchemaError(f"mergePolicy.{tier} must contain requiredChecks array")
    checks = _string_tuple(value["requiredChecks"], f"mergePolicy.{tier}.requiredChecks")
    if not checks:
        raise SchemaError(f"mergePolicy.{tier}.requiredChecks must not be empty")
    return MergePolicyEntry(
        required_checks=checks,
        require_code_review_agent=bool(value.get("requireCodeReviewAgent", False)),
        require_browser_evidence=bool(value.get("requireBrowserEvidence", False)),
    )


def _docs_drift_rules(value: Any) -> DocsDriftRules:
    rules = _require_mapping(value, "docsDriftRules")
    coverage_raw = rules.get("coverageByPathClass")
    coverage: list[PathClassCoverage] = []
    if coverage_raw is not None:
        if not isinstance(coverage_raw, list):
            raise SchemaError("docsDriftRules.coverageByPathClass must be an array when present")
        for index, item in enumerate(coverage_raw):
            if (
                not isinstance(item, dict)
                or not isinstance(item.get("id"), str)
                or not isinstance(item.get("triggerPaths"), list)
                or not isinstance(item.get("requiredDocPaths"), list)
                or not isinstance(item.get("reason"), str)
            ):
                raise SchemaError(
                    f"docsDriftRules.coverageByPathClass[{index}] must include "
                    "id, triggerPaths, requiredDocPaths, and reason"
                )
            field = f"docsDriftRules.coverageByPathClass[{index}]"
            coverage.append(
                PathClassCoverage(
                    id=item["id"],
                    trigger_paths=_string_tuple(item["triggerPaths"], f"{field}.triggerPaths"),
                    required_doc_paths=_string_tuple(item["requiredDocPaths"], f"{field}.requiredDocPaths"),
                    reason=item["reason"],
                )
            )

    return DocsDriftRules(
        control_plane_paths=_string_tuple(rules.get("controlPlanePaths"), "docsDriftRules.controlPlanePaths"),
        required_doc_paths=_string_tuple(rules.get("requiredDocPaths"), "docsDriftRules.requiredDocPaths"),
        coverage_by_path_class=tuple(coverage),
    )


def _browser_evidence(value: Any) -> BrowserEvidenceConfig:
    config = _require_mapping(value, "browserEvidence")
    return BrowserEvidenceConfig(
        required_flows=_string_tuple(config.get("requiredFlows"), "browserEvidence.requiredFlows"),
        required_fields=_string_tuple(config.get("requiredFields"), "browserEvidence.requiredFields"),
        max_age_days=_number(config.get("maxAgeDays", 7), "browserEvidence.maxAgeDays"),
    )


def _review_agent(value: Any) -> ReviewAgentConfig:
    config = _require_mapping(value, "reviewAgent")
    name = str(config.get("name", "review-agent"))
    return ReviewAgentConfig(
        name=name,
        rerun_workflow=str(config.get("rerunWorkflow", "")),
        auto_resolve_workflow=str(config.get("autoResolveWorkflow", "")),
        timeout_minutes=_number(config.get("timeoutMinutes", 20), "reviewAgent.timeoutMinutes"),
        bot_user=str(config.get("botUser", name)),
    )


def _remediation_agent(value: Any) -> RemediationAgentConfig:
    config = _require_mapping(value, "remediationAgent")
    max_attempts = config.get("maxAttempts", DEFAULT_MAX_REMEDIATION_ATTEMPTS)
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 0:
        raise SchemaError("remediationAgent.maxAttempts must be a non-negative integer")
    return RemediationAgentConfig(
        name=str(config.get("name", "remediation-agent")),
        enabled=bool(config.get("enabled", False)),
        pin_model=bool(config.get("pinModel", True)),
        skip_stale_comments=bool(config.get("skipStaleComments", True)),
        max_attempts=max_attempts,
    )


def _harness_gap_loop(value: Any) -> HarnessGapLoopConfig:
    config = _require_mapping(value, "harnessGapLoop")
    return HarnessGapLoopConfig(
        enabled=bool(config.get("enabled", False)),
        issue_label=str(config.get("issueLabel", "")),
        sla_tracking=bool(config.get("slaTracking", False)),
    )


def _require_mapping(value: Any, field_name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{field_name} must be an object")
    return value


def _string_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    """Normalize a list of strings, preserving declaration order."""
    if value is None:
        return ()
    if not isinstance(value, list):
        raise SchemaError(f"{field_name} must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise SchemaError(f"{field_name} must be a list of strings")
    return tuple(value)


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise SchemaError(f"{field_name} must be a number")
    return value
