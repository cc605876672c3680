"""Preflight gate - the single verdict run before expensive CI fanout.

Flow:
1. Load the contract and assess risk for the changed files
2. Verify docs-drift rules
3. If the tier requires a code-review agent and a poll function is given,
   wait for the review and assert it is clean for the current revision
4. Return the required checks so downstream CI can fan out

Policy failures (drift, stale or dirty review, review timeout) are
collected, so one run reports every violation. Infrastructure failures
(unreadable or malformed contract, a poll function raising a non-gate
error) propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from riskgate.errors import ContractError, RiskGateError
from riskgate.gates.docs_drift import find_drift
from riskgate.gates.freshness import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    PollFn,
    assert_review_clean,
    await_review_completion,
)
from riskgate.gates.types import PreflightResult
from riskgate.policy.contract import load_contract
from riskgate.risk.assessment import assess
from riskgate.risk.history import load_historical_metadata
from riskgate.risk.types import HistoricalRiskMetadata

logger = logging.getLogger(__name__)


async def run_preflight_gate(
    *,
    changed_files: Iterable[str],
    current_revision: str,
    repo_root: Path,
    poll_review: PollFn | None = None,
    historical: HistoricalRiskMetadata | None = None,
    contract_path: Path | None = None,
    metadata_path: Path | None = None,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> PreflightResult:
    """Run the preflight gate and return a pass/fail verdict.

    Raises:
        FileNotFoundError: If the contract file is missing
        ContractError: If the contract or historical metadata is malformed
    """
    files = list(changed_files)
    errors: list[str] = []

    contract = load_contract(repo_root, contract_path)
    if historical is None:
        historical = load_historical_metadata(repo_root, metadata_path)

    assessment = assess(files, contract, historical)
    policy = contract.merge_policy[assessment.tier]
    logger.info("risk tier %s (score %d) for %d file(s)", assessment.tier, assessment.score, len(files))

    for violation in find_drift(files, contract):
        errors.append(violation.message)

    review_clean = True
    if policy.require_code_review_agent and poll_review is not None:
        try:
            review = await await_review_completion(
                current_revision,
                contract.review_agent.timeout_minutes,
                poll_review,
                poll_interval_seconds=poll_interval_seconds,
            )
            assert_review_clean(review, current_revision)
        except ContractError:
            raise
        except RiskGateError as exc:
            review_clean = False
            errors.append(str(exc))

    return PreflightResult(
        risk_tier=assessment.tier,
        required_checks=list(policy.required_checks),
        review_required=policy.require_code_review_agent,
        review_clean=review_clean,
        passed=not errors,
        errors=errors,
        assessment=assessment,
    )
