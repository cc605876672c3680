"""Bounded remediation loop over adjudicated findings.

Fixes are applied one finding at a time, highest priority first. A fix can
shift lines or context for other findings in the same file, so nothing is
applied concurrently. ``max_attempts`` bounds how many distinct findings
are addressed in one invocation; a finding is never retried within it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from riskgate.review.adjudicate import filter_current_findings
from riskgate.review.types import Finding, RemediationConfig, RemediationResult

logger = logging.getLogger(__name__)

ApplyFn = Callable[[Finding], Awaitable[bool]]
ValidateFn = Callable[[], Awaitable[bool]]


async def run_remediation_loop(
    *,
    findings: Sequence[Finding],
    current_revision: str,
    config: RemediationConfig,
    apply_fix: ApplyFn,
    validate: ValidateFn,
) -> RemediationResult:
    """Apply and validate fixes for actionable findings, in priority order."""
    if not config.enabled:
        logger.info("remediation agent disabled; skipping %d finding(s)", len(findings))
        return RemediationResult(skipped=len(findings))

    actionable = filter_current_findings(findings, current_revision, config)
    result = RemediationResult(skipped=len(findings) - len(actionable))

    for finding in actionable:
        if result.attempted >= config.max_attempts:
            result.errors.append(f"Reached max remediation attempts ({config.max_attempts})")
            break

        result.attempted += 1
        logger.info("remediation attempt %d: %s (%s)", result.attempted, finding.location, finding.severity)
        try:
            if not await apply_fix(finding):
                result.errors.append(f"Could not apply fix for {finding.location}")
            elif not await validate():
                result.errors.append(f"Fix for {finding.location} failed validation")
            else:
                result.succeeded += 1
        except Exception as exc:
            result.errors.append(f"Error fixing {finding.location}: {exc}")

    return result
