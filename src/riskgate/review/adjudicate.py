"""Merge duplicate findings across reviewers and rank the result."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from riskgate.review.types import CONFIDENCE_RANK, SEVERITY_RANK, Finding, RemediationConfig

logger = logging.getLogger(__name__)


def normalized_message(message: str) -> str:
    return " ".join(message.lower().split())


def duplicate_key(finding: Finding) -> str:
    """Explicit fingerprint, else file + line + category + normalized message."""
    if finding.fingerprint:
        return f"fp:{finding.fingerprint}"
    return f"{finding.file}:{finding.line}:{finding.category}:{normalized_message(finding.message)}"


def _sort_key(finding: Finding) -> tuple[int, int, str, int]:
    return (
        -SEVERITY_RANK[finding.severity],
        -CONFIDENCE_RANK[finding.confidence],
        finding.file,
        finding.line,
    )


def adjudicate(findings: Iterable[Finding]) -> list[Finding]:
    """Collapse duplicates to their highest-priority variant.

    Providers are merged across every duplicate. Equal-priority variants
    resolve to the later one. The result is ordered by severity, then
    confidence (both descending), then file and line.
    """
    best: dict[str, Finding] = {}
    providers: dict[str, set[str]] = {}
    total = 0
    for finding in findings:
        total += 1
        key = duplicate_key(finding)
        current = best.get(key)
        if current is None or finding.priority >= current.priority:
            best[key] = finding
        providers.setdefault(key, set()).update(finding.providers)

    merged = [replace(finding, providers=tuple(sorted(providers[key]))) for key, finding in best.items()]
    merged.sort(key=_sort_key)
    if total != len(merged):
        logger.debug("adjudication collapsed %d finding(s) into %d", total, len(merged))
    return merged


def filter_current_findings(
    findings: Iterable[Finding],
    current_revision: str,
    config: RemediationConfig,
) -> list[Finding]:
    """Keep actionable findings for the current revision, adjudicated.

    ``info`` findings are always dropped; findings for other revisions are
    dropped unless ``config.skip_stale_comments`` is False.
    """
    actionable = [
        finding
        for finding in findings
        if finding.severity != "info"
        and (not config.skip_stale_comments or finding.revision == current_revision)
    ]
    return adjudicate(actionable)
