"""Docs-drift detection for control-plane changes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from riskgate.errors import DriftError
from riskgate.policy.patterns import filter_matches, match_any
from riskgate.policy.types import PolicyContract


@dataclass(frozen=True)
class DriftViolation:
    """Control-plane change without a matching documentation change."""

    rule_id: str
    message: str
    trigger_files: tuple[str, ...]
    required_doc_paths: tuple[str, ...]


def find_drift(changed_files: Iterable[str], contract: PolicyContract) -> list[DriftViolation]:
    """Return every docs-drift violation for a change set (never raises)."""
    files = sorted(changed_files)
    rules = contract.docs_drift_rules
    violations: list[DriftViolation] = []

    control_plane = filter_matches(files, rules.control_plane_paths)
    if control_plane and not any(match_any(f, rules.required_doc_paths) for f in files):
        violations.append(
            DriftViolation(
                rule_id="control-plane",
                message=(
                    "Control-plane files changed but no documentation was updated. "
                    "Please update at least one file matching: "
                    + ", ".join(rules.required_doc_paths)
                ),
                trigger_files=tuple(control_plane),
                required_doc_paths=rules.required_doc_paths,
            )
        )

    for coverage in rules.coverage_by_path_class:
        triggered = filter_matches(files, coverage.trigger_paths)
        if triggered and not any(match_any(f, coverage.required_doc_paths) for f in files):
            violations.append(
                DriftViolation(
                    rule_id=coverage.id,
                    message=(
                        f"Docs coverage rule '{coverage.id}' triggered by "
                        f"{', '.join(triggered)} ({coverage.reason}). "
                        "Please update at least one file matching: "
                        + ", ".join(coverage.required_doc_paths)
                    ),
                    trigger_files=tuple(triggered),
                    required_doc_paths=coverage.required_doc_paths,
                )
            )

    return violations


def assert_no_drift(changed_files: Iterable[str], contract: PolicyContract) -> None:
    """Raise DriftError for the first docs-drift violation, if any."""
    violations = find_drift(changed_files, contract)
    if violations:
        raise DriftError(violations[0].message)
