"""Browser/UI evidence manifest validation.

For UI or user-flow changes, evidence manifests are first-class proof. A
manifest must be captured for the current revision, cover every required
flow, carry every required field, and be younger than the contract's age
ceiling.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from riskgate.errors import (
    MalformedEvidenceError,
    MissingFieldError,
    MissingFlowError,
    RiskGateError,
    SchemaError,
    StaleError,
    StaleEvidenceError,
)
from riskgate.gates.types import EvidenceEntry, EvidenceManifest
from riskgate.policy.contract import load_structured_file
from riskgate.policy.types import PolicyContract
from riskgate.schemas.validator import validate_data

logger = logging.getLogger(__name__)

DEFAULT_EVIDENCE_DIR = Path("artifacts/browser-evidence")
MANIFEST_FILENAME = "manifest.json"


def default_manifest_path(repo_root: Path, revision: str, evidence_dir: Path = DEFAULT_EVIDENCE_DIR) -> Path:
    """Return the conventional manifest location for a revision."""
    return repo_root.resolve() / evidence_dir / revision / MANIFEST_FILENAME


def load_manifest(path: Path) -> EvidenceManifest:
    """Load and schema-check an evidence manifest.

    Raises:
        FileNotFoundError: If the manifest is missing
        ParseError: If the manifest is not valid JSON
        SchemaError: If the manifest shape is invalid
    """
    data = load_structured_file(path)
    ok, errors = validate_data(data, "evidence_manifest", strict=False)
    if not ok:
        raise SchemaError(f"{path.name} schema validation failed: {'; '.join(errors)}")
    return manifest_from_dict(data)


def manifest_from_dict(data: dict[str, Any]) -> EvidenceManifest:
    """Build a manifest from its JSON form (``headSha`` accepted as revision)."""
    entries = tuple(
        EvidenceEntry(
            flow_name=str(item.get("flowName", "")),
            entrypoint=str(item.get("entrypoint", "")),
            account_identity=str(item.get("accountIdentity", "")),
            timestamp=str(item.get("timestamp", "")),
            artifacts=tuple(item.get("artifacts") or ()),
        )
        for item in data.get("entries", [])
    )
    return EvidenceManifest(revision=str(data.get("revision") or data.get("headSha") or ""), entries=entries)


def evidence_violations(
    manifest: EvidenceManifest,
    contract: PolicyContract,
    current_revision: str,
    now: datetime | None = None,
) -> list[RiskGateError]:
    """Return every violation, in check order, without raising.

    A revision mismatch short-circuits: the content of a stale manifest is
    not inspected.
    """
    config = contract.browser_evidence
    if manifest.revision != current_revision:
        return [
            StaleError(
                f"Browser evidence revision mismatch: expected {current_revision}, got {manifest.revision}"
            )
        ]

    violations: list[RiskGateError] = []
    flows = {entry.flow_name for entry in manifest.entries}
    for flow in config.required_flows:
        if flow not in flows:
            violations.append(MissingFlowError(f"Missing browser evidence for required flow: {flow}"))

    for entry in manifest.entries:
        for field_name in config.required_fields:
            value = entry.value_of(field_name)
            if value is None or value == "" or value == ():
                violations.append(
                    MissingFieldError(
                        f'Browser evidence entry "{entry.flow_name}" missing required field: {field_name}'
                    )
                )
        if "artifacts" not in config.required_fields and not entry.artifacts:
            violations.append(
                MissingFieldError(f'Browser evidence entry "{entry.flow_name}" must include at least one artifact')
            )

    reference = _as_utc(now) if now is not None else datetime.now(UTC)
    max_age = timedelta(days=config.max_age_days)
    for entry in manifest.entries:
        captured_at = _parse_timestamp(entry.timestamp)
        if captured_at is None:
            violations.append(
                MalformedEvidenceError(f'Browser evidence entry "{entry.flow_name}" has an invalid timestamp')
            )
        elif reference - captured_at > max_age:
            violations.append(
                StaleEvidenceError(
                    f'Browser evidence for "{entry.flow_name}" is older than {config.max_age_days:g} days'
                )
            )

    return violations


def validate_evidence(
    manifest: EvidenceManifest,
    contract: PolicyContract,
    current_revision: str,
    now: datetime | None = None,
) -> None:
    """Raise the first evidence violation, if any."""
    violations = evidence_violations(manifest, contract, current_revision, now=now)
    if violations:
        logger.debug("evidence for %s has %d violation(s)", current_revision, len(violations))
        raise violations[0]


def _parse_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
