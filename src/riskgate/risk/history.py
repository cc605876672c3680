"""Historical risk metadata loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from riskgate.errors import SchemaError
from riskgate.policy.contract import load_structured_file
from riskgate.policy.types import DEFAULT_METADATA_RELATIVE_PATH
from riskgate.risk.types import (
    EMPTY_HISTORICAL_METADATA,
    HistoricalRiskMetadata,
    HistoricalSignalEntry,
)

logger = logging.getLogger(__name__)

_CATEGORY_KEYS = {
    "recentFlakyTests": "recent_flaky_tests",
    "incidentTaggedFiles": "incident_tagged_files",
    "priorRollbackAreas": "prior_rollback_areas",
}


def metadata_path_for_repo(repo_root: Path) -> Path:
    return repo_root.resolve() / DEFAULT_METADATA_RELATIVE_PATH


def load_historical_metadata(repo_root: Path, path: Path | None = None) -> HistoricalRiskMetadata:
    """Load ``risk-signals.metadata.json``; absence yields empty metadata.

    Raises:
        ParseError: If the file is not valid structured data
        SchemaError: If an entry is malformed
    """
    metadata_path = path if path is not None else metadata_path_for_repo(repo_root)
    if not metadata_path.exists():
        logger.debug("no historical risk metadata at %s", metadata_path)
        return EMPTY_HISTORICAL_METADATA
    return parse_historical_metadata(load_structured_file(metadata_path))


def parse_historical_metadata(data: Any) -> HistoricalRiskMetadata:
    """Build metadata from raw data, defaulting absent categories to empty."""
    if not isinstance(data, dict):
        raise SchemaError("Historical risk metadata must be an object")

    categories: dict[str, tuple[HistoricalSignalEntry, ...]] = {}
    for key, attribute in _CATEGORY_KEYS.items():
        raw_entries = data.get(key) or []
        if not isinstance(raw_entries, list):
            raise SchemaError(f"{key} must be an array")
        categories[attribute] = tuple(
            _entry(item, f"{key}[{index}]") for index, item in enumerate(raw_entries)
        )

    return HistoricalRiskMetadata(version=str(data.get("version", "1")), **categories)


def _entry(item: Any, field_name: str) -> HistoricalSignalEntry:
    if not isinstance(item, dict):
        raise SchemaError(f"{field_name} must be an object")
    pattern = item.get("pattern")
    weight = item.get("weight")
    reason = item.get("reason", "")
    if not isinstance(pattern, str) or not pattern:
        raise SchemaError(f"{field_name}.pattern must be a non-empty string")
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise SchemaError(f"{field_name}.weight must be an integer")
    if not isinstance(reason, str):
        raise SchemaError(f"{field_name}.reason must be a string")
    return HistoricalSignalEntry(pattern=pattern, weight=weight, reason=reason)
