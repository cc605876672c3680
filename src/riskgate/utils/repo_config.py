"""Optional per-repository riskgate settings.

Reads ``.riskgate/config.toml`` (preferred) or ``.riskgate/config.json``.
Relative paths are resolved against the repository root.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from riskgate.gates.evidence import DEFAULT_EVIDENCE_DIR
from riskgate.gates.freshness import DEFAULT_POLL_INTERVAL_SECONDS

CONFIG_DIRNAME = ".riskgate"


@dataclass(frozen=True)
class RepoSettings:
    """Resolved repository settings (defaults when no config file exists)."""

    contract_path: Path | None = None
    metadata_path: Path | None = None
    evidence_dir: Path = DEFAULT_EVIDENCE_DIR
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    bot_user: str | None = None
    base_ref: str = "origin/main"

    @classmethod
    def from_dict(cls, data: dict[str, Any], repo_root: Path) -> RepoSettings:
        """Parse a settings mapping; unknown keys are rejected."""
        known = {"contract_path", "metadata_path", "evidence_dir", "poll_interval_seconds", "bot_user", "base_ref"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown settings: {', '.join(unknown)}")

        def _path(key: str) -> Path | None:
            value = data.get(key)
            if value is None:
                return None
            return (repo_root / str(value)).resolve()

        poll_interval = float(data.get("poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS))
        if poll_interval < 0:
            raise ValueError("poll_interval_seconds must be >= 0")

        return cls(
            contract_path=_path("contract_path"),
            metadata_path=_path("metadata_path"),
            evidence_dir=Path(str(data.get("evidence_dir", DEFAULT_EVIDENCE_DIR))),
            poll_interval_seconds=poll_interval,
            bot_user=data.get("bot_user"),
            base_ref=str(data.get("base_ref", "origin/main")),
        )


def load_repo_settings(repo_root: Path) -> RepoSettings:
    """Load settings from ``.riskgate/``; return defaults when absent.

    Raises:
        RuntimeError: If a config file is malformed or invalid
    """
    config_dir = repo_root / CONFIG_DIRNAME

    toml_path = config_dir / "config.toml"
    if toml_path.exists():
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
            return RepoSettings.from_dict(data, repo_root)
        except tomllib.TOMLDecodeError as e:
            raise RuntimeError(f"Malformed TOML config at {toml_path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise RuntimeError(f"Invalid config structure in {toml_path}: {e}") from e

    json_path = config_dir / "config.json"
    if json_path.exists():
        try:
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError("top level must be an object")
            return RepoSettings.from_dict(data, repo_root)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Malformed JSON config at {json_path}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise RuntimeError(f"Invalid config structure in {json_path}: {e}") from e

    return RepoSettings()
