"""Schema registry backed by riskgate package data.

Schemas ship inside the installed ``riskgate.schemas`` package, so lookups
never depend on the current working directory.
"""

import json
from dataclasses import dataclass
from importlib.resources import files
from typing import Any

_SUFFIX = ".schema.json"


@dataclass(frozen=True)
class SchemaRegistry:
    """Registry of available schemas from package data.

    Attributes:
        available: Sorted tuple of canonical schema names (without suffix)
    """

    available: tuple[str, ...] = ()

    def __init__(self) -> None:
        object.__setattr__(self, "available", tuple(sorted(self._discover_schemas())))

    def _discover_schemas(self) -> list[str]:
        return [
            item.name.removesuffix(_SUFFIX)
            for item in files("riskgate.schemas").iterdir()
            if item.name.endswith(_SUFFIX)
        ]

    def get_text(self, name: str) -> str:
        """Load schema text by name.

        Raises:
            KeyError: If schema not found (includes available schemas in message)
        """
        canonical_name = name.removesuffix(_SUFFIX)
        if canonical_name not in self.available:
            raise KeyError(
                f"Schema '{canonical_name}' not found in riskgate package data.\n"
                f"Available schemas: {', '.join(self.available)}"
            )
        return (files("riskgate.schemas") / f"{canonical_name}{_SUFFIX}").read_text(encoding="utf-8")

    def get_json(self, name: str) -> dict[str, Any]:
        """Load schema as a parsed dictionary.

        Raises:
            KeyError: If schema not found
            ValueError: If schema JSON is malformed
        """
        text = self.get_text(name)
        try:
            res: dict[str, Any] = json.loads(text)
            return res
        except json.JSONDecodeError as e:
            raise ValueError(f"Schema '{name}' contains invalid JSON: {e}") from e


_registry: SchemaRegistry | None = None


def get_registry() -> SchemaRegistry:
    """Get the process-wide schema registry."""
    global _registry
    if _registry is None:
        _registry = SchemaRegistry()
    return _registry
