"""Packaged JSON Schemas for riskgate documents."""

from riskgate.schemas.registry import SchemaRegistry, get_registry
from riskgate.schemas.validator import validate_data

__all__ = ["SchemaRegistry", "get_registry", "validate_data"]
