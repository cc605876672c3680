"""riskgate - risk-aware merge policy gate for agent-generated pull requests."""

__version__ = "0.1.0"
