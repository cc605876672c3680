"""Risk-policy contract: types, loader, and path patterns."""

from riskgate.policy.contract import contract_path_for_repo, load_contract, validate_contract
from riskgate.policy.patterns import compile_pattern, filter_matches, match_any
from riskgate.policy.types import PolicyContract, Tier

__all__ = [
    "PolicyContract",
    "Tier",
    "compile_pattern",
    "contract_path_for_repo",
    "filter_matches",
    "load_contract",
    "match_any",
    "validate_contract",
]
