"""Typed errors raised by riskgate components.

Each error carries a stable ``reason_code`` so callers (CI surfaces,
reports) can branch on the failure kind without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from riskgate.review.types import AutoResolveResult

REASON_CONTRACT_PARSE_ERROR = "CONTRACT_PARSE_ERROR"
REASON_CONTRACT_SCHEMA_INVALID = "CONTRACT_SCHEMA_INVALID"
REASON_STALE_REVISION = "STALE_REVISION"
REASON_STALE_EVIDENCE = "STALE_EVIDENCE"
REASON_PENDING = "PENDING"
REASON_FAILED = "FAILED"
REASON_MISSING = "MISSING"
REASON_MISSING_FLOW = "MISSING_FLOW"
REASON_MISSING_FIELD = "MISSING_FIELD"
REASON_MALFORMED_EVIDENCE = "MALFORMED_EVIDENCE"
REASON_UNRESOLVED_FINDINGS = "UNRESOLVED_FINDINGS"
REASON_REVIEW_TIMEOUT = "REVIEW_TIMEOUT"
REASON_DOCS_DRIFT = "DOCS_DRIFT"
REASON_AUTO_RESOLVE_FAILED = "AUTO_RESOLVE_FAILED"


class RiskGateError(Exception):
    """Base class for every riskgate error."""

    reason_code: str = "RISKGATE_ERROR"

    def __init__(self, message: str, reason_code: str | None = None) -> None:
        super().__init__(message)
        if reason_code is not None:
            self.reason_code = reason_code


class ContractError(RiskGateError):
    """Policy contract (or historical metadata) could not be used."""


class ParseError(ContractError):
    """Source document is not valid structured data."""

    reason_code = REASON_CONTRACT_PARSE_ERROR


class SchemaError(ContractError):
    """Structured data is missing a required field or has the wrong shape."""

    reason_code = REASON_CONTRACT_SCHEMA_INVALID


class StaleError(RiskGateError):
    """Data references a revision other than the current one."""

    reason_code = REASON_STALE_REVISION


class StaleEvidenceError(StaleError):
    """Evidence entry is older than the contract's age ceiling."""

    reason_code = REASON_STALE_EVIDENCE


class PendingError(RiskGateError):
    """External state has not completed yet; callers may re-poll."""

    reason_code = REASON_PENDING


class FailedError(RiskGateError):
    """External state completed without success."""

    reason_code = REASON_FAILED


class MissingError(RiskGateError):
    """A required check, flow, or field is absent."""

    reason_code = REASON_MISSING


class MissingFlowError(MissingError):
    reason_code = REASON_MISSING_FLOW


class MissingFieldError(MissingError):
    reason_code = REASON_MISSING_FIELD


class MalformedEvidenceError(RiskGateError):
    """Evidence entry carries a value that cannot be interpreted."""

    reason_code = REASON_MALFORMED_EVIDENCE


class UnresolvedError(RiskGateError):
    """Review reports actionable findings for the current revision."""

    reason_code = REASON_UNRESOLVED_FINDINGS


class ReviewTimeoutError(RiskGateError, TimeoutError):
    """Review did not reach a terminal state before the deadline."""

    reason_code = REASON_REVIEW_TIMEOUT


class DriftError(RiskGateError):
    """Control-plane files changed without a matching documentation change."""

    reason_code = REASON_DOCS_DRIFT


class AutoResolveError(RiskGateError):
    """A thread resolve action failed; the remaining batch was not attempted."""

    reason_code = REASON_AUTO_RESOLVE_FAILED

    def __init__(self, message: str, partial: AutoResolveResult, failed_thread: str) -> None:
        super().__init__(message)
        self.partial = partial
        self.failed_thread = failed_thread
