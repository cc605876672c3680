"""Review finding pipeline: normalize, adjudicate, remediate, resolve."""

from riskgate.review.adjudicate import adjudicate, duplicate_key, filter_current_findings
from riskgate.review.auto_resolve import auto_resolve, find_resolvable
from riskgate.review.normalize import NORMALIZERS, normalize
from riskgate.review.remediation import run_remediation_loop
from riskgate.review.rerun import build_rerun_comment, has_existing_rerun_request, maybe_rerun_comment
from riskgate.review.types import (
    AutoResolveResult,
    Finding,
    RemediationConfig,
    RemediationResult,
    ReviewThread,
    ThreadComment,
)

__all__ = [
    "NORMALIZERS",
    "AutoResolveResult",
    "Finding",
    "RemediationConfig",
    "RemediationResult",
    "ReviewThread",
    "ThreadComment",
    "adjudicate",
    "auto_resolve",
    "build_rerun_comment",
    "duplicate_key",
    "filter_current_findings",
    "find_resolvable",
    "has_existing_rerun_request",
    "maybe_rerun_comment",
    "normalize",
    "run_remediation_loop",
]
