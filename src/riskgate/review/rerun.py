"""Revision-tagged rerun-request comments.

Exactly one rerun request is posted per revision. Requests are recognized
by a hidden HTML marker plus a ``revision:<id>`` trigger line, so duplicate
bot comments and racing workflows collapse to one.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_MARKER = "<!-- risk-policy-rerun-request -->"
DEFAULT_AGENT = "review-agent"


@dataclass(frozen=True)
class PrComment:
    id: int
    body: str
    user: str


def build_rerun_comment(revision: str, marker: str = DEFAULT_MARKER, agent_name: str = DEFAULT_AGENT) -> str:
    return f"{marker}\n@{agent_name} please re-review\nrevision:{revision}"


def has_existing_rerun_request(
    comments: Iterable[PrComment],
    revision: str,
    marker: str = DEFAULT_MARKER,
) -> bool:
    trigger = f"revision:{revision}"
    return any(marker in c.body and trigger in c.body.splitlines() for c in comments)


def maybe_rerun_comment(
    comments: Iterable[PrComment],
    revision: str,
    marker: str = DEFAULT_MARKER,
    agent_name: str = DEFAULT_AGENT,
) -> str | None:
    """Return a new rerun-request body, or None if one exists for ``revision``."""
    if has_existing_rerun_request(comments, revision, marker):
        return None
    return build_rerun_comment(revision, marker, agent_name)
