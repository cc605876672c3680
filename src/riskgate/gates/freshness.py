"""Revision-freshness enforcement for checks and review state.

Every piece of gate evidence must reference the current revision. Results
tied to an older revision are stale and always fail.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from riskgate.errors import (
    FailedError,
    MissingError,
    PendingError,
    ReviewTimeoutError,
    SchemaError,
    StaleError,
    UnresolvedError,
)
from riskgate.gates.types import CheckRun, ReviewState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 15.0

PollFn = Callable[[str], Awaitable[ReviewState | None]]


def assert_check_current(check: CheckRun, current_revision: str) -> None:
    """Assert a check references the current revision and succeeded."""
    if check.revision != current_revision:
        raise StaleError(
            f'Stale check "{check.name}": expected revision {current_revision}, got {check.revision}'
        )
    if check.status != "completed":
        raise PendingError(f'Check "{check.name}" is not completed (status: {check.status})')
    if check.conclusion != "success":
        raise FailedError(f'Check "{check.name}" did not succeed (conclusion: {check.conclusion})')


def assert_all_checks_current(
    checks: Iterable[CheckRun],
    required_names: Iterable[str],
    current_revision: str,
) -> None:
    """Assert every required check exists and passes for the current revision.

    When several runs share a name, the one for the current revision wins.
    """
    by_name: dict[str, CheckRun] = {}
    for check in checks:
        existing = by_name.get(check.name)
        if existing is None or (existing.revision != current_revision and check.revision == current_revision):
            by_name[check.name] = check

    for name in required_names:
        check = by_name.get(name)
        if check is None:
            raise MissingError(f'Required check "{name}" not found')
        assert_check_current(check, current_revision)


def assert_review_clean(review: ReviewState, current_revision: str) -> None:
    """Assert the review is for the current revision, succeeded, and is clean."""
    if review.revision != current_revision:
        raise StaleError(f"Stale review: expected revision {current_revision}, got {review.revision}")
    if review.status != "success":
        raise FailedError(f"Review did not succeed (status: {review.status})")
    if review.has_actionable_findings:
        raise UnresolvedError("Review has unresolved actionable findings for current revision")


async def await_review_completion(
    revision: str,
    timeout_minutes: float,
    poll_fn: PollFn,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> ReviewState:
    """Poll until the review reaches a non-pending state or the deadline passes.

    The deadline is wall-clock based: a slow poll call is cut off when the
    remaining budget runs out, so termination never depends on poll latency.
    A ``TimeoutError`` raised by ``poll_fn`` itself before the deadline
    propagates like any other poll failure.

    Raises:
        ReviewTimeoutError: If no terminal state was observed before the deadline
    """
    deadline = time.monotonic() + timeout_minutes * 60.0
    attempt = 0

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        attempt += 1
        try:
            state = await asyncio.wait_for(poll_fn(revision), timeout=remaining)
        except TimeoutError:
            if time.monotonic() < deadline:
                raise
            break
        logger.debug("review poll %d for %s: %s", attempt, revision, state.status if state else "absent")
        if state is not None and state.status != "pending":
            return state

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(poll_interval_seconds, remaining))

    raise ReviewTimeoutError(
        f"Review agent timed out after {timeout_minutes:g} minutes for revision {revision}"
    )


def check_runs_from_payload(payload: Any) -> list[CheckRun]:
    """Parse check runs from a JSON payload (list, or object with ``checks``)."""
    items = payload.get("checks") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise SchemaError("Check payload must be a list or an object with a 'checks' list")
    runs: list[CheckRun] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or "name" not in item:
            raise SchemaError(f"checks[{index}] must be an object with a name")
        runs.append(CheckRun.from_dict(item))
    return runs
