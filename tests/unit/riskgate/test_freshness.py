"""Revision-freshness checks and review polling."""

from __future__ import annotations

import asyncio

import pytest

from riskgate.errors import (
    FailedError,
    MissingError,
    PendingError,
    ReviewTimeoutError,
    SchemaError,
    StaleError,
    UnresolvedError,
)
from riskgate.gates.freshness import (
    assert_all_checks_current,
    assert_check_current,
    assert_review_clean,
    await_review_completion,
    check_runs_from_payload,
)
from riskgate.gates.types import CheckRun, ReviewState

HEAD = "abc123"


class TestAssertCheckCurrent:
    def test_passes_for_successful_current_check(self) -> None:
        assert_check_current(CheckRun("CI Pipeline", HEAD, "completed", "success"), HEAD)

    def test_stale_revision_fails_even_when_successful(self) -> None:
        with pytest.raises(StaleError, match='Stale check "CI Pipeline"'):
            assert_check_current(CheckRun("CI Pipeline", "old999", "completed", "success"), HEAD)

    def test_incomplete_check_is_pending(self) -> None:
        with pytest.raises(PendingError, match="not completed"):
            assert_check_current(CheckRun("CI Pipeline", HEAD, "in_progress"), HEAD)

    def test_failed_conclusion(self) -> None:
        with pytest.raises(FailedError, match="did not succeed"):
            assert_check_current(CheckRun("CI Pipeline", HEAD, "completed", "failure"), HEAD)


class TestAssertAllChecksCurrent:
    def test_missing_required_check(self) -> None:
        checks = [CheckRun("risk-policy-gate", HEAD, "completed", "success")]
        with pytest.raises(MissingError, match='Required check "CI Pipeline" not found'):
            assert_all_checks_current(checks, ["risk-policy-gate", "CI Pipeline"], HEAD)

    def test_current_run_wins_over_stale_run(self) -> None:
        checks = [
            CheckRun("CI Pipeline", HEAD, "completed", "success"),
            CheckRun("CI Pipeline", "old999", "completed", "failure"),
        ]
        assert_all_checks_current(checks, ["CI Pipeline"], HEAD)

    def test_only_stale_run_fails(self) -> None:
        checks = [CheckRun("CI Pipeline", "old999", "completed", "success")]
        with pytest.raises(StaleError):
            assert_all_checks_current(checks, ["CI Pipeline"], HEAD)


class TestAssertReviewClean:
    def test_clean_review_passes(self) -> None:
        assert_review_clean(ReviewState(HEAD, "success"), HEAD)

    def test_stale_review(self) -> None:
        with pytest.raises(StaleError, match="Stale review"):
            assert_review_clean(ReviewState("old999", "success"), HEAD)

    def test_failed_review(self) -> None:
        with pytest.raises(FailedError):
            assert_review_clean(ReviewState(HEAD, "failure"), HEAD)

    def test_actionable_findings(self) -> None:
        with pytest.raises(UnresolvedError, match="unresolved actionable findings"):
            assert_review_clean(ReviewState(HEAD, "success", has_actionable_findings=True), HEAD)


def test_await_returns_first_non_pending_state() -> None:
    states = iter([None, ReviewState(HEAD, "pending"), ReviewState(HEAD, "success")])
    seen: list[str] = []

    async def poll(revision: str) -> ReviewState | None:
        seen.append(revision)
        return next(states)

    result = asyncio.run(await_review_completion(HEAD, 1, poll, poll_interval_seconds=0))

    assert result.status == "success"
    assert seen == [HEAD, HEAD, HEAD]


def test_await_returns_failure_state_without_judging_it() -> None:
    async def poll(revision: str) -> ReviewState:
        return ReviewState(revision, "failure")

    result = asyncio.run(await_review_completion(HEAD, 1, poll, poll_interval_seconds=0))
    assert result.status == "failure"


def test_await_times_out_when_always_pending() -> None:
    async def poll(revision: str) -> ReviewState:
        return ReviewState(revision, "pending")

    with pytest.raises(ReviewTimeoutError, match="timed out"):
        asyncio.run(await_review_completion(HEAD, 0.001, poll, poll_interval_seconds=0.01))


def test_await_cuts_off_slow_poll() -> None:
    async def poll(revision: str) -> ReviewState:
        await asyncio.sleep(10)
        return ReviewState(revision, "success")

    with pytest.raises(ReviewTimeoutError):
        asyncio.run(await_review_completion(HEAD, 0.001, poll, poll_interval_seconds=0))


def test_await_propagates_timeout_raised_by_poll_before_deadline() -> None:
    outcomes = iter([TimeoutError("socket timed out"), ReviewState(HEAD, "success")])
    calls: list[str] = []

    async def poll(revision: str) -> ReviewState:
        calls.append(revision)
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    with pytest.raises(TimeoutError, match="socket timed out") as excinfo:
        asyncio.run(await_review_completion(HEAD, 10, poll, poll_interval_seconds=0))

    assert not isinstance(excinfo.value, ReviewTimeoutError)
    assert calls == [HEAD]


def test_check_runs_from_payload_accepts_head_sha() -> None:
    runs = check_runs_from_payload(
        {"checks": [{"name": "CI Pipeline", "headSha": HEAD, "status": "completed", "conclusion": "success"}]}
    )
    assert runs == [CheckRun("CI Pipeline", HEAD, "completed", "success")]


def test_check_runs_from_payload_rejects_bad_shape() -> None:
    with pytest.raises(SchemaError):
        check_runs_from_payload({"checks": "nope"})
