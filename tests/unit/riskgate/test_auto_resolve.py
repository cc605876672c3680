"""Auto-resolution of bot-only review threads."""

from __future__ import annotations

import asyncio

import pytest

from riskgate.errors import AutoResolveError, SchemaError
from riskgate.review.auto_resolve import auto_resolve, find_resolvable, threads_from_payload
from riskgate.review.types import ReviewThread, ThreadComment

BOT = "greptile[bot]"


def _thread(thread_id: str, *authors: str, resolved: bool = False) -> ReviewThread:
    return ReviewThread(
        id=thread_id,
        is_resolved=resolved,
        comments=tuple(ThreadComment(author=a, body="...") for a in authors),
    )


THREADS = [
    _thread("t1", BOT),
    _thread("t2", BOT, "alice"),
    _thread("t3", BOT, BOT),
    _thread("t4", BOT, resolved=True),
    _thread("t5"),
]


def test_find_resolvable_only_bot_threads() -> None:
    assert [t.id for t in find_resolvable(THREADS, BOT)] == ["t1", "t3"]


def test_auto_resolve_never_touches_human_threads() -> None:
    calls: list[str] = []

    async def resolve(thread_id: str) -> None:
        calls.append(thread_id)

    result = asyncio.run(auto_resolve(threads=THREADS, bot_user=BOT, resolve_fn=resolve))

    assert calls == ["t1", "t3"]
    assert result.resolved == ("t1", "t3")
    assert result.skipped == ("t2", "t5")


def test_failure_aborts_with_partial_result() -> None:
    calls: list[str] = []

    async def resolve(thread_id: str) -> None:
        calls.append(thread_id)
        if thread_id == "t3":
            raise RuntimeError("api down")

    threads = THREADS + [_thread("t6", BOT)]
    with pytest.raises(AutoResolveError) as exc_info:
        asyncio.run(auto_resolve(threads=threads, bot_user=BOT, resolve_fn=resolve))

    error = exc_info.value
    assert calls == ["t1", "t3"]
    assert error.failed_thread == "t3"
    assert error.partial.resolved == ("t1",)
    assert error.partial.skipped == ("t2", "t5", "t3", "t6")
    assert error.reason_code == "AUTO_RESOLVE_FAILED"


def test_threads_from_payload() -> None:
    threads = threads_from_payload(
        [{"id": 7, "isResolved": True, "comments": [{"author": BOT, "body": "fixed"}]}, {"id": "t2"}]
    )

    assert threads[0] == ReviewThread(id="7", is_resolved=True, comments=(ThreadComment(author=BOT, body="fixed"),))
    assert threads[1] == ReviewThread(id="t2", is_resolved=False)


@pytest.mark.parametrize("payload", [{"id": "t1"}, [{"comments": []}], [{"id": "t1", "comments": ["x"]}]])
def test_threads_from_payload_rejects_bad_shape(payload) -> None:
    with pytest.raises(SchemaError):
        threads_from_payload(payload)
