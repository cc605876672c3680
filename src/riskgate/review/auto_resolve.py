"""Auto-resolve review threads that only the review bot took part in.

Threads with any human participant are never resolved. Resolution runs
sequentially; the first failing resolve aborts the batch and raises
``AutoResolveError`` carrying what was resolved before the failure.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from riskgate.errors import AutoResolveError, SchemaError
from riskgate.review.types import AutoResolveResult, ReviewThread, ThreadComment

logger = logging.getLogger(__name__)

ResolveFn = Callable[[str], Awaitable[None]]


def find_resolvable(threads: Iterable[ReviewThread], bot_user: str) -> list[ReviewThread]:
    """Unresolved, non-empty threads where every comment is from ``bot_user``."""
    return [
        thread
        for thread in threads
        if not thread.is_resolved
        and thread.comments
        and all(comment.author == bot_user for comment in thread.comments)
    ]


async def auto_resolve(
    *,
    threads: Iterable[ReviewThread],
    bot_user: str,
    resolve_fn: ResolveFn,
) -> AutoResolveResult:
    """Resolve every bot-only thread; report other unresolved threads as skipped.

    Raises:
        AutoResolveError: When ``resolve_fn`` fails. ``partial.resolved`` lists
            threads resolved before the failure; ``partial.skipped`` lists the
            human threads, the failing thread, and the unattempted ones.
    """
    threads = list(threads)
    to_resolve = find_resolvable(threads, bot_user)
    resolvable_ids = {thread.id for thread in to_resolve}
    skipped = [thread.id for thread in threads if not thread.is_resolved and thread.id not in resolvable_ids]

    resolved: list[str] = []
    for index, thread in enumerate(to_resolve):
        try:
            await resolve_fn(thread.id)
        except Exception as exc:
            remaining = [t.id for t in to_resolve[index:]]
            partial = AutoResolveResult(resolved=tuple(resolved), skipped=tuple(skipped + remaining))
            raise AutoResolveError(
                f"Failed to resolve thread {thread.id}: {exc}",
                partial=partial,
                failed_thread=thread.id,
            ) from exc
        logger.info("resolved bot-only thread %s", thread.id)
        resolved.append(thread.id)

    return AutoResolveResult(resolved=tuple(resolved), skipped=tuple(skipped))


def threads_from_payload(payload: Any) -> list[ReviewThread]:
    """Parse review threads from ``[{id, isResolved, comments: [{author, body}]}]``."""
    if not isinstance(payload, list):
        raise SchemaError("Review threads must be a list")
    threads: list[ReviewThread] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or "id" not in item:
            raise SchemaError(f"threads[{index}] must be an object with an id")
        comments = item.get("comments") or []
        if not isinstance(comments, list) or not all(isinstance(c, dict) for c in comments):
            raise SchemaError(f"threads[{index}].comments must be a list of objects")
        threads.append(
            ReviewThread(
                id=str(item["id"]),
                is_resolved=bool(item.get("isResolved", False)),
                comments=tuple(
                    ThreadComment(author=str(c.get("author", "")), body=str(c.get("body", ""))) for c in comments
                ),
            )
        )
    return threads
