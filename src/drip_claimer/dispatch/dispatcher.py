"""Concurrent dispatcher - runs submission tasks under a concurrency limit."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from drip_claimer.models.records import SubmissionOutcome

log = logging.getLogger(__name__)

SubmissionTask = Callable[[], Awaitable[SubmissionOutcome]]

CANCELLED_REASON = "cancelled before completion"


async def dispatch(
    tasks: Sequence[SubmissionTask],
    limit: int,
    timeout: float | None = None,
) -> list[SubmissionOutcome]:
    """Run every task with at most ``limit`` in flight at once.

    Slots are handed out greedily: as soon as one task finishes the next
    queued task starts. ``outcomes[i]`` always belongs to ``tasks[i]``,
    whatever order they complete in. A task that raises becomes a FAILED
    outcome in its own slot and never disturbs its siblings.

    With ``timeout`` set, tasks still unfinished at the deadline are cancelled
    and reported as FAILED; the outcomes gathered so far are returned.
    Cancelling the dispatch itself cancels all tasks and re-raises.
    """
    if limit < 1:
        raise ValueError(f"concurrency limit must be positive, got {limit}")
    if not tasks:
        return []

    outcomes: list[SubmissionOutcome | None] = [None] * len(tasks)
    semaphore = asyncio.Semaphore(limit)

    async def _run_one(index: int, task: SubmissionTask) -> None:
        async with semaphore:
            try:
                outcomes[index] = await task()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                log.error("Submission task %d raised: %s", index + 1, exc)
                outcomes[index] = SubmissionOutcome.failed(str(exc) or type(exc).__name__)

    runners = [
        asyncio.create_task(_run_one(i, task)) for i, task in enumerate(tasks)
    ]

    try:
        _, pending = await asyncio.wait(runners, timeout=timeout)
    except asyncio.CancelledError:
        for runner in runners:
            runner.cancel()
        await asyncio.gather(*runners, return_exceptions=True)
        raise

    if pending:
        log.warning(
            "Dispatch deadline of %ss reached, cancelling %d unfinished submissions",
            timeout, len(pending),
        )
        for runner in pending:
            runner.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    return [
        outcome if outcome is not None else SubmissionOutcome.failed(CANCELLED_REASON)
        for outcome in outcomes
    ]
