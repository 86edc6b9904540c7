"""Chunked fan-out for batch refresh and recompute."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


async def run_in_chunks(
    student_ids: Sequence[str],
    chunk_size: int,
    job: Callable[[str], Awaitable[T]],
) -> dict[str, T | None]:
    """Run ``job`` for every id, at most ``chunk_size`` concurrently.

    A failing id is logged and mapped to None; the rest of the batch carries on.
    """
    if chunk_size < 1:
        msg = f"chunk_size must be >= 1, got {chunk_size}"
        raise ValueError(msg)

    results: dict[str, T | None] = {}
    for start in range(0, len(student_ids), chunk_size):
        chunk = student_ids[start : start + chunk_size]
        outcomes = await asyncio.gather(*(job(sid) for sid in chunk), return_exceptions=True)
        for sid, outcome in zip(chunk, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.error("batch_item_failed", student_id=sid, error=str(outcome), exc_info=outcome)
                results[sid] = None
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[sid] = outcome
    return results
