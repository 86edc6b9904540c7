"""Chunked batch runner tests."""

from __future__ import annotations

import asyncio

import pytest

from codesync.refresh.batching import run_in_chunks


async def test_bounded_concurrency() -> None:
    """No more than chunk_size jobs run at once."""
    in_flight = 0
    peak = 0

    async def job(sid: str) -> str:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return sid.upper()

    ids = [f"s{i}" for i in range(23)]
    results = await run_in_chunks(ids, 10, job)

    assert peak == 10
    assert list(results) == ids
    assert results["s7"] == "S7"


async def test_failures_map_to_none() -> None:
    """A failing item maps to None without stopping the batch."""
    async def job(sid: str) -> int:
        if sid == "bad":
            raise RuntimeError("boom")
        return len(sid)

    results = await run_in_chunks(["ok", "bad", "fine"], 2, job)
    assert results == {"ok": 2, "bad": None, "fine": 4}


async def test_empty_batch() -> None:
    """An empty id list gives an empty result."""
    async def job(sid: str) -> str:
        return sid

    assert await run_in_chunks([], 10, job) == {}


async def test_rejects_bad_chunk_size() -> None:
    """A chunk size below 1 is rejected."""
    async def job(sid: str) -> str:
        return sid

    with pytest.raises(ValueError, match="chunk_size"):
        await run_in_chunks(["a"], 0, job)
