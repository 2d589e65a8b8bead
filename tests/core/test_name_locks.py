"""Tests for per-name asyncio locks."""

import asyncio
import gc

import pytest

from gridviz.core.name_locks import NameLocks


class TestNameLocks:
    def test_same_name_shares_lock(self) -> None:
        locks = NameLocks()

        first = locks.get("nad_a")

        assert locks.get("nad_a") is first
        assert locks.get("nad_b") is not first

    def test_unused_locks_are_released(self) -> None:
        locks = NameLocks()
        lock = locks.get("nad_a")
        assert len(locks) == 1

        del lock
        gc.collect()

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_serializes_same_name(self) -> None:
        locks = NameLocks()
        events: list[str] = []

        async def writer(tag: str) -> None:
            async with locks.get("nad_a"):
                events.append(f"{tag}-start")
                await asyncio.sleep(0.01)
                events.append(f"{tag}-end")

        await asyncio.gather(writer("one"), writer("two"))

        assert events in (
            ["one-start", "one-end", "two-start", "two-end"],
            ["two-start", "two-end", "one-start", "one-end"],
        )
