"""
Per-name asyncio locks.

Serializes writers that target the same logical artifact name while
letting different names proceed concurrently. Locks are held weakly and
disappear once no coroutine references them.

Dependencies: asyncio, weakref
System role: Write serialization for upsert and modification pipelines
"""

import asyncio
import weakref


class NameLocks:
    """Registry handing out one asyncio.Lock per name."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, name: str) -> asyncio.Lock:
        """Return the lock for ``name``, creating it if needed."""
        lock = self._locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[name] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
