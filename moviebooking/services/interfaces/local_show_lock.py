"""
Process-local show lock built on asyncio.Lock.
"""

import asyncio
import time
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from moviebooking.core.metrics import show_lock_wait
from moviebooking.services.interfaces.show_lock import ShowLock


class LocalShowLock(ShowLock):
    """
    One asyncio.Lock per show id, per running event loop.

    Entries are dropped once nobody holds or waits for them, so the table
    only ever contains shows with bookings in flight.

    Use when:
    - a single worker process serves the API
    - tests and local development
    """

    def __init__(self):
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict]" = (
            weakref.WeakKeyDictionary()
        )

    def _entry(self, show_id: int) -> list:
        table = self._locks.setdefault(asyncio.get_running_loop(), {})
        entry = table.get(show_id)
        if entry is None:
            # [lock, number of holders and waiters]
            entry = table[show_id] = [asyncio.Lock(), 0]
        return entry

    def _forget(self, show_id: int, entry: list) -> None:
        entry[1] -= 1
        if entry[1] == 0:
            table = self._locks.get(asyncio.get_running_loop(), {})
            if table.get(show_id) is entry:
                del table[show_id]

    @asynccontextmanager
    async def hold(self, show_id: int) -> AsyncIterator[None]:
        entry = self._entry(show_id)
        entry[1] += 1
        try:
            started = time.perf_counter()
            async with entry[0]:
                show_lock_wait.observe(time.perf_counter() - started)
                yield
        finally:
            self._forget(show_id, entry)
