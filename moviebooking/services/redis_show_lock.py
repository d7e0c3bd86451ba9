"""
Distributed show lock for multi-worker deployments.
Implements ShowLock using a Redis lock per show.

Circuit Breaker Pattern:
  If Redis cannot be reached the lock "fails open" to the process-local
  lock, so a Redis outage degrades to per-process serialisation instead of
  blocking every booking. The ticket_seats unique index remains the
  authority: a cross-process race is then caught at commit and reported as
  an invalid request.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.exceptions import LockError, RedisError

from moviebooking.core.config import get_settings
from moviebooking.core.exceptions import Conflict
from moviebooking.core.logging import get_logger
from moviebooking.core.metrics import record_lock_failure, show_lock_wait
from moviebooking.infrastructure.redis_client import get_redis
from moviebooking.services.interfaces.local_show_lock import LocalShowLock
from moviebooking.services.interfaces.show_lock import ShowLock

logger = get_logger(__name__)


class RedisShowLock(ShowLock):
    """
    Redis lock keyed by show id.

    Use when:
    - several API workers or hosts book seats for the same shows
    """

    def __init__(self, client=None, fallback: Optional[ShowLock] = None):
        settings = get_settings()
        self.redis = client if client is not None else get_redis()
        self.timeout = settings.SHOW_LOCK_TIMEOUT
        self.blocking_timeout = settings.SHOW_LOCK_BLOCKING_TIMEOUT
        self.fallback = fallback or LocalShowLock()

    @staticmethod
    def key(show_id: int) -> str:
        return f"lock:show:{show_id}"

    @asynccontextmanager
    async def hold(self, show_id: int) -> AsyncIterator[None]:
        lock = self.redis.lock(
            self.key(show_id),
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        started = time.perf_counter()
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            record_lock_failure("backend_error")
            logger.warning("show_lock_backend_unavailable", show_id=show_id, error=str(e))
            acquired = None

        if acquired is None:
            async with self.fallback.hold(show_id):
                yield
            return

        if not acquired:
            record_lock_failure("timeout")
            logger.warning("show_lock_timeout", show_id=show_id, waited=self.blocking_timeout)
            raise Conflict("show is busy, please retry")

        show_lock_wait.observe(time.perf_counter() - started)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # Held past SHOW_LOCK_TIMEOUT; the key already expired
                logger.warning("show_lock_expired_before_release", show_id=show_id, error=str(e))
            except RedisError as e:
                # The work is already committed; the key expires after SHOW_LOCK_TIMEOUT
                record_lock_failure("backend_error")
                logger.warning("show_lock_release_failed", show_id=show_id, error=str(e))
