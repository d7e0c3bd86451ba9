"""
Show lock strategy factory.
Configures which serialisation strategy booking writes use.
"""

from typing import Optional

from moviebooking.core.config import get_settings
from moviebooking.services.interfaces.show_lock import ShowLock
from moviebooking.services.interfaces.local_show_lock import LocalShowLock


def get_show_lock_strategy() -> ShowLock:
    """
    Build the configured show lock.

    Strategy selection via SHOW_LOCK_STRATEGY:
    - local: LocalShowLock (single process, default)
    - redis: RedisShowLock (shared across workers, needs REDIS_ENABLED)
    """
    settings = get_settings()

    if settings.SHOW_LOCK_STRATEGY == "redis" and settings.REDIS_ENABLED:
        from moviebooking.services.redis_show_lock import RedisShowLock

        return RedisShowLock()
    return LocalShowLock()


# Singleton instance
_strategy: Optional[ShowLock] = None


def get_show_lock() -> ShowLock:
    """Get show lock singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_show_lock_strategy()
    return _strategy
