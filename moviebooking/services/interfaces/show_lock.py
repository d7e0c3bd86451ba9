"""
Per-show lock strategy interface.
Allows swapping between process-local and distributed serialisation.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class ShowLock(ABC):
    """
    Serialises the "read reserved seats, then write" sequence per show.

    Implementations:
    - LocalShowLock: asyncio locks, one per show, inside this process
    - RedisShowLock: Redis lock shared by every worker process

    The ticket_seats unique index still rejects a double sale if two
    writers ever get past the lock together.
    """

    @abstractmethod
    def hold(self, show_id: int) -> AsyncContextManager[None]:
        """
        Hold the lock for a show for the duration of the block.

        Raises:
            Conflict: the lock could not be acquired in time
        """
