"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .show_lock import ShowLock
from .local_show_lock import LocalShowLock

__all__ = ['ShowLock', 'LocalShowLock']
