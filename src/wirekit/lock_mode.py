from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for cached provider creation.

    Use these values for ``ComponentProviderCache(lock_mode=...)``. Provider
    creation inspects a component type once; the lock only guards that first
    inspection; ``produce`` itself never locks.
    """

    THREAD = "thread"
    """Serialize provider creation per cache with ``threading.Lock``."""

    NONE = "none"
    """Disable locking; concurrent first requests may build duplicate plans."""
