"""Per-configuration single-flight guard

Two runs of the same billing configuration must never overlap, whether
they come from the scheduler or from a manual trigger.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Set

logger = logging.getLogger(__name__)


class ExecutionGuard:
    """
    Tracks which configurations are currently executing

    The check and the claim happen without an await in between, so on a
    single event loop no two coroutines can claim the same config.
    """

    def __init__(self):
        self._running: Set[str] = set()

    def is_running(self, config_id: str) -> bool:
        return config_id in self._running

    def try_acquire(self, config_id: str) -> bool:
        if config_id in self._running:
            return False
        self._running.add(config_id)
        return True

    def release(self, config_id: str) -> None:
        self._running.discard(config_id)

    @asynccontextmanager
    async def hold(self, config_id: str) -> AsyncIterator[bool]:
        """Yield True if the config was claimed, False if it is already running"""
        acquired = self.try_acquire(config_id)
        if not acquired:
            logger.warning(f"Billing config {config_id} is already executing")
        try:
            yield acquired
        finally:
            if acquired:
                self.release(config_id)
