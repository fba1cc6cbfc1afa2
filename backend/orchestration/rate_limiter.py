"""
Per-role rate limiter.

Successive acquisitions for the same role are separated by at least
min_interval seconds. Callers are delayed, never rejected. Each role has its
own lock, so a waiting role never blocks another role.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from orchestration.messages import AgentRole

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 2.0


class RoleRateLimiter:
    """Minimum-interval gate keyed by AgentRole.

    clock and sleep are injectable so tests can drive a fake timeline.
    """

    def __init__(self, min_interval: float = DEFAULT_MIN_INTERVAL,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_invocation: dict[AgentRole, float] = {}
        self._locks: dict[AgentRole, asyncio.Lock] = {}

    def _lock_for(self, role: AgentRole) -> asyncio.Lock:
        lock = self._locks.get(role)
        if lock is None:
            lock = self._locks[role] = asyncio.Lock()
        return lock

    def last_invocation(self, role: AgentRole) -> Optional[float]:
        return self._last_invocation.get(role)

    async def acquire(self, role: AgentRole) -> float:
        """Wait until the role's gate opens, then stamp it. Returns seconds waited."""
        async with self._lock_for(role):
            waited = 0.0
            last = self._last_invocation.get(role)
            if last is not None:
                remaining = self.min_interval - (self._clock() - last)
                while remaining > 0:
                    logger.debug("Rate limit: %s waits %.2fs", role.value, remaining)
                    await self._sleep(remaining)
                    waited += remaining
                    remaining = self.min_interval - (self._clock() - last)
            self._last_invocation[role] = self._clock()
            return waited
