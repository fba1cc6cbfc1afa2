"""
Cancellable response streams.

A ResponseStream is an async iterator of StreamChunk with an explicit end
state: it either completes (result is set, side effects committed) or is
cancelled (nothing committed). Subclasses implement _produce() as an async
generator and set self._result just before it returns.

Each chunk is pulled in its own task, so cancel() from any other task
interrupts a pull that is still waiting on upstream.
"""

import asyncio
import logging
from typing import AsyncIterator, Generic, Optional, TypeVar

from orchestration.messages import StreamChunk

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class ResponseStream(Generic[ResultT]):

    def __init__(self):
        self._gen: Optional[AsyncIterator[StreamChunk]] = None
        self._pull: Optional[asyncio.Task] = None
        self._result: Optional[ResultT] = None
        self._cancelled = False
        self._completed = False

    def _produce(self) -> AsyncIterator[StreamChunk]:
        raise NotImplementedError

    # ── State ──

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def result(self) -> Optional[ResultT]:
        """Final result, or None until the stream has completed."""
        return self._result

    @property
    def _pulling(self) -> bool:
        return self._pull is not None and not self._pull.done()

    def _finish(self, result: ResultT):
        self._result = result
        self._completed = True

    # ── Iteration ──

    def __aiter__(self) -> "ResponseStream[ResultT]":
        return self

    async def _next_chunk(self) -> Optional[StreamChunk]:
        try:
            return await self._gen.__anext__()
        except StopAsyncIteration:
            return None

    async def __anext__(self) -> StreamChunk:
        if self._completed:
            raise StopAsyncIteration
        if self._cancelled:
            await self._close()
            raise StopAsyncIteration
        if self._gen is None:
            self._gen = self._produce()
        self._pull = asyncio.create_task(self._next_chunk())
        try:
            chunk = await self._pull
        except asyncio.CancelledError:
            if not self._cancelled:
                # The consuming task itself was cancelled
                self._cancelled = True
                logger.info("%s cancelled mid-flight", type(self).__name__)
                raise
            chunk = None
        if self._cancelled:
            await self._close()
            raise StopAsyncIteration
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    async def collect(self) -> Optional[ResultT]:
        """Drain the stream and return its result (None if it was cancelled)."""
        async for _ in self:
            pass
        return self._result

    # ── Cancellation ──

    def cancel(self):
        """Stop consuming upstream; whatever has not been committed never will be.

        Safe to call from another task while a chunk is being awaited: the
        pending pull is cancelled, the waiting consumer sees the end of the
        stream and the producer never reaches its commit.
        """
        if self._completed or self._cancelled:
            return
        self._cancelled = True
        logger.info("%s cancelled", type(self).__name__)
        if self._pulling:
            self._pull.cancel()

    async def aclose(self):
        self.cancel()
        if not self._pulling:
            await self._close()

    async def _close(self):
        gen, self._gen = self._gen, None
        if gen is not None:
            await gen.aclose()
