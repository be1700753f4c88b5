from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from vstream.metadata import MetadataBackend

logger = logging.getLogger(__name__)


@dataclass
class ViewCounter:
    """Counts full plays without holding up the response being served.

    Views are queued and applied by a few workers. When the queue is full the
    view is dropped with a warning rather than piling up behind a slow store.
    Leaving `running()` waits for the queued ones to be applied.
    """

    backend: MetadataBackend
    queue: MemoryObjectSendStream[str]

    @classmethod
    @asynccontextmanager
    async def running(
        cls,
        backend: MetadataBackend,
        max_pending: int = 1024,
        workers: int = 4,
    ) -> AsyncIterator[ViewCounter]:
        send, receive = anyio.create_memory_object_stream(max_pending)
        counter = cls(backend, send)
        async with anyio.create_task_group() as tg:
            with receive:
                for _ in range(workers):
                    tg.start_soon(counter._work, receive.clone())
            async with send:
                yield counter

    def record(self, video_id: str) -> None:
        try:
            self.queue.send_nowait(video_id)
        except anyio.WouldBlock:
            logger.warning("view queue full, dropping view of %s", video_id)

    async def _work(self, receive: MemoryObjectReceiveStream[str]) -> None:
        async with receive:
            async for video_id in receive:
                await self._increment(video_id)

    async def _increment(self, video_id: str) -> None:
        try:
            await self.backend.increment_views(video_id)
        except Exception:
            # best effort, the bytes have already been handed out
            logger.warning("could not count view of %s", video_id, exc_info=True)
