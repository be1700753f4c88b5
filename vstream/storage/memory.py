from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from vstream.ranges import ResolvedWindow
from vstream.storage import BlobBody, BlobStore, ObjectMetadata, ObjectNotFound


@dataclass
class Object:
    body: bytes


@dataclass
class InMemoryBackend(BlobStore):
    storage: dict[str, Object] = field(default_factory=dict)
    chunk_size: int = 64 * 1024
    # reads handed out and not yet closed
    open_reads: int = 0

    def put(self, key: str, body: bytes) -> None:
        self.storage[key] = Object(body=body)

    def _lookup(self, key: str) -> Object:
        try:
            return self.storage[key]
        except KeyError:
            raise ObjectNotFound(key) from None

    async def _chunks(self, data: memoryview) -> AsyncIterator[bytes]:
        for pos in range(0, len(data), self.chunk_size):
            yield bytes(data[pos : pos + self.chunk_size])

    async def _release(self) -> None:
        self.open_reads -= 1

    async def get(self, key: str, window: ResolvedWindow | None = None) -> BlobBody:
        data = memoryview(self._lookup(key).body)
        total = len(data)
        if window is not None:
            data = data[window.offset : window.offset + window.length]
        self.open_reads += 1
        return BlobBody(chunks=self._chunks(data), length=len(data), total=total, closer=self._release)

    async def head(self, key: str) -> ObjectMetadata:
        return ObjectMetadata(total=len(self._lookup(key).body))
