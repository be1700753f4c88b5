from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from vstream.errors import ObjectNotFound, UpstreamFailure
from vstream.ranges import ResolvedWindow

__all__ = [
    "BlobBody",
    "BlobStore",
    "ObjectMetadata",
    "ObjectNotFound",
    "UpstreamFailure",
]


@dataclass
class ObjectMetadata:
    total: int


async def _nothing_to_close() -> None:
    pass


@dataclass
class BlobBody:
    """An open read of (part of) a stored object.

    `length` is the number of bytes `chunks` will yield, `total` the size of
    the whole object. `aclose` releases the underlying read and may be called
    any number of times.
    """

    chunks: AsyncIterator[bytes]
    length: int
    total: int
    closer: Callable[[], Awaitable[None]] = _nothing_to_close
    closed: bool = field(default=False, init=False)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.chunks

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self.closer()


class BlobStore(Protocol):
    async def get(self, key: str, window: ResolvedWindow | None = None) -> BlobBody: ...

    async def head(self, key: str) -> ObjectMetadata: ...
