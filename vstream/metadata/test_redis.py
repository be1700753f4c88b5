from typing import Any

import anyio
import pytest
from redis.exceptions import ConnectionError

from vstream.errors import UpstreamFailure
from vstream.metadata import VideoRecord
from vstream.metadata.redis import RedisMetadataBackend


class FakeRedis:
    """The hash commands the backend uses, with redis' bytes-in-bytes-out behaviour."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[bytes, bytes]] = {}

    @staticmethod
    def _b(value: Any) -> bytes:
        return value if isinstance(value, bytes) else str(value).encode()

    async def hgetall(self, key: str) -> dict[bytes, bytes]:
        return dict(self.hashes.get(key, {}))

    async def hget(self, key: str, field: str) -> bytes | None:
        return self.hashes.get(key, {}).get(self._b(field))

    async def hset(self, key: str, mapping: dict[str, Any]) -> int:
        h = self.hashes.setdefault(key, {})
        for field, value in mapping.items():
            h[self._b(field)] = self._b(value)
        return len(mapping)

    async def hsetnx(self, key: str, field: str, value: Any) -> int:
        h = self.hashes.setdefault(key, {})
        if self._b(field) in h:
            return 0
        h[self._b(field)] = self._b(value)
        return 1

    async def hincrby(self, key: str, field: str, amount: int) -> int:
        h = self.hashes.setdefault(key, {})
        value = int(h.get(self._b(field), b"0")) + amount
        h[self._b(field)] = self._b(value)
        return value


class DownRedis:
    def __getattr__(self, name: str) -> Any:
        async def fail(*args: Any, **kwargs: Any) -> Any:
            raise ConnectionError("Connection refused")

        return fail


@pytest.fixture
def backend() -> RedisMetadataBackend:
    return RedisMetadataBackend(redis=FakeRedis())  # type: ignore[arg-type]


@pytest.mark.anyio
async def test_round_trip(backend: RedisMetadataBackend) -> None:
    await backend.put_video(VideoRecord(id="abc", storage_key="videos/abc.mp4", content_type="video/mp4"))
    record = await backend.get_video("abc")
    assert record == VideoRecord(id="abc", storage_key="videos/abc.mp4", content_type="video/mp4")
    assert await backend.get_views("abc") == 0
    assert await backend.get_video("nope") is None


@pytest.mark.anyio
async def test_put_keeps_existing_views(backend: RedisMetadataBackend) -> None:
    record = VideoRecord(id="abc", storage_key="videos/abc.mp4")
    await backend.put_video(record)
    await backend.increment_views("abc")
    await backend.put_video(record)
    assert await backend.get_views("abc") == 1


@pytest.mark.anyio
async def test_concurrent_increments(backend: RedisMetadataBackend) -> None:
    await backend.put_video(VideoRecord(id="abc", storage_key="videos/abc.mp4"))
    async with anyio.create_task_group() as tg:
        for _ in range(25):
            tg.start_soon(backend.increment_views, "abc")
    assert await backend.get_views("abc") == 25


@pytest.mark.anyio
async def test_errors_become_upstream_failures() -> None:
    backend = RedisMetadataBackend(redis=DownRedis())  # type: ignore[arg-type]
    with pytest.raises(UpstreamFailure):
        await backend.get_video("abc")
    with pytest.raises(UpstreamFailure):
        await backend.increment_views("abc")
    with pytest.raises(UpstreamFailure):
        await backend.put_video(VideoRecord(id="abc", storage_key="k"))
    with pytest.raises(UpstreamFailure):
        await backend.get_views("abc")
