from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from redis.asyncio import BlockingConnectionPool, Redis
from redis.exceptions import RedisError

from vstream.errors import UpstreamFailure
from vstream.metadata import MetadataBackend, VideoRecord


def _video_key(video_id: str) -> str:
    return f"video:{video_id}"


@dataclass
class RedisMetadataBackend(MetadataBackend):
    """Videos stored as hashes `video:<id>` with `storage_key`, `content_type`
    and `views` fields."""

    redis: Redis

    @classmethod
    @asynccontextmanager
    async def connect(cls, dsn: str) -> AsyncIterator[RedisMetadataBackend]:
        pool = BlockingConnectionPool.from_url(dsn)  # type: ignore
        try:
            yield cls(Redis(connection_pool=pool))
        finally:
            await pool.aclose()

    async def get_video(self, video_id: str) -> VideoRecord | None:
        try:
            fields = await self.redis.hgetall(_video_key(video_id))  # type: ignore
        except RedisError as e:
            raise UpstreamFailure(f"looking up video {video_id!r} failed: {e}") from e
        if not fields or b"storage_key" not in fields:
            return None
        return VideoRecord(
            id=video_id,
            storage_key=fields[b"storage_key"].decode(),
            content_type=fields.get(b"content_type", b"").decode(),
        )

    async def put_video(self, record: VideoRecord) -> None:
        try:
            await self.redis.hset(  # type: ignore
                _video_key(record.id),
                mapping={"storage_key": record.storage_key, "content_type": record.content_type},
            )
            await self.redis.hsetnx(_video_key(record.id), "views", 0)  # type: ignore
        except RedisError as e:
            raise UpstreamFailure(f"storing video {record.id!r} failed: {e}") from e

    async def increment_views(self, video_id: str) -> None:
        try:
            await self.redis.hincrby(_video_key(video_id), "views", 1)  # type: ignore
        except RedisError as e:
            raise UpstreamFailure(f"counting a view of {video_id!r} failed: {e}") from e

    async def get_views(self, video_id: str) -> int:
        try:
            views = await self.redis.hget(_video_key(video_id), "views")  # type: ignore
        except RedisError as e:
            raise UpstreamFailure(f"reading views of {video_id!r} failed: {e}") from e
        return int(views) if views is not None else 0
