from typing import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from vstream.config import Config
from vstream.main import make_app
from vstream.metadata import VideoRecord
from vstream.metadata.memory import MemoryMetadataBackend
from vstream.storage.memory import InMemoryBackend
from vstream.views import ViewCounter

VIDEO = (bytes(range(256)) * 4)[:1000]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def config() -> Config:
    return Config(
        service_name="vstream-test",
        open_range_chunk=8 * 1024 * 1024,
        cache_control="public, max-age=3600",
        default_content_type="video/mp4",
    )


@pytest.fixture
def fs() -> InMemoryBackend:
    fs = InMemoryBackend(chunk_size=128)
    fs.put("videos/abc.mp4", VIDEO)
    fs.put("videos/empty.mp4", b"")
    return fs


@pytest.fixture
async def metadata() -> MemoryMetadataBackend:
    metadata = MemoryMetadataBackend()
    await metadata.put_video(VideoRecord(id="abc", storage_key="videos/abc.mp4", content_type="video/webm"))
    await metadata.put_video(VideoRecord(id="empty", storage_key="videos/empty.mp4"))
    await metadata.put_video(VideoRecord(id="orphan", storage_key="videos/gone.mp4"))
    return metadata


@pytest.fixture
async def views(metadata: MemoryMetadataBackend) -> AsyncIterator[ViewCounter]:
    async with ViewCounter.running(metadata) as views:
        yield views


@pytest.fixture
async def client(
    fs: InMemoryBackend,
    metadata: MemoryMetadataBackend,
    views: ViewCounter,
    config: Config,
) -> AsyncIterator[AsyncClient]:
    app = make_app(fs, metadata, views, config)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
