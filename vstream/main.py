from __future__ import annotations

import logging
from contextlib import AsyncExitStack

import anyio
from fastapi import FastAPI, Request, Response

from vstream.api import router
from vstream.config import Config, get_config
from vstream.depends import bind
from vstream.errors import NotFound, UpstreamFailure
from vstream.metadata import MetadataBackend
from vstream.responses import error_response
from vstream.storage import BlobStore
from vstream.views import ViewCounter

logger = logging.getLogger(__name__)


async def not_found(request: Request, exc: Exception) -> Response:
    logger.info("%s %s: %s", request.method, request.url.path, exc)
    return error_response(404, "Not found")


async def upstream_failure(request: Request, exc: Exception) -> Response:
    logger.error("%s %s failed upstream", request.method, request.url.path, exc_info=exc)
    return error_response(500, str(exc) or "Upstream failure")


async def unhandled(request: Request, exc: Exception) -> Response:
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")


def make_app(
    blobs: BlobStore,
    metadata: MetadataBackend,
    views: ViewCounter,
    config: Config,
) -> FastAPI:
    app = FastAPI(title=config.service_name)
    app.include_router(router)
    app.add_exception_handler(NotFound, not_found)
    app.add_exception_handler(UpstreamFailure, upstream_failure)
    app.add_exception_handler(Exception, unhandled)
    bind(app, BlobStore, blobs)
    bind(app, MetadataBackend, metadata)
    bind(app, ViewCounter, views)
    bind(app, Config, config)
    return app


async def main() -> None:
    import uvicorn

    from vstream.metadata.memory import MemoryMetadataBackend
    from vstream.metadata.redis import RedisMetadataBackend
    from vstream.storage.memory import InMemoryBackend
    from vstream.storage.s3 import S3Storage

    config = get_config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    async with AsyncExitStack() as stack:
        metadata: MetadataBackend
        if config.metadata == "memory":
            metadata = MemoryMetadataBackend()
        else:
            metadata = await stack.enter_async_context(RedisMetadataBackend.connect(config.redis_url))
        blobs: BlobStore
        if config.storage == "memory":
            blobs = InMemoryBackend()
        else:
            blobs = await stack.enter_async_context(
                S3Storage.connect(
                    bucket=config.s3_bucket,
                    access_key_id=config.s3_access_key_id,
                    access_key_secret=config.s3_access_key_secret,
                    region=config.s3_region,
                    endpoint=config.s3_endpoint,
                )
            )
        # entered last so pending view increments finish before the stores close
        views = await stack.enter_async_context(
            ViewCounter.running(metadata, max_pending=config.view_queue_size, workers=config.view_workers)
        )
        app = make_app(blobs, metadata, views, config)

        server = uvicorn.Server(uvicorn.Config(app, host=config.host, port=config.port, log_config=None))
        await server.serve()


if __name__ == "__main__":
    anyio.run(main)
