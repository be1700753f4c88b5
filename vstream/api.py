from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Header, Response

from vstream.config import Config
from vstream.depends import Injected
from vstream.errors import VideoNotFound
from vstream.metadata import MetadataBackend
from vstream.ranges import FullBody, PartialBody, Unsatisfiable, parse_range, resolve_window
from vstream.responses import body_response, unsatisfiable_response
from vstream.storage import BlobStore
from vstream.views import ViewCounter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health(config: Injected[Config]) -> dict[str, object]:
    return {"ok": True, "service": config.service_name}


@router.get("/api/videos/{video_id}/stream")
@router.get("/v/{video_id}")
async def stream_video(
    video_id: str,
    metadata: Injected[MetadataBackend],
    blobs: Injected[BlobStore],
    views: Injected[ViewCounter],
    config: Injected[Config],
    range: Annotated[str | None, Header()] = None,
) -> Response:
    """Serve a stored video, or the part of it named by the Range header."""
    record = await metadata.get_video(video_id)
    if record is None:
        raise VideoNotFound(video_id)
    content_type = record.content_type or config.default_content_type

    if range is None:
        blob = await blobs.get(record.storage_key)
        # only plain full fetches count; seeking issues many ranged ones
        views.record(video_id)
        logger.debug("serving %s in full (%d bytes)", video_id, blob.total)
        return body_response(
            FullBody(),
            blob,
            content_type=content_type,
            cache_control=config.cache_control,
        )

    # the store is authoritative for the size, not the metadata
    head = await blobs.head(record.storage_key)
    outcome = resolve_window(parse_range(range), head.total, config.open_range_chunk)
    if isinstance(outcome, Unsatisfiable):
        logger.debug("rejecting range %r for %s (%d bytes)", range, video_id, head.total)
        return unsatisfiable_response(outcome)
    if not isinstance(outcome, PartialBody):
        raise TypeError(f"a Range header resolved to {outcome!r}")

    blob = await blobs.get(record.storage_key, outcome.window)
    logger.debug("serving %s bytes %d-%d", video_id, outcome.window.offset, outcome.window.last)
    return body_response(
        outcome,
        blob,
        content_type=content_type,
        cache_control=config.cache_control,
    )
