from __future__ import annotations

from collections.abc import Mapping

import anyio
from fastapi import Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.types import Receive, Scope, Send

from vstream.ranges import FullBody, PartialBody, ResolvedWindow, Unsatisfiable
from vstream.storage import BlobBody


def content_range(window: ResolvedWindow) -> str:
    return f"bytes {window.offset}-{window.last}/{window.total_size}"


def unsatisfied_range(total_size: int) -> str:
    return f"bytes */{total_size}"


class BlobStreamingResponse(StreamingResponse):
    """Streams a `BlobBody` and closes it exactly once, however the response
    ends (finished, failed, or the client went away)."""

    def __init__(
        self,
        blob: BlobBody,
        status_code: int,
        headers: Mapping[str, str],
        media_type: str,
    ) -> None:
        super().__init__(blob, status_code=status_code, headers=headers, media_type=media_type)
        self.blob = blob

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self.blob.aclose()


def body_response(
    outcome: FullBody | PartialBody,
    blob: BlobBody,
    *,
    content_type: str,
    cache_control: str,
) -> BlobStreamingResponse:
    headers = {
        "Accept-Ranges": "bytes",
        "Cache-Control": cache_control,
    }
    if isinstance(outcome, PartialBody):
        headers["Content-Range"] = content_range(outcome.window)
        headers["Content-Length"] = str(outcome.window.length)
        status_code = 206
    else:
        headers["Content-Length"] = str(blob.total)
        status_code = 200
    return BlobStreamingResponse(blob, status_code=status_code, headers=headers, media_type=content_type)


def unsatisfiable_response(outcome: Unsatisfiable) -> Response:
    return Response(
        status_code=416,
        headers={"Content-Range": unsatisfied_range(outcome.total_size)},
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)
