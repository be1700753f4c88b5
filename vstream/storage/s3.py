from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from aioaws.s3 import S3Client, S3Config
from httpx import AsyncClient

from vstream.ranges import ResolvedWindow
from vstream.storage import BlobBody, BlobStore, ObjectMetadata, ObjectNotFound, UpstreamFailure


def _total_from_content_range(value: str) -> int:
    # "bytes 0-99/1000"
    return int(value.rsplit("/", 1)[1])


@dataclass
class S3Storage(BlobStore):
    client: AsyncClient
    bucket: str
    access_key_id: str
    access_key_secret: str
    region: str
    endpoint: str | None = None

    @classmethod
    @asynccontextmanager
    async def connect(
        cls,
        bucket: str,
        access_key_id: str,
        access_key_secret: str,
        region: str,
        endpoint: str | None = None,
    ) -> AsyncIterator[S3Storage]:
        async with AsyncClient() as client:
            yield cls(client, bucket, access_key_id, access_key_secret, region, endpoint)

    def _get_client(self) -> S3Client:
        return S3Client(
            self.client,
            S3Config(
                aws_access_key=self.access_key_id,
                aws_secret_key=self.access_key_secret,
                aws_region=self.region,
                aws_s3_bucket=self.bucket,
                aws_host=self.endpoint,
            ),
        )

    async def _open(self, key: str, headers: dict[str, str]) -> httpx.Response:
        url = self._get_client().signed_download_url(key, method="GET")
        request = self.client.build_request("GET", url, headers=headers)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"fetching {key!r} failed: {e}") from e
        await self._check_status(key, response)
        return response

    async def _check_status(self, key: str, response: httpx.Response) -> None:
        if response.status_code == 404:
            await response.aclose()
            raise ObjectNotFound(key)
        if response.is_error:
            await response.aclose()
            raise UpstreamFailure(f"fetching {key!r} failed with status {response.status_code}")

    async def _chunks(self, key: str, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"reading {key!r} failed: {e}") from e

    async def get(self, key: str, window: ResolvedWindow | None = None) -> BlobBody:
        headers: dict[str, str] = {}
        if window is not None:
            headers["Range"] = f"bytes={window.offset}-{window.last}"
        response = await self._open(key, headers)
        try:
            length = int(response.headers["Content-Length"])
            if window is None:
                total = length
            elif response.status_code == 206:
                total = _total_from_content_range(response.headers["Content-Range"])
            else:
                raise UpstreamFailure(f"store ignored range request for {key!r}")
        except (KeyError, ValueError, IndexError) as e:
            await response.aclose()
            raise UpstreamFailure(f"unusable response headers for {key!r}") from e
        except UpstreamFailure:
            await response.aclose()
            raise
        return BlobBody(
            chunks=self._chunks(key, response),
            length=length,
            total=total,
            closer=response.aclose,
        )

    async def head(self, key: str) -> ObjectMetadata:
        url = self._get_client().signed_download_url(key, method="HEAD")
        try:
            response = await self.client.head(url)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"fetching {key!r} failed: {e}") from e
        await self._check_status(key, response)
        try:
            return ObjectMetadata(total=int(response.headers["Content-Length"]))
        except (KeyError, ValueError) as e:
            raise UpstreamFailure(f"unusable response headers for {key!r}") from e
