from __future__ import annotations

import dataclasses
import logging
import os

from vstream.ranges import DEFAULT_OPEN_RANGE_CHUNK

logger = logging.getLogger(__name__)


def _open_range_chunk() -> int | None:
    raw = os.getenv("VSTREAM_OPEN_RANGE_CHUNK", str(DEFAULT_OPEN_RANGE_CHUNK))
    chunk = int(raw or "0")
    # 0 serves the whole tail of an open range
    return chunk if chunk > 0 else None


@dataclasses.dataclass
class Config:
    service_name: str = dataclasses.field(default_factory=lambda: os.getenv("VSTREAM_SERVICE_NAME", "vstream"))
    host: str = dataclasses.field(default_factory=lambda: os.getenv("VSTREAM_HOST", "0.0.0.0"))
    port: int = dataclasses.field(default_factory=lambda: int(os.getenv("VSTREAM_PORT", "8000")))
    log_level: str = dataclasses.field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    open_range_chunk: int | None = dataclasses.field(default_factory=_open_range_chunk)
    cache_control: str = dataclasses.field(
        default_factory=lambda: os.getenv("VSTREAM_CACHE_CONTROL", "public, max-age=3600")
    )
    default_content_type: str = dataclasses.field(
        default_factory=lambda: os.getenv("VSTREAM_DEFAULT_CONTENT_TYPE", "video/mp4")
    )
    view_queue_size: int = dataclasses.field(default_factory=lambda: int(os.getenv("VSTREAM_VIEW_QUEUE_SIZE", "1024")))
    view_workers: int = dataclasses.field(default_factory=lambda: int(os.getenv("VSTREAM_VIEW_WORKERS", "4")))

    # "memory" or "s3"
    storage: str = dataclasses.field(default_factory=lambda: os.getenv("VSTREAM_STORAGE", "s3"))
    s3_bucket: str = dataclasses.field(default_factory=lambda: os.getenv("S3_BUCKET", "videos"))
    s3_access_key_id: str = dataclasses.field(default_factory=lambda: os.getenv("S3_ACCESS_KEY_ID", ""))
    s3_access_key_secret: str = dataclasses.field(default_factory=lambda: os.getenv("S3_ACCESS_KEY_SECRET", ""))
    s3_region: str = dataclasses.field(default_factory=lambda: os.getenv("S3_REGION", "us-east-1"))
    s3_endpoint: str | None = dataclasses.field(default_factory=lambda: os.getenv("S3_ENDPOINT") or None)

    # "memory" or "redis"
    metadata: str = dataclasses.field(default_factory=lambda: os.getenv("VSTREAM_METADATA", "redis"))
    redis_url: str = dataclasses.field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))


_config: Config | None = None


def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config()
        logger.info(
            "config loaded: storage=%s metadata=%s open_range_chunk=%s",
            _config.storage,
            _config.metadata,
            _config.open_range_chunk,
        )
    return _config
