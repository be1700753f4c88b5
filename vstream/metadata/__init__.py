from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class VideoRecord:
    id: str
    storage_key: str
    content_type: str = ""


class MetadataBackend(Protocol):
    async def get_video(self, video_id: str) -> VideoRecord | None: ...

    async def put_video(self, record: VideoRecord) -> None: ...

    async def increment_views(self, video_id: str) -> None:
        """Add one to the stored view count, atomically on the store's side."""
        ...

    async def get_views(self, video_id: str) -> int: ...
