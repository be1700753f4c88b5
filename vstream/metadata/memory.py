from dataclasses import dataclass, field

from vstream.metadata import MetadataBackend, VideoRecord


@dataclass
class MemoryMetadataBackend(MetadataBackend):
    videos: dict[str, VideoRecord] = field(default_factory=dict)
    views: dict[str, int] = field(default_factory=dict)

    async def get_video(self, video_id: str) -> VideoRecord | None:
        return self.videos.get(video_id)

    async def put_video(self, record: VideoRecord) -> None:
        self.videos[record.id] = record
        self.views.setdefault(record.id, 0)

    async def increment_views(self, video_id: str) -> None:
        # no await in between, so this cannot interleave with another increment
        self.views[video_id] = self.views.get(video_id, 0) + 1

    async def get_views(self, video_id: str) -> int:
        return self.views.get(video_id, 0)
