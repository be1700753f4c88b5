class StreamError(Exception):
    """Base class for errors raised while serving a video."""


class NotFound(StreamError):
    pass


class VideoNotFound(NotFound):
    def __init__(self, video_id: str) -> None:
        super().__init__(f"unknown video {video_id!r}")
        self.video_id = video_id


class ObjectNotFound(NotFound):
    def __init__(self, key: str) -> None:
        super().__init__(f"no object stored at {key!r}")
        self.key = key


class UpstreamFailure(StreamError):
    """The blob store or metadata store failed; never retried here."""
