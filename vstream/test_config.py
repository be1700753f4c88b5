import pytest

from vstream.config import Config
from vstream.ranges import DEFAULT_OPEN_RANGE_CHUNK


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VSTREAM_OPEN_RANGE_CHUNK", "VSTREAM_CACHE_CONTROL", "VSTREAM_STORAGE", "S3_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    config = Config()
    assert config.open_range_chunk == DEFAULT_OPEN_RANGE_CHUNK
    assert config.cache_control == "public, max-age=3600"
    assert config.default_content_type == "video/mp4"
    assert config.storage == "s3"
    assert config.s3_endpoint is None


@pytest.mark.parametrize("raw,expected", [("1024", 1024), ("0", None), ("", None)])
def test_open_range_chunk_from_env(monkeypatch: pytest.MonkeyPatch, raw: str, expected: int | None) -> None:
    monkeypatch.setenv("VSTREAM_OPEN_RANGE_CHUNK", raw)
    assert Config().open_range_chunk == expected


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VSTREAM_PORT", "9000")
    monkeypatch.setenv("VSTREAM_METADATA", "memory")
    monkeypatch.setenv("S3_ENDPOINT", "http://minio:9000")
    config = Config()
    assert config.port == 9000
    assert config.metadata == "memory"
    assert config.s3_endpoint == "http://minio:9000"
