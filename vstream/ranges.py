"""Parsing of `Range` headers and resolution against an object's size.

Only the single-range forms ``bytes=<start>-<end>`` and ``bytes=<start>-``
are understood. Everything else is malformed and gets rejected with a 416
instead of falling back to the full body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

# 8 MiB per response for open ranges like `bytes=100-`
DEFAULT_OPEN_RANGE_CHUNK = 8 * 1024 * 1024

_RANGE_RE = re.compile(r"bytes=([0-9]+)-([0-9]*)", re.IGNORECASE)


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class FromTo:
    start: int
    end: int


@dataclass(frozen=True)
class FromOpen:
    start: int


@dataclass(frozen=True)
class Malformed:
    raw: str


RangeSpec = Union[Absent, FromTo, FromOpen, Malformed]


def parse_range(header: str | None) -> RangeSpec:
    if header is None:
        return Absent()
    match = _RANGE_RE.fullmatch(header)
    if match is None:
        return Malformed(header)
    try:
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else None
    except ValueError:
        # more digits than int() will convert
        return Malformed(header)
    if end is None:
        return FromOpen(start)
    if end < start:
        return Malformed(header)
    return FromTo(start, end)


@dataclass(frozen=True)
class ResolvedWindow:
    offset: int
    length: int
    total_size: int

    def __post_init__(self) -> None:
        if not (
            0 <= self.offset < self.total_size
            and self.length > 0
            and self.offset + self.length <= self.total_size
        ):
            raise ValueError(f"invalid window {self!r}")

    @property
    def last(self) -> int:
        # inclusive, as it appears in Content-Range
        return self.offset + self.length - 1


@dataclass(frozen=True)
class FullBody:
    pass


@dataclass(frozen=True)
class PartialBody:
    window: ResolvedWindow


@dataclass(frozen=True)
class Unsatisfiable:
    total_size: int


Outcome = Union[FullBody, PartialBody, Unsatisfiable]


def resolve_window(
    spec: RangeSpec,
    total_size: int,
    open_range_chunk: int | None = DEFAULT_OPEN_RANGE_CHUNK,
) -> Outcome:
    """Turn a requested range into the concrete window to serve.

    `open_range_chunk` caps how much of the tail an open range gets in one
    response; `None` serves the whole tail.
    """
    if isinstance(spec, Absent):
        return FullBody()
    if isinstance(spec, Malformed):
        return Unsatisfiable(total_size)
    if spec.start >= total_size:
        return Unsatisfiable(total_size)
    if isinstance(spec, FromTo):
        end = min(spec.end, total_size - 1)
    elif open_range_chunk is None:
        end = total_size - 1
    else:
        end = min(spec.start + open_range_chunk - 1, total_size - 1)
    return PartialBody(
        ResolvedWindow(offset=spec.start, length=end - spec.start + 1, total_size=total_size)
    )
