"""Split text into bounded-length parts on whitespace boundaries.

Every part but the first gets ``prefix`` and every part but the last gets
``suffix``.  Each part records the markup rule that was open when it began
so a renderer can resume colouring even though the opening marker sits in
an earlier part.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Optional

from .exceptions import InvalidConfiguration
from .logging_utils import log_event
from .markup import MarkupRule, MarkupState, scan_markup_state

logger = logging.getLogger("bards_quill.core.segmenter")

_WHITESPACE_RE = re.compile(r"(\s+)")
SEGMENT_CACHE_SIZE = 128


@dataclass(frozen=True)
class SegmenterConfig:
    """Inputs that shape a split.

    Kept frozen and hashable so it can be part of a cache key.
    """

    max_length: int
    prefix: str = ""
    suffix: str = ""
    rules: tuple[MarkupRule, ...] = ()

    def __post_init__(self) -> None:
        validate_max_length(self.max_length)
        if not isinstance(self.rules, tuple):
            object.__setattr__(self, "rules", tuple(self.rules))

    def split_point(self, prefix: str) -> int:
        """Characters a forced split keeps when ``prefix`` applies (at least 1)."""
        return max(1, self.max_length - len(prefix) - len(self.suffix))


@dataclass(frozen=True)
class Segment:
    id: str
    raw_content: str
    decorated_content: str
    start_offset: int
    end_offset: int
    ordinal: int
    total: int
    carried_markup_id: Optional[str] = None
    forced: bool = False

    @property
    def length(self) -> int:
        return len(self.decorated_content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "raw_content": self.raw_content,
            "decorated_content": self.decorated_content,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "ordinal": self.ordinal,
            "total": self.total,
            "carried_markup_id": self.carried_markup_id,
            "length": self.length,
            "forced": self.forced,
        }


def validate_max_length(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(
            f"max_length must be an integer, got {type(value).__name__}"
        )
    if value < 1:
        raise InvalidConfiguration(f"max_length must be >= 1, got {value}")
    return value


def tokenize(text: str) -> Iterator[str]:
    """Yield words and whitespace runs; joined they reproduce ``text``."""
    for token in _WHITESPACE_RE.split(text):
        if token:
            yield token


class _SegmentBuilder:
    def __init__(self, config: SegmenterConfig) -> None:
        self.config = config
        self.segments: list[Segment] = []
        self.parts: list[str] = []
        self.length = 0
        self.start_offset = 0
        # State at the start of the open segment, and at the scan position.
        self.carried_state: MarkupState = None
        self.state: MarkupState = None

    @property
    def prefix(self) -> str:
        return self.config.prefix if self.segments else ""

    def fits(self, token: str) -> bool:
        tentative = (
            len(self.prefix) + self.length + len(token) + len(self.config.suffix)
        )
        return tentative <= self.config.max_length

    def commit(self, token: str) -> None:
        self.state = scan_markup_state(token, self.state, self.config.rules)
        self.parts.append(token)
        self.length += len(token)

    def close(self, *, suffix: str) -> None:
        if not self.length:
            return
        self._emit("".join(self.parts), suffix=suffix, forced=False)
        self.parts = []
        self.length = 0
        self.carried_state = self.state

    def force_split(self, token: str) -> str:
        head = token[: self.config.split_point(self.prefix)]
        head_state = scan_markup_state(head, self.state, self.config.rules)
        self._emit(head, suffix=self.config.suffix, forced=True)
        self.carried_state = self.state = head_state
        return token[len(head) :]

    def _emit(self, raw: str, *, suffix: str, forced: bool) -> None:
        self.segments.append(
            Segment(
                id="",
                raw_content=raw,
                decorated_content=f"{self.prefix}{raw}{suffix}",
                start_offset=self.start_offset,
                end_offset=self.start_offset + len(raw),
                ordinal=0,
                total=0,
                carried_markup_id=self.carried_state,
                forced=forced,
            )
        )
        self.start_offset += len(raw)


def segment(text: str, config: SegmenterConfig) -> list[Segment]:
    """Split ``text`` into ordered parts according to ``config``.

    Raises InvalidConfiguration before doing any work when the configured
    maximum length is below 1; every other input is handled by policy.
    """
    validate_max_length(config.max_length)
    if not text:
        return []

    builder = _SegmentBuilder(config)
    for token in tokenize(text):
        while token:
            if builder.fits(token):
                builder.commit(token)
                break
            if builder.length:
                builder.close(suffix=config.suffix)
                continue
            # A single word wider than an empty part: cut it.
            token = builder.force_split(token)
    builder.close(suffix="")

    total = len(builder.segments)
    segments = [
        dataclasses.replace(
            item,
            id=f"seg-{ordinal}-{uuid.uuid4().hex[:8]}",
            ordinal=ordinal,
            total=total,
        )
        for ordinal, item in enumerate(builder.segments, 1)
    ]
    log_event(
        logger,
        logging.DEBUG,
        "segmenter.split",
        characters=len(text),
        parts=total,
        forced=sum(1 for item in segments if item.forced),
        max_length=config.max_length,
    )
    return segments


@lru_cache(maxsize=SEGMENT_CACHE_SIZE)
def segment_cached(text: str, config: SegmenterConfig) -> tuple[Segment, ...]:
    """Memoized ``segment`` for callers that re-split on every keystroke."""
    return tuple(segment(text, config))
