"""Bard's Quill - split long text into chat-sized parts."""

from .core.config import AppSettings, load_settings
from .core.exceptions import ConfigError, InvalidConfiguration
from .core.markup import MarkupRule, Span, render_spans, scan_markup_state
from .core.segmenter import Segment, SegmenterConfig, segment, segment_cached

__all__ = [
    "AppSettings",
    "ConfigError",
    "InvalidConfiguration",
    "MarkupRule",
    "Segment",
    "SegmenterConfig",
    "Span",
    "load_settings",
    "render_spans",
    "scan_markup_state",
    "segment",
    "segment_cached",
]
