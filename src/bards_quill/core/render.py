"""Renderer-facing helpers shared by the CLI and the web API."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .config import AppSettings
from .markup import MarkupRule, Span, render_spans
from .segmenter import Segment, segment_cached


def segment_spans(item: Segment, rules: Sequence[MarkupRule]) -> list[Span]:
    """Coloured runs for one part, resuming the rule carried into it."""
    return render_spans(item.raw_content, item.carried_markup_id, rules)


def split_payload(
    text: str,
    settings: AppSettings,
    *,
    with_spans: bool = False,
) -> dict[str, Any]:
    segments = segment_cached(text, settings.segmenter_config())
    rows: list[dict[str, Any]] = []
    for item in segments:
        row = item.to_dict()
        if with_spans:
            row["spans"] = [
                span.to_dict() for span in segment_spans(item, settings.highlight_rules)
            ]
        rows.append(row)
    return {"segments": rows, "characters": len(text), "parts": len(segments)}


def hex_to_rgb(color: Optional[str]) -> Optional[tuple[int, int, int]]:
    if not color:
        return None
    value = color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        return None
