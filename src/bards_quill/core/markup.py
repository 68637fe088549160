"""Paired-delimiter markup scanning.

A markup rule is a start/end marker pair (for example ``"`` ... ``"`` for
quoted speech).  Scanning walks a fragment one character at a time and
tracks which rule, if any, is open.  The same walk is used twice: by the
segmenter, which only needs the state after a fragment, and by renderers,
which need the coloured runs.

Rules are matched in declaration order and the first start marker that
matches wins, so ``*`` declared before ``**`` will always claim ``**``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional, Sequence

MarkupState = Optional[str]


@dataclass(frozen=True)
class MarkupRule:
    id: str
    start: str
    end: str
    color: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MarkupRule":
        start = raw.get("start", raw.get("startChar", ""))
        end = raw.get("end", raw.get("endChar", ""))
        return cls(
            id=str(raw.get("id", "")),
            start="" if start is None else str(start),
            end="" if end is None else str(end),
            color=str(raw.get("color") or ""),
            name=str(raw.get("name") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "color": self.color,
        }


@dataclass(frozen=True)
class Span:
    """A run of text rendered with one colour (``None`` when unstyled)."""

    text: str
    color: Optional[str] = None
    rule_id: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"text": self.text, "color": self.color, "rule_id": self.rule_id}


@dataclass(frozen=True)
class _RuleIndex:
    by_id: Mapping[str, MarkupRule]
    # First character of the start marker -> rules in declaration order.
    by_first_char: Mapping[str, tuple[MarkupRule, ...]]

    def match_start(self, fragment: str, pos: int) -> Optional[MarkupRule]:
        for rule in self.by_first_char.get(fragment[pos], ()):
            if fragment.startswith(rule.start, pos):
                return rule
        return None

    def end_marker(self, state: str) -> str:
        rule = self.by_id.get(state)
        return rule.end if rule is not None else ""


@lru_cache(maxsize=64)
def _index_rules(rules: tuple[MarkupRule, ...]) -> _RuleIndex:
    by_id: dict[str, MarkupRule] = {}
    by_first_char: dict[str, list[MarkupRule]] = {}
    for rule in rules:
        # find-first semantics: a duplicated id resolves to its first rule
        by_id.setdefault(rule.id, rule)
        if not rule.start:
            continue
        by_first_char.setdefault(rule.start[0], []).append(rule)
    return _RuleIndex(
        by_id=by_id,
        by_first_char={key: tuple(value) for key, value in by_first_char.items()},
    )


def _as_tuple(rules: Iterable[MarkupRule]) -> tuple[MarkupRule, ...]:
    return rules if isinstance(rules, tuple) else tuple(rules)


def scan_markup_state(
    fragment: str,
    initial_state: MarkupState,
    rules: Sequence[MarkupRule],
) -> MarkupState:
    """Return the markup state after scanning ``fragment`` from ``initial_state``."""
    if not fragment:
        return initial_state
    index = _index_rules(_as_tuple(rules))
    state = initial_state
    pos = 0
    length = len(fragment)
    while pos < length:
        if state is not None:
            end = index.end_marker(state)
            if end and fragment.startswith(end, pos):
                pos += len(end)
                state = None
                continue
        else:
            rule = index.match_start(fragment, pos)
            if rule is not None:
                pos += len(rule.start)
                state = rule.id
                continue
        pos += 1
    return state


def render_spans(
    fragment: str,
    initial_state: MarkupState,
    rules: Sequence[MarkupRule],
) -> list[Span]:
    """Split ``fragment`` into coloured runs.

    Markers stay inside the run they open or close.  A rule still open at
    the end of the fragment colours the trailing run; an ``initial_state``
    naming an unknown rule never closes and renders uncoloured.
    """
    if not fragment:
        return []
    index = _index_rules(_as_tuple(rules))
    spans: list[Span] = []
    state = initial_state
    buffer: list[str] = []

    def _flush(rule_id: MarkupState) -> None:
        if not buffer:
            return
        rule = index.by_id.get(rule_id) if rule_id is not None else None
        color = (rule.color or None) if rule is not None else None
        spans.append(Span(text="".join(buffer), color=color, rule_id=rule_id))
        buffer.clear()

    pos = 0
    length = len(fragment)
    while pos < length:
        if state is not None:
            end = index.end_marker(state)
            if end and fragment.startswith(end, pos):
                buffer.append(end)
                _flush(state)
                state = None
                pos += len(end)
                continue
        else:
            rule = index.match_start(fragment, pos)
            if rule is not None:
                _flush(None)
                buffer.append(rule.start)
                state = rule.id
                pos += len(rule.start)
                continue
        buffer.append(fragment[pos])
        pos += 1
    _flush(state)
    return spans
