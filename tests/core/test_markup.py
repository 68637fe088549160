from __future__ import annotations

from bards_quill.core.markup import MarkupRule, Span, render_spans, scan_markup_state

STAR = MarkupRule(id="star", start="*", end="*", color="#e11d48")
DOUBLE_STAR = MarkupRule(id="double", start="**", end="**", color="#16a34a")
WIKI = MarkupRule(id="wiki", start="[[", end="]]", color="#0ea5e9")


class TestScanMarkupState:
    def test_empty_fragment_returns_initial_state(self, quote_rules) -> None:
        assert scan_markup_state("", None, quote_rules) is None
        assert scan_markup_state("", "q", quote_rules) == "q"

    def test_open_span_stays_open(self, quote_rules) -> None:
        assert scan_markup_state('He said "hello', None, quote_rules) == "q"

    def test_closed_span_returns_to_none(self, quote_rules) -> None:
        assert scan_markup_state('He said "hello" twice', None, quote_rules) is None

    def test_resumes_from_carried_state(self, quote_rules) -> None:
        assert scan_markup_state('world" loudly', "q", quote_rules) is None
        assert scan_markup_state("world loudly", "q", quote_rules) == "q"

    def test_multi_character_markers(self) -> None:
        assert scan_markup_state("a [[b]] c", None, (WIKI,)) is None
        assert scan_markup_state("a [[b", None, (WIKI,)) == "wiki"
        # A lone bracket neither opens nor closes.
        assert scan_markup_state("a [b] c", None, (WIKI,)) is None
        assert scan_markup_state("b] c", "wiki", (WIKI,)) == "wiki"

    def test_no_rules_never_opens(self) -> None:
        assert scan_markup_state('"quoted"', None, ()) is None

    def test_empty_end_marker_never_closes(self) -> None:
        rule = MarkupRule(id="ooc", start="((", end="")
        assert scan_markup_state("(( aside )) more", None, (rule,)) == "ooc"

    def test_empty_start_marker_is_ignored(self) -> None:
        rule = MarkupRule(id="blank", start="", end='"')
        assert scan_markup_state('say "hi"', None, (rule,)) is None

    def test_unknown_state_never_closes(self, quote_rules) -> None:
        assert scan_markup_state('abc "', "gone", quote_rules) == "gone"

    def test_first_declared_rule_wins_over_longer_marker(self) -> None:
        # `*` declared first claims the `**` opener, then immediately closes.
        assert scan_markup_state("**bold", None, (STAR, DOUBLE_STAR)) is None
        # With `**` first the same text leaves the double rule open.
        assert scan_markup_state("**bold", None, (DOUBLE_STAR, STAR)) == "double"

    def test_end_marker_checked_before_new_start(self) -> None:
        rules = (
            MarkupRule(id="q", start='"', end='"'),
            MarkupRule(id="star", start="*", end="*"),
        )
        # Inside a quote, `*` is plain text.
        assert scan_markup_state('"a *b', None, rules) == "q"

    def test_accepts_list_of_rules(self, quote_rules) -> None:
        assert scan_markup_state('"x', None, list(quote_rules)) == "q"


class TestRenderSpans:
    def test_empty_fragment(self, quote_rules) -> None:
        assert render_spans("", None, quote_rules) == []

    def test_plain_text_is_one_uncoloured_span(self, quote_rules) -> None:
        assert render_spans("no quotes", None, quote_rules) == [Span("no quotes")]

    def test_markers_belong_to_coloured_span(self, quote_rules) -> None:
        spans = render_spans('say "hi" now', None, quote_rules)
        assert spans == [
            Span("say "),
            Span('"hi"', color="#2563eb", rule_id="q"),
            Span(" now"),
        ]

    def test_resumes_colour_from_carried_state(self, quote_rules) -> None:
        spans = render_spans('world" loudly', "q", quote_rules)
        assert spans == [
            Span('world"', color="#2563eb", rule_id="q"),
            Span(" loudly"),
        ]

    def test_unclosed_span_colours_tail(self, quote_rules) -> None:
        assert render_spans('a "open', None, quote_rules) == [
            Span("a "),
            Span('"open', color="#2563eb", rule_id="q"),
        ]

    def test_spans_rebuild_fragment(self) -> None:
        fragment = "*wave* [[link]] and **more"
        spans = render_spans(fragment, None, (STAR, WIKI))
        assert "".join(span.text for span in spans) == fragment

    def test_rule_without_colour_renders_none(self) -> None:
        rule = MarkupRule(id="plain", start="<", end=">")
        assert render_spans("<x>", None, (rule,)) == [Span("<x>", rule_id="plain")]

    def test_span_to_dict(self) -> None:
        span = Span('"x"', color="#fff", rule_id="q")
        assert span.to_dict() == {"text": '"x"', "color": "#fff", "rule_id": "q"}


def test_rule_from_browser_dict() -> None:
    rule = MarkupRule.from_dict(
        {
            "id": "1",
            "name": "Speech",
            "startChar": '"',
            "endChar": '"',
            "color": "#2563eb",
        }
    )
    expected = MarkupRule(id="1", start='"', end='"', color="#2563eb", name="Speech")
    assert rule == expected
    assert MarkupRule.from_dict(rule.to_dict()) == rule
