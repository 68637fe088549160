from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from ....core.exceptions import BardsQuillError
from ....core.logging_utils import log_event
from ....core.render import hex_to_rgb, segment_spans, split_payload
from ....core.segmenter import segment_cached
from .utils import (
    build_store,
    error_message,
    raise_exit,
    read_input_text,
    resolve_settings,
)

logger = logging.getLogger("bards_quill.cli")


def _part_header(ordinal: int, total: int, length: int) -> str:
    return f"--- Part {ordinal}/{total} ({length} chars) ---"


def register_split_commands(app: typer.Typer) -> None:
    @app.command("split")
    def split_cmd(
        file: Optional[Path] = typer.Argument(
            None, help="Text file to split (stdin when omitted or '-')"
        ),
        max_length: Optional[int] = typer.Option(
            None, "--max-length", "-n", help="Maximum characters per part"
        ),
        prefix: Optional[str] = typer.Option(
            None, "--prefix", help="Prepended to every part after the first"
        ),
        suffix: Optional[str] = typer.Option(
            None, "--suffix", help="Appended to every part but the last"
        ),
        no_rules: bool = typer.Option(
            False, "--no-rules", help="Ignore highlight rules"
        ),
        config: Optional[Path] = typer.Option(
            None, "--config", help="YAML settings file"
        ),
        state_dir: Optional[Path] = typer.Option(
            None, "--state-dir", help="Directory holding saved draft/settings"
        ),
        use_draft: bool = typer.Option(
            False, "--use-draft", help="Split the saved draft text"
        ),
        save_draft: bool = typer.Option(
            False, "--save-draft", help="Save the input as the draft text"
        ),
        output_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    ) -> None:
        """Split text into chat-sized parts."""
        store = build_store(state_dir)
        text = read_input_text(file, store=store, use_draft=use_draft)
        settings = resolve_settings(
            store,
            config_path=config,
            overrides=_overrides(max_length, prefix, suffix, no_rules),
        )
        if save_draft and not use_draft:
            _save_draft(store, text)

        if output_json:
            typer.echo(json.dumps(split_payload(text, settings), indent=2))
            return

        segments = segment_cached(text, settings.segmenter_config())
        log_event(
            logger, logging.INFO, "cli.split", characters=len(text), parts=len(segments)
        )
        if not segments:
            typer.echo("Nothing to split.")
            return
        blocks = [
            f"{_part_header(item.ordinal, item.total, item.length)}\n"
            f"{item.decorated_content}"
            for item in segments
        ]
        typer.echo("\n".join(blocks))

    @app.command("render")
    def render_cmd(
        file: Optional[Path] = typer.Argument(
            None, help="Text file to render (stdin when omitted or '-')"
        ),
        max_length: Optional[int] = typer.Option(
            None, "--max-length", "-n", help="Maximum characters per part"
        ),
        prefix: Optional[str] = typer.Option(None, "--prefix"),
        suffix: Optional[str] = typer.Option(None, "--suffix"),
        config: Optional[Path] = typer.Option(
            None, "--config", help="YAML settings file"
        ),
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
        use_draft: bool = typer.Option(False, "--use-draft"),
        output_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    ) -> None:
        """Split text and show each part with its highlight spans."""
        store = build_store(state_dir)
        text = read_input_text(file, store=store, use_draft=use_draft)
        settings = resolve_settings(
            store,
            config_path=config,
            overrides=_overrides(max_length, prefix, suffix, False),
        )

        if output_json:
            payload = split_payload(text, settings, with_spans=True)
            typer.echo(json.dumps(payload, indent=2))
            return

        segments = segment_cached(text, settings.segmenter_config())
        if not segments:
            typer.echo("Nothing to split.")
            return
        prefix_text = settings.part_prefix
        for item in segments:
            typer.echo(_part_header(item.ordinal, item.total, item.length))
            pieces = []
            for span in segment_spans(item, settings.highlight_rules):
                rgb = hex_to_rgb(span.color)
                pieces.append(typer.style(span.text, fg=rgb) if rgb else span.text)
            lead = prefix_text if item.ordinal > 1 else ""
            tail = item.decorated_content[len(lead) + len(item.raw_content) :]
            typer.echo(f"{lead}{''.join(pieces)}{tail}")


def _overrides(
    max_length: Optional[int],
    prefix: Optional[str],
    suffix: Optional[str],
    no_rules: bool,
) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "chunk_size": max_length,
        "part_prefix": prefix,
        "part_suffix": suffix,
    }
    if no_rules:
        overrides["highlight_rules"] = []
    return overrides


def _save_draft(store, text: str) -> None:
    try:
        store.save_text(text)
    except BardsQuillError as exc:
        raise_exit(error_message(exc), cause=exc)
