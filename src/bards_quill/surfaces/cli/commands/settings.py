from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from ....core.config import SETTABLE_KEYS, AppSettings
from ....core.exceptions import BardsQuillError
from .utils import build_store, error_message, raise_exit


def _parse_value(key: str, value: str) -> Any:
    if key == "chunk_size":
        try:
            return int(value)
        except ValueError:
            raise_exit(f"chunk_size must be an integer, got {value!r}")
    if key == "dark_mode":
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise_exit(f"dark_mode must be a boolean, got {value!r}")
    return value


def _format_settings(settings: AppSettings) -> str:
    lines = [
        f"chunk_size: {settings.chunk_size}",
        f"part_prefix: {settings.part_prefix!r}",
        f"part_suffix: {settings.part_suffix!r}",
        f"font_size: {settings.font_size}",
        f"dark_mode: {str(settings.dark_mode).lower()}",
        "highlight_rules:",
    ]
    if not settings.highlight_rules:
        lines.append("  (none)")
    for rule in settings.highlight_rules:
        label = rule.name or rule.id
        lines.append(
            f"  - [{rule.id}] {label}: {rule.start!r} ... {rule.end!r} {rule.color}"
        )
    return "\n".join(lines)


def register_settings_commands(settings_app: typer.Typer) -> None:
    @settings_app.command("show")
    def settings_show(
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
        output_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    ) -> None:
        """Show the saved settings (merged over defaults)."""
        settings = build_store(state_dir).load_settings()
        if output_json:
            typer.echo(json.dumps(settings.to_dict(), indent=2))
            return
        typer.echo(_format_settings(settings))

    @settings_app.command("set")
    def settings_set(
        key: str = typer.Argument(..., help=f"One of: {', '.join(SETTABLE_KEYS)}"),
        value: str = typer.Argument(...),
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
    ) -> None:
        """Change one setting; invalid values leave the saved settings untouched."""
        if key not in SETTABLE_KEYS:
            raise_exit(f"Unknown setting {key!r}; expected one of {SETTABLE_KEYS}")
        store = build_store(state_dir)
        try:
            settings = store.update_settings({key: _parse_value(key, value)})
        except BardsQuillError as exc:
            raise_exit(error_message(exc), cause=exc)
        typer.echo(f"{key} = {settings.to_dict()[key]!r}")

    @settings_app.command("add-rule")
    def settings_add_rule(
        start: str = typer.Argument(..., help="Start marker"),
        end: str = typer.Argument(..., help="End marker"),
        name: str = typer.Option("New Rule", "--name"),
        color: str = typer.Option("#2563eb", "--color"),
        rule_id: Optional[str] = typer.Option(None, "--id"),
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
    ) -> None:
        """Append a highlight rule."""
        store = build_store(state_dir)
        current = store.load_settings()
        existing = {rule.id for rule in current.highlight_rules}
        new_id = rule_id or _next_rule_id(existing)
        if new_id in existing:
            raise_exit(f"Rule id {new_id!r} already exists")
        rules = [rule.to_dict() for rule in current.highlight_rules]
        rules.append(
            {"id": new_id, "name": name, "start": start, "end": end, "color": color}
        )
        try:
            store.update_settings({"highlight_rules": rules})
        except BardsQuillError as exc:
            raise_exit(error_message(exc), cause=exc)
        typer.echo(f"Added rule {new_id}")

    @settings_app.command("remove-rule")
    def settings_remove_rule(
        rule_id: str = typer.Argument(...),
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
    ) -> None:
        """Remove a highlight rule by id."""
        store = build_store(state_dir)
        current = store.load_settings()
        rules = [
            rule.to_dict() for rule in current.highlight_rules if rule.id != rule_id
        ]
        if len(rules) == len(current.highlight_rules):
            raise_exit(f"No rule with id {rule_id!r}")
        try:
            store.update_settings({"highlight_rules": rules})
        except BardsQuillError as exc:
            raise_exit(error_message(exc), cause=exc)
        typer.echo(f"Removed rule {rule_id}")

    @settings_app.command("reset")
    def settings_reset(
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
    ) -> None:
        """Forget the saved draft and settings."""
        store = build_store(state_dir)
        try:
            store.reset()
        except BardsQuillError as exc:
            raise_exit(error_message(exc), cause=exc)
        typer.echo("Settings reset to defaults.")


def _next_rule_id(existing: set[str]) -> str:
    idx = len(existing) + 1
    while str(idx) in existing:
        idx += 1
    return str(idx)
