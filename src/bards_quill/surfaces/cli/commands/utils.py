from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from ....core.config import AppSettings, load_settings, resolve_state_dir
from ....core.exceptions import BardsQuillError
from ....core.state import SettingsStore


def raise_exit(message: str, *, cause: Optional[BaseException] = None) -> NoReturn:
    typer.echo(message, err=True)
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


def error_message(exc: BardsQuillError) -> str:
    if exc.user_message:
        return f"{exc.user_message} ({exc})"
    return str(exc)


def build_store(state_dir: Optional[Path]) -> SettingsStore:
    return SettingsStore(resolve_state_dir(state_dir))


def read_input_text(
    path: Optional[Path], *, store: SettingsStore, use_draft: bool
) -> str:
    if use_draft:
        if path is not None:
            raise_exit("Pass either FILE or --use-draft, not both.")
        return store.load_text()
    if path is None or str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise_exit(f"Failed to read {path}: {exc}", cause=exc)


def resolve_settings(
    store: SettingsStore,
    *,
    config_path: Optional[Path],
    overrides: dict[str, Any],
) -> AppSettings:
    if config_path is not None and not config_path.exists():
        raise_exit(f"Config file not found: {config_path}")
    cleaned = {key: value for key, value in overrides.items() if value is not None}
    try:
        return load_settings(
            config_path, base=store.load_settings().to_dict(), overrides=cleaned
        )
    except BardsQuillError as exc:
        raise_exit(error_message(exc), cause=exc)
