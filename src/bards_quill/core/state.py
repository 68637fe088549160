"""Persisted draft text and settings.

Both are stored as UTF-8 JSON next to each other in a state directory.
Saved settings are always merged over the built-in defaults on load, so
fields added later get their default value for older files.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

from .config import DEFAULT_SETTINGS, AppSettings, merge_defaults
from .exceptions import ConfigError, StateError
from .logging_utils import log_event
from .utils import atomic_write

TEXT_FILENAME = "text.json"
SETTINGS_FILENAME = "settings.json"

logger = logging.getLogger("bards_quill.core.state")


class SettingsStore:
    def __init__(self, state_dir: Path) -> None:
        self._root = Path(state_dir)
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def text_path(self) -> Path:
        return self._root / TEXT_FILENAME

    @property
    def settings_path(self) -> Path:
        return self._root / SETTINGS_FILENAME

    def load_text(self) -> str:
        payload = self._read_json_object(self.text_path)
        if payload is None:
            return ""
        text = payload.get("text")
        return text if isinstance(text, str) else ""

    def save_text(self, text: str) -> None:
        with self._lock:
            self._write_json(self.text_path, {"text": text})
        log_event(logger, logging.DEBUG, "state.text.saved", characters=len(text))

    def _load_raw_settings(self) -> dict[str, Any]:
        payload = self._read_json_object(self.settings_path)
        return merge_defaults(DEFAULT_SETTINGS, payload or {})

    def load_settings(self) -> AppSettings:
        raw = self._load_raw_settings()
        try:
            return AppSettings.from_raw(raw)
        except ConfigError as exc:
            log_event(
                logger,
                logging.WARNING,
                "state.settings.invalid",
                path=str(self.settings_path),
                exc=exc,
            )
            return AppSettings()

    def save_settings(self, settings: AppSettings) -> None:
        with self._lock:
            self._write_json(self.settings_path, settings.to_dict())
        log_event(
            logger,
            logging.INFO,
            "state.settings.saved",
            chunk_size=settings.chunk_size,
            rules=len(settings.highlight_rules),
        )

    def update_settings(self, overrides: Mapping[str, Any]) -> AppSettings:
        """Merge ``overrides`` over the stored settings and persist them.

        Invalid results raise ConfigError and leave the stored file untouched.
        """
        current = self.load_settings().to_dict()
        settings = AppSettings.from_raw(merge_defaults(current, overrides))
        self.save_settings(settings)
        return settings

    def reset_settings(self) -> None:
        with self._lock:
            self._remove(self.settings_path)
        log_event(logger, logging.INFO, "state.settings.reset", root=str(self._root))

    def reset(self) -> None:
        with self._lock:
            self._remove(self.text_path)
            self._remove(self.settings_path)
        log_event(logger, logging.INFO, "state.reset", root=str(self._root))

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StateError(f"Failed to remove {path}: {exc}") from exc

    def _read_json_object(self, path: Path) -> Optional[dict[str, Any]]:
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read state from %s: %s", path, exc)
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed JSON in %s", path)
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    def _write_json(self, path: Path, payload: Mapping[str, Any]) -> None:
        try:
            atomic_write(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
        except OSError as exc:
            raise StateError(f"Failed to write {path}: {exc}") from exc


__all__ = ["SETTINGS_FILENAME", "TEXT_FILENAME", "SettingsStore"]
