from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, cast

import yaml

from .exceptions import ConfigError, InvalidConfiguration
from .markup import MarkupRule
from .segmenter import SegmenterConfig, validate_max_length

logger = logging.getLogger("bards_quill.core.config")

STATE_DIR_ENV = "BARDS_QUILL_HOME"
DEFAULT_STATE_DIR = "~/.bards-quill"

FONT_SIZES = ("text-sm", "text-base", "text-lg", "text-xl")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "chunk_size": 256,
    "part_prefix": "",
    "part_suffix": "...",
    "font_size": "text-base",
    "dark_mode": False,
    "highlight_rules": [
        {
            "id": "1",
            "name": "Speech",
            "start": '"',
            "end": '"',
            "color": "#2563eb",
        },
        {
            "id": "2",
            "name": "Action",
            "start": "*",
            "end": "*",
            "color": "#e11d48",
        },
    ],
}

# Settings saved by the browser app use camelCase keys.
_KEY_ALIASES = {
    "chunkSize": "chunk_size",
    "partPrefix": "part_prefix",
    "partSuffix": "part_suffix",
    "fontSize": "font_size",
    "darkMode": "dark_mode",
    "highlightRules": "highlight_rules",
}

SETTABLE_KEYS = ("chunk_size", "part_prefix", "part_suffix", "font_size", "dark_mode")


@dataclass(frozen=True)
class AppSettings:
    chunk_size: int = DEFAULT_SETTINGS["chunk_size"]
    part_prefix: str = DEFAULT_SETTINGS["part_prefix"]
    part_suffix: str = DEFAULT_SETTINGS["part_suffix"]
    highlight_rules: tuple[MarkupRule, ...] = field(
        default_factory=lambda: tuple(
            MarkupRule.from_dict(rule) for rule in DEFAULT_SETTINGS["highlight_rules"]
        )
    )
    font_size: str = DEFAULT_SETTINGS["font_size"]
    dark_mode: bool = DEFAULT_SETTINGS["dark_mode"]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AppSettings":
        cfg = normalize_keys(raw) if isinstance(raw, Mapping) else {}

        chunk_size = cfg.get("chunk_size", DEFAULT_SETTINGS["chunk_size"])
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
            raise ConfigError("chunk_size must be an integer")
        validate_max_length(chunk_size)

        part_prefix = _parse_str(cfg.get("part_prefix"), key="part_prefix")
        part_suffix = _parse_str(
            cfg.get("part_suffix", DEFAULT_SETTINGS["part_suffix"]),
            key="part_suffix",
        )

        font_size = cfg.get("font_size", DEFAULT_SETTINGS["font_size"])
        if font_size not in FONT_SIZES:
            raise ConfigError(f"font_size must be one of {', '.join(FONT_SIZES)}")

        dark_mode = cfg.get("dark_mode", DEFAULT_SETTINGS["dark_mode"])
        if not isinstance(dark_mode, bool):
            raise ConfigError("dark_mode must be boolean")

        return cls(
            chunk_size=chunk_size,
            part_prefix=part_prefix,
            part_suffix=part_suffix,
            highlight_rules=_parse_rules(
                cfg.get("highlight_rules", DEFAULT_SETTINGS["highlight_rules"])
            ),
            font_size=font_size,
            dark_mode=dark_mode,
        )

    def segmenter_config(self) -> SegmenterConfig:
        return SegmenterConfig(
            max_length=self.chunk_size,
            prefix=self.part_prefix,
            suffix=self.part_suffix,
            rules=self.highlight_rules,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_size": self.chunk_size,
            "part_prefix": self.part_prefix,
            "part_suffix": self.part_suffix,
            "font_size": self.font_size,
            "dark_mode": self.dark_mode,
            "highlight_rules": [rule.to_dict() for rule in self.highlight_rules],
        }


def normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(str(key), str(key)): value for key, value in raw.items()}


def _parse_str(value: Any, *, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _parse_rules(value: Any) -> tuple[MarkupRule, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ConfigError("highlight_rules must be a list")
    rules: list[MarkupRule] = []
    for idx, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ConfigError(f"highlight_rules[{idx}] must be a mapping")
        rule = MarkupRule.from_dict(item)
        if not rule.id:
            raise ConfigError(f"highlight_rules[{idx}].id must be non-empty")
        rules.append(rule)
    return tuple(rules)


def merge_defaults(
    base: Mapping[str, Any], overrides: Mapping[str, Any]
) -> Dict[str, Any]:
    merged = cast(Dict[str, Any], json.loads(json.dumps(base)))
    for key, value in normalize_keys(overrides).items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data


def load_settings(
    path: Optional[Path] = None,
    *,
    base: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AppSettings:
    """Build settings from defaults < ``base`` < file at ``path`` < ``overrides``."""
    data = merge_defaults(DEFAULT_SETTINGS, base or {})
    if path is not None:
        data = merge_defaults(data, load_settings_file(path))
    if overrides:
        data = merge_defaults(data, overrides)
    try:
        return AppSettings.from_raw(data)
    except InvalidConfiguration:
        raise
    except ConfigError as exc:
        source = f" ({path})" if path is not None else ""
        raise ConfigError(f"Invalid settings{source}: {exc}") from exc


def resolve_state_dir(
    value: Optional[Path] = None, *, env: Optional[Mapping[str, str]] = None
) -> Path:
    if value is not None:
        return Path(value).expanduser()
    source = env if env is not None else os.environ
    raw = (source.get(STATE_DIR_ENV) or "").strip()
    return Path(raw or DEFAULT_STATE_DIR).expanduser()
