"""Error hierarchy shared by the core and its surfaces."""

from __future__ import annotations

from typing import Optional


class BardsQuillError(Exception):
    """Base error."""

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message


class ConfigError(BardsQuillError):
    """Settings or config file is malformed."""


class InvalidConfiguration(ConfigError):
    """Segmenter configuration cannot be used (max length below 1)."""

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        if user_message is None:
            user_message = "Part size must be at least 1 character."
        super().__init__(message, user_message=user_message)


class StateError(BardsQuillError):
    """Persisted state could not be written."""
