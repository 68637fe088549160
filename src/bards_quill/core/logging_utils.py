from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _json_default(value: Any) -> str:
    return repr(value)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    exc: Optional[BaseException] = None,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    if exc is not None:
        payload["error"] = str(exc)
        payload["error_type"] = type(exc).__name__
    try:
        message = json.dumps(payload, sort_keys=True, default=_json_default)
    except (TypeError, ValueError):
        message = f"{event} {fields!r}"
    safe_log(logger, level, message)


def safe_log(logger: logging.Logger, level: int, msg: str, *args: Any) -> None:
    """Log without ever raising (broken handlers, closed streams)."""
    try:
        logger.log(level, msg, *args)
    except Exception:
        pass


def setup_logging(level: str = "WARNING", *, stream=None) -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    root = logging.getLogger("bards_quill")
    root.setLevel(resolved)
    for handler in list(root.handlers):
        if getattr(handler, "_bards_quill_handler", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    handler._bards_quill_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
