from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from fastapi import APIRouter, HTTPException

from ....core.config import AppSettings, load_settings
from ....core.exceptions import ConfigError, InvalidConfiguration
from ....core.logging_utils import log_event
from ....core.render import split_payload
from ....core.state import SettingsStore
from ..schemas import SegmentRequest, SplitResponse

logger = logging.getLogger("bards_quill.web.segments")


def error_detail(code: str, message: str) -> dict:
    return {"code": code, "message": message}


def config_http_error(exc: ConfigError) -> HTTPException:
    code = (
        "invalid_configuration"
        if isinstance(exc, InvalidConfiguration)
        else "config_error"
    )
    return HTTPException(status_code=400, detail=error_detail(code, str(exc)))


def _request_settings(
    store: SettingsStore, overrides: Optional[Mapping[str, Any]]
) -> AppSettings:
    try:
        base = store.load_settings().to_dict()
        return load_settings(base=base, overrides=overrides)
    except ConfigError as exc:
        log_event(logger, logging.INFO, "web.segments.rejected", exc=exc)
        raise config_http_error(exc) from exc


def build_segment_routes(store: SettingsStore) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["segments"])

    @router.post("/segments", response_model=SplitResponse)
    def split_text(request: SegmentRequest):
        settings = _request_settings(store, request.settings)
        return split_payload(request.text, settings)

    @router.post("/render", response_model=SplitResponse)
    def render_text(request: SegmentRequest):
        settings = _request_settings(store, request.settings)
        return split_payload(request.text, settings, with_spans=True)

    return router
