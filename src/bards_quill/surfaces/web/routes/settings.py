from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException

from ....core.exceptions import ConfigError, StateError
from ....core.state import SettingsStore
from ..schemas import DraftRequest, DraftResponse
from .segments import config_http_error, error_detail


def _state_http_error(exc: StateError) -> HTTPException:
    return HTTPException(
        status_code=500, detail=error_detail("state_error", str(exc))
    )


def build_settings_routes(store: SettingsStore) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["settings"])

    @router.get("/settings")
    def get_settings():
        return store.load_settings().to_dict()

    @router.put("/settings")
    def put_settings(overrides: Dict[str, Any] = Body(...)):
        try:
            settings = store.update_settings(overrides)
        except ConfigError as exc:
            raise config_http_error(exc) from exc
        except StateError as exc:
            raise _state_http_error(exc) from exc
        return settings.to_dict()

    @router.delete("/settings")
    def reset_settings():
        try:
            store.reset_settings()
        except StateError as exc:
            raise _state_http_error(exc) from exc
        return store.load_settings().to_dict()

    @router.get("/draft", response_model=DraftResponse)
    def get_draft():
        text = store.load_text()
        return {"text": text, "characters": len(text)}

    @router.put("/draft", response_model=DraftResponse)
    def put_draft(request: DraftRequest):
        try:
            store.save_text(request.text)
        except StateError as exc:
            raise _state_http_error(exc) from exc
        return {"text": request.text, "characters": len(request.text)}

    return router
