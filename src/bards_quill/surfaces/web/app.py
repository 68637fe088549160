from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from ...core.config import resolve_state_dir
from ...core.logging_utils import log_event
from ...core.state import SettingsStore
from ...core.utils import get_version
from .routes import build_segment_routes, build_settings_routes

logger = logging.getLogger("bards_quill.web")


def create_app(state_dir: Optional[Path] = None) -> FastAPI:
    store = SettingsStore(resolve_state_dir(state_dir))
    app = FastAPI(title="Bard's Quill", version=get_version())
    app.state.store = store

    @app.get("/api/version")
    def version():
        return {"version": get_version()}

    app.include_router(build_segment_routes(store))
    app.include_router(build_settings_routes(store))
    log_event(logger, logging.DEBUG, "web.app.created", state_dir=str(store.root))
    return app
