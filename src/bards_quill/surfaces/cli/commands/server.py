from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ....core.config import resolve_state_dir


def register_server_commands(app: typer.Typer) -> None:
    @app.command("serve")
    def serve(
        host: str = typer.Option("127.0.0.1", "--host", help="Bind host"),
        port: int = typer.Option(4180, "--port", help="Bind port"),
        state_dir: Optional[Path] = typer.Option(None, "--state-dir"),
    ) -> None:
        """Serve the splitting API over HTTP."""
        import uvicorn

        from ...web.app import create_app

        app_instance = create_app(resolve_state_dir(state_dir))
        uvicorn.run(app_instance, host=host, port=port, log_level="info")
