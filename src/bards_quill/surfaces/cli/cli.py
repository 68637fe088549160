import logging

import typer

from ...core.logging_utils import setup_logging
from ...core.utils import get_version
from .commands import (
    register_server_commands,
    register_settings_commands,
    register_split_commands,
)

logger = logging.getLogger("bards_quill.cli")

app = typer.Typer(add_completion=False)
settings_app = typer.Typer(add_completion=False)


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"bards-quill {get_version()}")
    raise typer.Exit(code=0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level for stderr output"
    ),
) -> None:
    setup_logging(log_level)


def main() -> None:
    """Entrypoint for CLI execution."""
    app()


register_split_commands(app)
app.add_typer(settings_app, name="settings")
register_settings_commands(settings_app)
register_server_commands(app)


if __name__ == "__main__":
    app()
