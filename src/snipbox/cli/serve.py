from dataclasses import replace
from typing import Annotated

import typer
from rich.console import Console

from snipbox.settings import BACKENDS, Settings

console = Console()


def serve(
    host: str = "127.0.0.1",
    port: int = 3000,
    backend: Annotated[str | None, typer.Option(help=f"Store backend: {', '.join(BACKENDS)}.")] = None,
    log_level: str = "info",
) -> None:
    """Start the web application."""
    import uvicorn

    from snipbox.api.app import create_app

    settings = Settings.from_env()
    if backend is not None:
        if backend not in BACKENDS:
            console.print(f"[red]Unknown backend {backend!r}; expected one of {', '.join(BACKENDS)}.[/red]")
            raise typer.Exit(1)
        settings = replace(settings, backend=backend)

    app = create_app(settings)
    console.print(f"[green]Starting snipbox on {host}:{port} ({settings.backend} store)[/green]")
    uvicorn.run(app, host=host, port=port, log_level=log_level)
