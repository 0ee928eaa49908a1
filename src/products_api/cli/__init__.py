"""Command line entry points for running and provisioning the service."""

import typer
from rich.console import Console
from rich.panel import Panel

console = Console()

app = typer.Typer(
    help="Products API service commands",
    no_args_is_help=True,
)


@app.command(name="serve")
def serve(
    host: str | None = typer.Option(None, help="Host to bind; defaults to app.host"),
    port: int | None = typer.Option(None, help="Port to bind; defaults to app.port"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    from src.products_api.runtime.context import get_config

    config = get_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Starting Products API[/bold green] ({config.app.environment})",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{bind_host}:{bind_port}")
    if config.app.docs_enabled:
        console.print(f"[blue]API docs:[/blue] http://{bind_host}:{bind_port}/docs")

    uvicorn.run(
        "src.products_api.api.http.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=log_level,
    )


@app.command(name="init-db")
def init_db() -> None:
    """Create the database tables."""
    from sqlalchemy.exc import SQLAlchemyError

    from src.products_api.core.services import DbSessionService

    try:
        DbSessionService().create_all()
    except SQLAlchemyError as e:
        console.print(f"[red]Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Database tables created[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
