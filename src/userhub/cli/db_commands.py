"""Database and server CLI commands."""

import typer
from rich.console import Console
from rich.panel import Panel

from src.userhub.core.services import DbSessionService
from src.userhub.runtime.context import get_config

console = Console()

# Create the db command group
db_app = typer.Typer(help="Manage the user directory database")


@db_app.command("init")
def init_db() -> None:
    """Create the database tables if they do not exist."""
    config = get_config()
    console.print(
        Panel.fit(
            f"[bold blue]Initializing database[/bold blue]\n{config.database.url}",
            border_style="blue",
        )
    )

    database_service = DbSessionService()
    try:
        database_service.create_all()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    console.print("[green]✅ Database initialized[/green]")


def serve(
    host: str = typer.Option(None, help="Host to bind (defaults to app.host)"),
    port: int = typer.Option(None, help="Port to bind (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """
    🚀 Start the API server with uvicorn.
    """
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port

    console.print(
        Panel.fit(
            "[bold green]Starting userhub API[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        "src.userhub.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=False,  # We handle access logging in middleware
    )
