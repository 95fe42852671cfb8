"""CLI commands using Typer."""

import typer

from qrtrack.cli.accounts import app as accounts_app
from qrtrack.cli.projects import app as projects_app

app = typer.Typer(name="qrtrack", help="QR Track CLI")

app.add_typer(accounts_app, name="accounts")
app.add_typer(projects_app, name="projects")


@app.command()
def version():
    """Show version information."""
    from qrtrack import __version__

    typer.echo(f"QR Track v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int | None = typer.Option(None, help="Port to bind to (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from qrtrack.config import settings
    from qrtrack.logging import get_uvicorn_log_config

    uvicorn.run(
        "qrtrack.main:app",
        host=host,
        port=port or settings.port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


if __name__ == "__main__":
    app()
