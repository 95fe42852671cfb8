"""QR project CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from qrtrack.config import settings
from qrtrack.database import create_stores
from qrtrack.models import PROJECT_KIND, Project

console = Console()
app = typer.Typer(help="QR project commands")


@app.command("list")
def list_projects(
    owner: str | None = typer.Option(
        None, "--owner", "-o", help="Only projects owned by this account id"
    ),
):
    """List projects with their scan counts."""

    async def _list():
        accounts, projects = create_stores(settings)
        where = {"kind": PROJECT_KIND}
        if owner:
            where["ownerId"] = owner
        try:
            documents = await projects.find(where, order_by="createdAt", descending=True)
        finally:
            await accounts.close()
            await projects.close()

        table = Table(title="Projects")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Destination", style="green")
        table.add_column("Owner", style="dim")
        table.add_column("Scans", justify="right")

        for document in documents:
            project = Project.from_document(document)
            table.add_row(
                project.id,
                project.name,
                project.text,
                project.owner_email or project.owner_id or "-",
                str(project.scan_count),
            )

        console.print(table)

    asyncio.run(_list())
