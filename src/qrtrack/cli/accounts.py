"""Account management CLI commands."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import typer
from rich.console import Console
from rich.table import Table

from qrtrack.config import settings
from qrtrack.database import DocumentStore, create_stores
from qrtrack.errors import NotFoundError
from qrtrack.models import Account

console = Console()
app = typer.Typer(help="Account management commands")


@asynccontextmanager
async def account_store() -> AsyncIterator[DocumentStore]:
    accounts, projects = create_stores(settings)
    try:
        yield accounts
    finally:
        await accounts.close()
        await projects.close()


@app.command("list")
def list_accounts():
    """List all accounts."""

    async def _list():
        async with account_store() as store:
            documents = await store.find(order_by="email")

        table = Table(title="Accounts")
        table.add_column("Email", style="green")
        table.add_column("Name")
        table.add_column("Verified", style="magenta")
        table.add_column("Created", style="dim")

        for document in documents:
            account = Account.from_document(document)
            verified = "[green]Yes[/green]" if account.verified else "No"
            table.add_row(
                account.email,
                account.name or "-",
                verified,
                account.created_at.strftime("%Y-%m-%d"),
            )

        console.print(table)

    asyncio.run(_list())


@app.command("verify")
def verify_account(email: str = typer.Argument(..., help="Account email")):
    """Mark an account as verified without a code."""

    async def _verify():
        async with account_store() as store:
            try:
                account = Account.from_document(await store.read(email))
            except NotFoundError:
                console.print(f"[red]Error:[/red] Account {email} not found")
                raise typer.Exit(1) from None

            account.verified = True
            account.clear_verification()
            account.touch()
            await store.replace(account.to_document(), etag=account.etag)
            console.print(f"[green]Verified:[/green] {email}")

    asyncio.run(_verify())


@app.command("delete")
def delete_account(
    email: str = typer.Argument(..., help="Account email"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete an account."""
    if not force:
        typer.confirm(f"Delete account {email}?", abort=True)

    async def _delete():
        async with account_store() as store:
            try:
                await store.delete(email)
            except NotFoundError:
                console.print(f"[red]Error:[/red] Account {email} not found")
                raise typer.Exit(1) from None
            console.print(f"[green]Deleted account:[/green] {email}")

    asyncio.run(_delete())
