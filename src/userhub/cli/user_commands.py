"""User directory CLI commands."""

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table
from sqlmodel import Session

from src.userhub.core.cache import ReadThroughCache
from src.userhub.core.models import AddUserRequest, QuerySpecification
from src.userhub.core.services import (
    CredentialHasher,
    DbSessionService,
    UserDirectoryService,
    UserManagementService,
)
from src.userhub.core.storage import LocalFileStorage
from src.userhub.runtime.context import get_config

console = Console()

# Create the users subcommand app
users_app = typer.Typer(help="Manage users in the directory database")


def _management_service(session: Session) -> UserManagementService:
    config = get_config()
    return UserManagementService(
        session,
        ReadThroughCache(max_entries=config.cache.max_entries),
        CredentialHasher(rounds=config.users.bcrypt_rounds),
        LocalFileStorage.from_config(config.uploads),
    )


@users_app.command("list")
def list_users(
    search: str = typer.Option(None, "--search", "-s", help="Filter by name or email"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    size: int = typer.Option(20, "--size", "-n", min=1, help="Users per page"),
    sort_by: str = typer.Option(
        None, "--sort-by", help="firstname, lastname, email or createdat"
    ),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
) -> None:
    """List live users."""
    database_service = DbSessionService()
    try:
        with database_service.get_session() as session:
            directory = UserDirectoryService(session, ReadThroughCache())
            result = directory.get_all_users(
                QuerySpecification(
                    page=page, size=size, search=search, sort_by=sort_by, desc=desc
                )
            )
    finally:
        database_service.dispose()

    if not result.items:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title=f"Users (page {result.page} of {result.total_pages})")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Role", style="magenta")
    table.add_column("Active", style="yellow")
    table.add_column("Created", style="dim")

    for user in result.items:
        table.add_row(
            str(user.id),
            user.full_name,
            user.email,
            str(user.role),
            "✅" if user.status else "❌",
            user.created_at.strftime("%Y-%m-%d %H:%M") if user.created_at else "",
        )

    console.print(table)
    console.print(f"\n[green]Found {result.total} users[/green]")


@users_app.command("add")
def add_user(
    email: str = typer.Argument(..., help="Email address"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
    first_name: str = typer.Option(..., "--first-name", "-f", help="First name"),
    last_name: str = typer.Option(..., "--last-name", "-l", help="Last name"),
    phone: str = typer.Option(None, "--phone", help="Phone number"),
    role: int = typer.Option(None, "--role", "-r", help="Role code (defaults to users.default_role)"),
) -> None:
    """Add a new user."""
    try:
        request = AddUserRequest(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            phone=phone,
            role=role,
        )
    except ValidationError as e:
        console.print(f"[red]❌ Invalid user: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    database_service = DbSessionService()
    try:
        with database_service.get_session() as session:
            result = _management_service(session).add_user(request)
    finally:
        database_service.dispose()

    if not result.ok:
        console.print(f"[red]❌ {result.message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ Created user {result.user_id} ({request.email})[/green]")


@users_app.command("delete")
def delete_user(
    user_id: int = typer.Argument(..., help="Id of the user to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Soft-delete a user."""
    if not force and not Confirm.ask(f"Are you sure you want to delete user {user_id}?"):
        console.print("[yellow]Deletion cancelled[/yellow]")
        return

    database_service = DbSessionService()
    try:
        with database_service.get_session() as session:
            result = _management_service(session).delete_user(user_id)
    finally:
        database_service.dispose()

    if not result.ok:
        console.print(f"[red]❌ {result.message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ Deleted user {user_id}[/green]")
