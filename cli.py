"""
CLI tool for operating the messages gateway.

Provides commands for seeding users, issuing bearer tokens for WebSocket
clients and checking how a User-Agent is classified.
"""

import asyncio
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shopchat.managers.token_manager import TokenManager
from shopchat.repositories.user_repository import UserRepository
from shopchat.storage.db import get_session, wait_and_init_db
from shopchat.utils.device import classify_device

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="shopchat-cli",
    help="Messages gateway CLI - Manage users and WebSocket tokens",
    add_completion=False,
)
console = Console()


async def _create_user(email: str, full_name: str, roles: list[str]):
    await wait_and_init_db(max_retries=1)
    # The session commits once the generator is exhausted
    async for session in get_session():
        user = await UserRepository(session).create_user(
            email, full_name, roles
        )
    return user


async def _set_active(email: str, is_active: bool):
    user = None
    async for session in get_session():
        repo = UserRepository(session)
        user = await repo.get_by_email(email)
        if user is not None:
            user = await repo.set_active(user, is_active)
    return user


def _error(title: str, detail: object) -> None:
    console.print()
    console.print(
        Panel.fit(f"[red]{title}[/red]\n\n{detail}", border_style="red", title="Error")
    )
    console.print()
    raise typer.Exit(code=1)


@typer_app.command(name="create-user")
def create_user(
    email: str = typer.Argument(..., help="Login email"),
    full_name: str = typer.Argument(..., help="Display name shown in chat"),
    roles: list[str] = typer.Option(
        None, "--role", "-r", help="Granted roles (can specify multiple)"
    ),
    token: bool = typer.Option(
        True, "--token/--no-token", help="Print a bearer token for the user"
    ),
):
    """
    Create a user and optionally print a bearer token for it.

    Example:
        python cli.py create-user john@example.com "John Doe" -r admin
    """
    try:
        user = asyncio.run(_create_user(email, full_name, roles or ["user"]))
    except IntegrityError:
        _error("User already exists", email)
    except (SQLAlchemyError, RuntimeError) as e:
        _error("Database error", e)

    table = Table("Field", "Value", title="User created", show_lines=True)
    table.add_row("id", str(user.id))
    table.add_row("email", user.email)
    table.add_row("full_name", user.full_name)
    table.add_row("roles", ", ".join(user.roles))
    console.print()
    console.print(table)

    if token:
        _print_token(str(user.id))


@typer_app.command(name="deactivate-user")
def deactivate_user(
    email: str = typer.Argument(..., help="Login email"),
    activate: bool = typer.Option(
        False, "--activate", help="Re-activate instead of deactivating"
    ),
):
    """
    Deactivate (or re-activate) a user.

    Deactivated users are refused by the messages gateway on their next
    connection; connections already registered are kept.
    """
    try:
        user = asyncio.run(_set_active(email, activate))
    except SQLAlchemyError as e:
        _error("Database error", e)

    if user is None:
        _error("User not found", email)

    state = "[green]active[/green]" if user.is_active else "[red]inactive[/red]"
    console.print(f"[bold]{user.email}[/bold] is now {state}")


@typer_app.command(name="issue-token")
def issue_token(user_id: str = typer.Argument(..., help="User id (UUID)")):
    """
    Print a bearer token for an existing user id.

    Example:
        python cli.py issue-token 1d7d0d3b-7c4b-4f5f-8c3c-0e1d7f4e6c8b
    """
    # Tokens always carry the canonical spelling of the id
    try:
        canonical_id = str(UUID(user_id))
    except ValueError:
        _error("Invalid user id", user_id)

    _print_token(canonical_id)


def _print_token(user_id: str) -> None:
    access_token = TokenManager().issue(user_id)
    console.print()
    console.print(
        Panel.fit(
            f"[green]✓ Access token[/green]\n\n{access_token}",
            border_style="green",
        )
    )
    console.print("[bold]Connect with:[/bold]")
    console.print(
        f"  ws://localhost:8000/ws/messages?Authorization=Bearer%20{access_token}"
    )
    console.print()


@typer_app.command(name="classify")
def classify(user_agent: str = typer.Argument("", help="User-Agent header")):
    """
    Show the device class a User-Agent is registered under.

    Example:
        python cli.py classify "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
    """
    console.print(f"[cyan]{classify_device(user_agent).value}[/cyan]")


if __name__ == "__main__":
    typer_app()
