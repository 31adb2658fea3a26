"""CLI Entry Point - operator commands for the CRM backend.

Covers the chores an operator needs without going through the HTTP API:
creating tables, seeding accounts, changing account status, clearing
lockouts and serving the app.
"""

import asyncio
import atexit

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ibcrm.shared.exceptions import CrmError
from ibcrm.shared.models import UserRole, UserStatus

app = typer.Typer(
    name="ibcrm",
    help="IB recruiting CRM - backend administration",
    no_args_is_help=True,
)
console = Console()


# Global event loop for CLI - reuse across commands
_cli_loop: asyncio.AbstractEventLoop | None = None


def _get_cli_loop() -> asyncio.AbstractEventLoop:
    """Get or create the CLI event loop."""
    global _cli_loop
    if _cli_loop is None or _cli_loop.is_closed():
        _cli_loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_cli_loop)
    return _cli_loop


def _cleanup_loop() -> None:
    """Dispose of database connections and close the loop at exit."""
    global _cli_loop
    if _cli_loop is None or _cli_loop.is_closed():
        return
    from ibcrm.shared.database import close_db

    try:
        _cli_loop.run_until_complete(close_db())
    finally:
        _cli_loop.close()
        _cli_loop = None


atexit.register(_cleanup_loop)


def run_async(coro):
    """Helper to run async functions in sync context."""
    return _get_cli_loop().run_until_complete(coro)


def _fail(exc: CrmError) -> None:
    console.print(f"[red]Error:[/red] {exc.message} [dim]({exc.error_code})[/dim]")
    raise typer.Exit(1)


def _user_table(user) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("ID", str(user.id))
    table.add_row("Email", user.email)
    table.add_row("Role", user.role.value)
    table.add_row("Status", user.status.value)
    return table


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables."""
    from ibcrm.shared.database import init_db

    run_async(init_db())
    console.print("[green]Database tables created.[/green]")


@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="Email address of the new account"),
    admin: bool = typer.Option(False, "--admin", help="Grant the admin role"),
) -> None:
    """Create an account, prompting for its password."""
    from ibcrm.modules.auth.service import build_auth_service

    password = Prompt.ask("Password", password=True)
    confirm = Prompt.ask("Confirm password", password=True)
    if password != confirm:
        console.print("[red]Passwords do not match.[/red]")
        raise typer.Exit(1)

    role = UserRole.ADMIN if admin else UserRole.USER
    try:
        result = run_async(build_auth_service().signup(email, password, role=role))
    except CrmError as e:
        _fail(e)

    console.print(Panel(_user_table(result.user), title="Account created", border_style="green"))


@app.command("set-status")
def set_status(
    email: str = typer.Argument(..., help="Email address of the account"),
    status: UserStatus = typer.Argument(..., help="New status"),
) -> None:
    """Activate, deactivate or suspend an account."""
    from ibcrm.modules.user.service import UserService

    async def _run():
        service = UserService()
        user = await service.find_by_email(email)
        if user is None:
            return None
        return await service.set_status(user.id, status)

    try:
        user = run_async(_run())
    except CrmError as e:
        _fail(e)

    if user is None:
        console.print(f"[red]No account for {email}[/red]")
        raise typer.Exit(1)
    console.print(Panel(_user_table(user), title="Status updated", border_style="green"))


@app.command("unlock")
def unlock(
    email: str = typer.Argument(..., help="Email address of the account"),
) -> None:
    """Clear failed login attempts and any lockout."""
    from ibcrm.modules.user.service import UserService

    async def _run():
        service = UserService()
        user = await service.find_by_email(email)
        if user is None:
            return None
        return await service.unlock(user.id)

    try:
        user = run_async(_run())
    except CrmError as e:
        _fail(e)

    if user is None:
        console.print(f"[red]No account for {email}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Unlocked {user.email}[/green]")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (defaults to API_HOST)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (defaults to API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from ibcrm.shared.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "ibcrm.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
