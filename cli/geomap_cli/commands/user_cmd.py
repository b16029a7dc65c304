from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from ..config import load_config
from ..http import ENV_TOKEN, make_client, run_api

app = typer.Typer(help="User profile commands.")


def _print_user(user: dict) -> None:
    console.print(f"id: {user.get('id', '-')}")
    console.print(f"name: {user.get('name') or '-'}")
    console.print(f"email: {user.get('email') or '-'}")


@app.command("profile")
def profile(
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    cfg = load_config()

    async def _get():
        async with make_client(cfg, token=token) as client:
            return await client.users.get_profile()

    user = run_api(_get(), action="Fetching profile")
    if json_out or not isinstance(user, dict):
        console.print_json(user)
        return
    _print_user(user)


@app.command("update")
def update(
        name: str | None = typer.Option(None, "--name", help="New display name."),
        email: str | None = typer.Option(None, "--email", help="New email."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    changes = {k: v for k, v in {"name": name, "email": email}.items() if v is not None}
    if not changes:
        console.err("Nothing to update. Pass --name and/or --email.")
        raise typer.Exit(code=2)
    cfg = load_config()

    async def _update():
        async with make_client(cfg, token=token) as client:
            return await client.users.update_profile(changes)

    user = run_api(_update(), action="Updating profile")
    console.ok("Profile updated.")
    if isinstance(user, dict):
        _print_user(user)


@app.command("list")
def list_users(
        page: int | None = typer.Option(None, "--page", help="Page number."),
        limit: int | None = typer.Option(None, "--limit", help="Page size."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    cfg = load_config()

    async def _list():
        async with make_client(cfg, token=token) as client:
            return await client.users.get_users(page=page, limit=limit)

    data = run_api(_list(), action="Listing users")
    if json_out or not isinstance(data, dict):
        console.print_json(data)
        return

    table = Table(title=f"Users ({data.get('total', '-')})")
    table.add_column("id", style="bold")
    table.add_column("name")
    table.add_column("email")
    for u in data.get("users") or []:
        table.add_row(str(u.get("id", "-")), str(u.get("name") or "-"), str(u.get("email") or "-"))
    console.print(table)


@app.command("delete")
def delete(
        user_id: int = typer.Argument(..., help="User id."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    if not yes and not typer.confirm(f"Delete user {user_id}?"):
        raise typer.Exit(code=1)
    cfg = load_config()

    async def _delete():
        async with make_client(cfg, token=token) as client:
            await client.users.delete_user(user_id)

    run_api(_delete(), action="Deleting user")
    console.ok(f"User {user_id} deleted.")
