from __future__ import annotations

import typer
from geomap_client.apis import extract_token

from .. import console
from ..config import load_config
from ..http import ENV_TOKEN, make_client, run_api

app = typer.Typer(help="Auth commands.")


@app.command("login")
def login(
        email: str = typer.Option(..., "--email", prompt=True, help="Account email."),
        password: str = typer.Option(..., "--password", prompt=True, hide_input=True, help="Password for login."),
        raw: bool = typer.Option(False, "--raw", help="Print only the token."),
):
    cfg = load_config()

    async def _login():
        async with make_client(cfg) as client:
            data = await client.auth.login(email=email, password=password)
            return data, client.tokens.token

    data, token = run_api(_login(), action="Login")
    if not token:
        console.err("Login response did not contain a token.")
        raise typer.Exit(code=2)
    if raw:
        typer.echo(token)
        return
    user = data.get("user") if isinstance(data, dict) else None
    name = (user or {}).get("name") or email
    console.ok(f"Logged in as {name}.")
    console.info(f"Token is not stored. Export it for later commands: {ENV_TOKEN}={token}")


@app.command("logout")
def logout(
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    if not token:
        console.warn("No token given, nothing to log out.")
        return
    cfg = load_config()

    async def _logout():
        async with make_client(cfg, token=token) as client:
            await client.auth.logout()

    run_api(_logout(), action="Logout")
    console.ok(f"Logged out. Unset {ENV_TOKEN} in your shell.")


@app.command("refresh")
def refresh(
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        raw: bool = typer.Option(False, "--raw", help="Print only the new token."),
):
    cfg = load_config()

    async def _refresh():
        async with make_client(cfg, token=token) as client:
            data = await client.auth.refresh_token()
            return extract_token(data)

    new_token = run_api(_refresh(), action="Token refresh")
    if not new_token:
        console.err("Refresh response did not contain a token.")
        raise typer.Exit(code=2)
    if raw:
        typer.echo(new_token)
        return
    console.ok(f"Token refreshed: {ENV_TOKEN}={new_token}")
