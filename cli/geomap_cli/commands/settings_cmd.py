from __future__ import annotations

import typer
from rich.table import Table
from geomap_client.config_types import CHANNEL_NAMES, channel_timeout
from geomap_client.endpoints import ENV_OVERRIDES

from .. import console
from ..config import config_path, endpoint_source, load_config, normalize_base_url, resolve_config_endpoints, save_config

app = typer.Typer(help="Endpoint settings (env overrides > config file > defaults).")


def _check_channel(channel: str) -> str:
    name = channel.strip().lower()
    if name not in CHANNEL_NAMES:
        console.err(f"Unknown channel '{channel}'. Expected one of: {', '.join(CHANNEL_NAMES)}.")
        raise typer.Exit(code=2)
    return name


@app.command("show")
def show(
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    cfg = load_config()
    resolved = resolve_config_endpoints(cfg)
    if json_out:
        console.print_json(resolved.as_dict())
        return

    table = Table(title="Endpoints")
    table.add_column("channel", style="bold")
    table.add_column("base_url")
    table.add_column("timeout", justify="right")
    table.add_column("source")
    table.add_column("env")
    for name in CHANNEL_NAMES:
        table.add_row(
            name,
            resolved.url_for(name),
            f"{channel_timeout(name):g}s",
            endpoint_source(cfg, name),
            ENV_OVERRIDES[name],
        )
    console.print(table)


@app.command("set")
def set_endpoint(
        channel: str = typer.Argument(..., help="main, auth, gis or upload."),
        url: str = typer.Argument(..., help="Base URL for the channel."),
):
    name = _check_channel(channel)
    normalized = normalize_base_url(url)
    if not normalized:
        console.err("URL must not be empty.")
        raise typer.Exit(code=2)
    cfg = load_config()
    cfg.endpoints[name] = normalized
    path = save_config(cfg)
    console.ok(f"{name} endpoint set to {normalized} in {path}.")
    if endpoint_source(cfg, name) == "env":
        console.warn(f"{ENV_OVERRIDES[name]} is set and takes precedence.")


@app.command("unset")
def unset_endpoint(
        channel: str = typer.Argument(..., help="main, auth, gis or upload."),
):
    name = _check_channel(channel)
    cfg = load_config()
    if cfg.endpoints.pop(name, None) is None:
        console.info(f"{name} endpoint is not set in {config_path()}.")
        return
    save_config(cfg)
    console.ok(f"{name} endpoint removed from config.")
