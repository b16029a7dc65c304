from __future__ import annotations

import json

import typer
from rich.table import Table
from geomap_client import MapBounds

from .. import console
from ..config import load_config
from ..formatting import count_features_by, format_coord
from ..http import ENV_TOKEN, make_client, run_api

app = typer.Typer(help="GIS data: map data, layers, location search, GeoJSON.")


def _parse_bounds(raw: str | None) -> MapBounds | None:
    if not raw:
        return None
    parts = [p.strip() for p in raw.split(",")]
    try:
        north, south, east, west = (float(p) for p in parts)
        return MapBounds(north=north, south=south, east=east, west=west)
    except ValueError:
        console.err("--bounds expects north,south,east,west (numbers, south <= north).")
        raise typer.Exit(code=2)


def _parse_json_object(raw: str, option: str) -> dict:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        console.err(f"{option} is not valid JSON: {e}")
        raise typer.Exit(code=2)
    if not isinstance(value, dict):
        console.err(f"{option} must be a JSON object.")
        raise typer.Exit(code=2)
    return value


@app.command("map-data")
def map_data(
        bounds: str | None = typer.Option(None, "--bounds", help="north,south,east,west"),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    parsed = _parse_bounds(bounds)
    cfg = load_config()

    async def _get():
        async with make_client(cfg, token=token) as client:
            return await client.gis.get_map_data(parsed)

    console.print_json(run_api(_get(), action="Fetching map data"))


@app.command("layer")
def layer(
        layer_id: str = typer.Argument(..., help="Layer id."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    cfg = load_config()

    async def _get():
        async with make_client(cfg, token=token) as client:
            return await client.gis.get_layer_data(layer_id)

    console.print_json(run_api(_get(), action="Fetching layer"))


@app.command("search")
def search(
        query: str = typer.Argument(..., help="Place name to search for."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    cfg = load_config()

    async def _search():
        async with make_client(cfg, token=token) as client:
            return await client.gis.search_location(query)

    results = run_api(_search(), action="Search")
    if json_out or not isinstance(results, list):
        console.print_json(results)
        return
    if not results:
        console.info(f"No locations found for '{query}'.")
        return

    table = Table(title=f"Locations matching '{query}'")
    table.add_column("id", style="bold")
    table.add_column("name")
    table.add_column("latitude", justify="right")
    table.add_column("longitude", justify="right")
    for loc in results:
        table.add_row(
            str(loc.get("id", "-")),
            str(loc.get("name") or "-"),
            format_coord(loc.get("latitude")),
            format_coord(loc.get("longitude")),
        )
    console.print(table)


@app.command("geojson")
def geojson(
        url: str = typer.Argument(..., help="GeoJSON URL, absolute or relative to the GIS endpoint."),
        group_by: str = typer.Option("status", "--group-by", help="Feature property to count by."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        json_out: bool = typer.Option(False, "--json", help="Print the document instead of a summary."),
):
    cfg = load_config()

    async def _get():
        async with make_client(cfg, token=token) as client:
            return await client.gis.get_geojson(url)

    data = run_api(_get(), action="Fetching GeoJSON")
    if json_out:
        console.print_json(data)
        return

    features = data.get("features") or []
    console.ok(f"{data.get('type')} with {len(features)} feature(s).")
    counts = count_features_by(data, group_by)
    if not counts:
        return
    table = Table(title=f"Features by {group_by}")
    table.add_column(group_by, style="bold")
    table.add_column("count", justify="right")
    for value, count in counts.items():
        table.add_row(value, str(count))
    console.print(table)


@app.command("create-layer")
def create_layer(
        name: str = typer.Option(..., "--name", help="Layer name."),
        layer_type: str = typer.Option("circle", "--type", help="Layer type."),
        data: str = typer.Option("[]", "--data", help="Layer data as a JSON array."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    try:
        items = json.loads(data)
    except json.JSONDecodeError as e:
        console.err(f"--data is not valid JSON: {e}")
        raise typer.Exit(code=2)
    if not isinstance(items, list):
        console.err("--data must be a JSON array.")
        raise typer.Exit(code=2)
    cfg = load_config()

    async def _create():
        async with make_client(cfg, token=token) as client:
            return await client.gis.create_layer({"name": name, "type": layer_type, "data": items})

    created = run_api(_create(), action="Creating layer")
    layer_id = created.get("id") if isinstance(created, dict) else None
    console.ok(f"Layer created (id={layer_id or '-'}).")


@app.command("update-layer")
def update_layer(
        layer_id: str = typer.Argument(..., help="Layer id."),
        changes: str = typer.Option(..., "--set", help='Fields to change as a JSON object, e.g. {"name": "Roads"}.'),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    body = _parse_json_object(changes, "--set")
    cfg = load_config()

    async def _update():
        async with make_client(cfg, token=token) as client:
            return await client.gis.update_layer(layer_id, body)

    run_api(_update(), action="Updating layer")
    console.ok(f"Layer {layer_id} updated.")


@app.command("delete-layer")
def delete_layer(
        layer_id: str = typer.Argument(..., help="Layer id."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
):
    if not yes and not typer.confirm(f"Delete layer {layer_id}?"):
        raise typer.Exit(code=1)
    cfg = load_config()

    async def _delete():
        async with make_client(cfg, token=token) as client:
            await client.gis.delete_layer(layer_id)

    run_api(_delete(), action="Deleting layer")
    console.ok(f"Layer {layer_id} deleted.")
