from __future__ import annotations

import os

import typer
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn, TransferSpeedColumn
from geomap_client import UploadProgress

from .. import console
from ..config import load_config
from ..formatting import format_size
from ..http import ENV_TOKEN, make_client, run_api

app = typer.Typer(help="File uploads.")


@app.command("upload")
def upload(
        path: str = typer.Argument(..., help="Local file to upload."),
        target: str = typer.Option("/files/upload", "--target", help="Upload path on the upload endpoint."),
        token: str | None = typer.Option(None, "--token", envvar=ENV_TOKEN, help="Bearer token."),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the progress bar."),
):
    if not os.path.isfile(path):
        console.err(f"File not found: {path}")
        raise typer.Exit(code=2)
    cfg = load_config()
    size = os.path.getsize(path)

    progress = Progress(
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console.console,
        disable=quiet,
    )
    task_id = progress.add_task(os.path.basename(path), total=size)

    def _on_progress(event: UploadProgress) -> None:
        progress.update(task_id, completed=event.loaded, total=event.total or size)

    async def _upload():
        with open(path, "rb") as fh:
            async with make_client(cfg, token=token) as client:
                return await client.files.upload(fh, _on_progress, path=target)

    with progress:
        result = run_api(_upload(), action="Upload")

    console.ok(f"Uploaded {os.path.basename(path)} ({format_size(size)}).")
    if result not in (None, ""):
        console.print_json(result)
