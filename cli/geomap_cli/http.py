from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

import typer

from geomap_client import GeoMapClient, GeoMapClientError

from . import console
from .config import AppConfig, resolve_config_endpoints

T = TypeVar("T")

ENV_TOKEN = "GEOMAP_TOKEN"


def make_client(cfg: AppConfig, *, token: str | None = None) -> GeoMapClient:
    token = (token or "").strip() or None
    return GeoMapClient(resolve_config_endpoints(cfg), token=token)


def run_api(coro: Coroutine[Any, Any, T], *, action: str) -> T:
    """Run one client coroutine, turning client errors into ``Exit(2)``."""
    try:
        return asyncio.run(coro)
    except GeoMapClientError as e:
        suffix = f" (status {e.status})" if e.status else ""
        console.err(f"{action} failed: {e.message}{suffix}")
        raise typer.Exit(code=2)
