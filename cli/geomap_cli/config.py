from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from geomap_client.config_types import CHANNEL_NAMES, EndpointConfig
from geomap_client.endpoints import ENV_OVERRIDES, resolve_endpoints

APP_NAME = "geomap"
CONFIG_FILENAME = "config.toml"


@dataclass
class AppConfig:
    endpoints: dict[str, str] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(endpoints={})


def normalize_base_url(raw: str | None) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        return f"http://{value}"
    return f"https://{value}"


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return {"endpoints": {name: url for name, url in cfg.endpoints.items() if url}}


def from_toml(data: dict[str, Any]) -> AppConfig:
    raw = data.get("endpoints") or {}
    endpoints: dict[str, str] = {}
    if isinstance(raw, dict):
        for name, value in raw.items():
            if name not in CHANNEL_NAMES or not isinstance(value, str):
                continue
            url = normalize_base_url(value)
            if url:
                endpoints[name] = url
    return AppConfig(endpoints=endpoints)


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    return path


def resolve_config_endpoints(cfg: AppConfig) -> EndpointConfig:
    return resolve_endpoints(fallbacks=cfg.endpoints)


def endpoint_source(cfg: AppConfig, name: str) -> str:
    if (os.getenv(ENV_OVERRIDES[name]) or "").strip():
        return "env"
    if cfg.endpoints.get(name):
        return "config"
    return "default"

