from __future__ import annotations

import os
from typing import Mapping

from .config_types import CHANNEL_NAMES, EndpointConfig

ENV_OVERRIDES = {
    "main": "GEOMAP_API_BASE_URL",
    "auth": "GEOMAP_AUTH_API_URL",
    "gis": "GEOMAP_GIS_API_URL",
    "upload": "GEOMAP_UPLOAD_API_URL",
}

DEFAULT_ENDPOINTS = {
    "main": "https://api.example.com",
    "auth": "https://auth.example.com",
    "gis": "https://gis.example.com",
    "upload": "https://upload.example.com",
}


def _clean(value: str | None) -> str:
    return (value or "").strip().rstrip("/")


def resolve_endpoints(
        env: Mapping[str, str] | None = None,
        fallbacks: Mapping[str, str] | None = None,
) -> EndpointConfig:
    """Resolve the base URL of every channel.

    Precedence: environment override, then ``fallbacks`` (config file values),
    then the built-in default. Blank values are treated as unset.
    """
    source = os.environ if env is None else env
    resolved: dict[str, str] = {}
    for name in CHANNEL_NAMES:
        value = _clean(source.get(ENV_OVERRIDES[name]))
        if not value and fallbacks:
            value = _clean(fallbacks.get(name))
        resolved[name] = value or DEFAULT_ENDPOINTS[name]
    return EndpointConfig(**resolved)
