from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .errors import ApiError
from .models import Layer, Location, LoginResponse, MapBounds, User
from .service import ProgressCallback, Service
from .token_store import AUTH_HEADER, TokenStore

logger = logging.getLogger(__name__)

GEOJSON_TYPES = {
    "FeatureCollection",
    "Feature",
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
}


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def extract_token(data: Any) -> str | None:
    if isinstance(data, dict):
        token = data.get("token") or data.get("access_token")
        if isinstance(token, str) and token:
            return token
    return None


class AuthApi:
    def __init__(self, service: Service, token_store: TokenStore):
        self._service = service
        self._tokens = token_store

    async def login(self, *, email: str, password: str) -> LoginResponse:
        data = await self._service.post("/auth/login", {"email": email, "password": password})
        token = extract_token(data)
        if token:
            self._tokens.set_token(token)
        return data

    async def logout(self) -> None:
        try:
            await self._service.post("/auth/logout", {})
        finally:
            # local session ends even when the server could not be told
            self._tokens.clear_token()

    async def refresh_token(self) -> dict[str, Any]:
        data = await self._service.post("/auth/refresh", {})
        token = extract_token(data)
        if token:
            self._tokens.set_token(token)
        return data


class UserApi:
    def __init__(self, service: Service):
        self._service = service

    async def get_profile(self) -> User:
        return await self._service.get("/user/profile")

    async def update_profile(self, changes: dict[str, Any]) -> User:
        return await self._service.put("/user/profile", changes)

    async def get_users(self, *, page: int | None = None, limit: int | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if page is not None:
            params["page"] = int(page)
        if limit is not None:
            params["limit"] = int(limit)
        return await self._service.get("/users", params or None)

    async def delete_user(self, user_id: int) -> None:
        await self._service.delete(f"/users/{int(user_id)}")


class GisApi:
    def __init__(self, service: Service):
        self._service = service

    async def get_map_data(self, bounds: MapBounds | None = None) -> Any:
        return await self._service.get("/map-data", bounds.as_params() if bounds else None)

    async def get_layer_data(self, layer_id: str) -> Layer:
        return await self._service.get(f"/layers/{_segment(layer_id)}")

    async def search_location(self, query: str) -> list[Location]:
        return await self._service.get("/search", {"q": query})

    async def create_layer(self, layer: dict[str, Any]) -> Layer:
        return await self._service.post("/layers", layer)

    async def update_layer(self, layer_id: str, changes: dict[str, Any]) -> Layer:
        return await self._service.put(f"/layers/{_segment(layer_id)}", changes)

    async def delete_layer(self, layer_id: str) -> None:
        await self._service.delete(f"/layers/{_segment(layer_id)}")

    async def get_geojson(self, url: str) -> dict[str, Any]:
        """Fetch a GeoJSON document for the map widget.

        ``url`` may be absolute or relative to the GIS channel. The request goes
        through the GIS channel pipeline, so an absolute URL on another host
        also receives the bearer token and cache buster.
        """
        channel = self._service.channel
        target = httpx.URL(url)
        if (
                target.is_absolute_url
                and target.host != httpx.URL(channel.base_url).host
                and AUTH_HEADER in channel.headers
        ):
            logger.warning(
                "bearer token sent to %s outside the gis channel host",
                target.host,
                extra={"channel": channel.name, "host": target.host},
            )
        data = await self._service.get(url)
        if not isinstance(data, dict) or data.get("type") not in GEOJSON_TYPES:
            raise ApiError(422, f"{url} did not return a GeoJSON object", data)
        logger.debug("geojson %s loaded (%d features)", url, len(data.get("features") or []))
        return data


class FilesApi:
    def __init__(self, service: Service):
        self._service = service

    async def upload(
            self,
            file: Any,
            on_progress: ProgressCallback | None = None,
            *,
            path: str = "/files/upload",
    ) -> Any:
        return await self._service.upload(path, file, on_progress)
