from __future__ import annotations

from typing import Any

import httpx

from .apis import AuthApi, FilesApi, GisApi, UserApi
from .channels import ChannelSet
from .config_types import EndpointConfig
from .endpoints import resolve_endpoints
from .service import Service
from .token_store import TokenStore


class GeoMapClient:
    """Entry point: four channels, one token store, the facades and the domain APIs.

    Use as ``async with GeoMapClient() as client: ...`` or call ``aclose()``.
    """

    def __init__(
            self,
            endpoints: EndpointConfig | None = None,
            *,
            token: str | None = None,
            headers: dict[str, str] | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoints = endpoints or resolve_endpoints()
        self.tokens = TokenStore()
        self.channels = ChannelSet(self.endpoints, self.tokens, headers=headers, transport=transport)

        upload = self.channels.upload
        self.main = Service(self.channels.main, upload)
        self.auth_service = Service(self.channels.auth, upload)
        self.gis_service = Service(self.channels.gis, upload)
        self.upload_service = Service(upload, upload)

        self.auth = AuthApi(self.auth_service, self.tokens)
        self.users = UserApi(self.main)
        self.gis = GisApi(self.gis_service)
        self.files = FilesApi(self.upload_service)

        if token:
            self.tokens.set_token(token)

    def service(self, name: str) -> Service:
        return {
            "main": self.main,
            "auth": self.auth_service,
            "gis": self.gis_service,
            "upload": self.upload_service,
        }[self.channels.get(name).name]

    def set_token(self, token: str) -> None:
        self.tokens.set_token(token)

    def clear_token(self) -> None:
        self.tokens.clear_token()

    def set_base_url(self, url: str, name: str = "main") -> None:
        self.channels.set_base_url(name, url)

    async def aclose(self) -> None:
        await self.channels.aclose()

    async def __aenter__(self) -> GeoMapClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
