from __future__ import annotations

import logging
from typing import Any, Iterator

import httpx

from .config_types import CHANNEL_NAMES, EndpointConfig, channel_timeout
from .interceptors import Interceptors
from .token_store import TokenStore

logger = logging.getLogger(__name__)

USER_AGENT = "geomap-client/0.1.0"

# exceptions httpx raises while encoding a request (json body, url, headers)
_BUILD_ERRORS = (TypeError, ValueError, httpx.InvalidURL, httpx.CookieConflict)


class Channel:
    """One independently configured request channel on top of ``httpx.AsyncClient``."""

    def __init__(
            self,
            name: str,
            base_url: str,
            timeout_s: float,
            *,
            interceptors: Interceptors,
            headers: dict[str, str] | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.name = name
        self._interceptors = interceptors
        default_headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if headers:
            default_headers.update(headers)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_s,
            headers=default_headers,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url).rstrip("/")

    @base_url.setter
    def base_url(self, url: str) -> None:
        self._client.base_url = url.rstrip("/")

    @property
    def timeout_s(self) -> float | None:
        return self._client.timeout.read

    @property
    def headers(self) -> httpx.Headers:
        return self._client.headers

    def build_request(self, method: str, path: str, **kwargs: Any) -> httpx.Request:
        """Build and intercept a request. Raises only ``RequestBuildError``."""
        try:
            request = self._client.build_request(method, path, **kwargs)
            return self._interceptors.on_request(self.name, request)
        except _BUILD_ERRORS as e:
            raise self._interceptors.on_request_error(self.name, e) from e

    async def send(self, request: httpx.Request) -> Any:
        """Send a built request and return the decoded body of a 2xx response."""
        try:
            response = await self._client.send(request)
        except httpx.RequestError as e:
            raise self._interceptors.on_transport_error(self.name, e) from e
        except Exception as e:
            # raised while streaming the request body (file read, progress callback)
            raise self._interceptors.on_request_error(self.name, e) from e
        if not response.is_success:
            raise self._interceptors.on_response_error(self.name, response)
        return self._interceptors.on_response(self.name, response)

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        return await self.send(self.build_request(method, path, **kwargs))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Channel:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"Channel(name={self.name!r}, base_url={self.base_url!r})"


def create_channel(
        name: str,
        base_url: str,
        timeout_s: float,
        *,
        token_store: TokenStore,
        interceptors: Interceptors,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
) -> Channel:
    channel = Channel(
        name,
        base_url,
        timeout_s,
        interceptors=interceptors,
        headers=headers,
        transport=transport,
    )
    token_store.attach(channel)
    return channel


class ChannelSet:
    """The main/auth/gis/upload channels, sharing one token store and pipeline."""

    def __init__(
            self,
            endpoints: EndpointConfig,
            token_store: TokenStore,
            *,
            interceptors: Interceptors | None = None,
            headers: dict[str, str] | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_store = token_store
        self.interceptors = interceptors or Interceptors(token_store)
        self._channels: dict[str, Channel] = {}
        for name in CHANNEL_NAMES:
            self._channels[name] = create_channel(
                name,
                endpoints.url_for(name),
                channel_timeout(name),
                token_store=token_store,
                interceptors=self.interceptors,
                headers=headers,
                transport=transport,
            )

    def get(self, name: str) -> Channel:
        try:
            return self._channels[name]
        except KeyError:
            raise ValueError(f"unknown channel: {name!r}") from None

    __getitem__ = get

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels.values())

    @property
    def main(self) -> Channel:
        return self._channels["main"]

    @property
    def auth(self) -> Channel:
        return self._channels["auth"]

    @property
    def gis(self) -> Channel:
        return self._channels["gis"]

    @property
    def upload(self) -> Channel:
        return self._channels["upload"]

    def set_base_url(self, name: str, url: str) -> None:
        channel = self.get(name)
        channel.base_url = url
        logger.info("base url of %s channel set to %s", name, channel.base_url)

    async def aclose(self) -> None:
        for channel in self._channels.values():
            await channel.aclose()

    async def __aenter__(self) -> ChannelSet:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
