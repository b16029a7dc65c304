from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from .errors import (
    ApiError,
    AuthError,
    GeoMapClientError,
    NetworkError,
    RequestBuildError,
    UNEXPECTED_ERROR_MESSAGE,
)
from .token_store import AUTH_HEADER, TokenStore

logger = logging.getLogger(__name__)

CACHE_BUSTER_PARAM = "_t"

_STATUS_DIAGNOSTICS = {
    403: "Access forbidden",
    404: "Resource not found",
    500: "Internal server error",
}


def decode_body(response: httpx.Response) -> Any:
    """JSON when the body parses, raw text otherwise, ``None`` for an empty body."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def extract_message(data: Any) -> str | None:
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


class Interceptors:
    """Request/response/error steps shared by reference by every channel.

    All conversion of transport outcomes into ``GeoMapClientError`` happens
    here, once. Callers above the channel never re-wrap errors.
    """

    def __init__(self, token_store: TokenStore, *, clock: Callable[[], float] = time.time):
        self._tokens = token_store
        self._clock = clock

    # --- request phase ---
    def on_request(self, channel: str, request: httpx.Request) -> httpx.Request:
        stamp = str(int(self._clock() * 1000))
        request.url = request.url.copy_merge_params({CACHE_BUSTER_PARAM: stamp})

        bearer = self._tokens.bearer()
        if bearer:
            request.headers[AUTH_HEADER] = bearer

        logger.debug(
            "request %s %s",
            request.method,
            request.url.path,
            extra={"channel": channel, "method": request.method, "path": request.url.path},
        )
        return request

    def on_request_error(self, channel: str, exc: Exception) -> GeoMapClientError:
        message = str(exc) or UNEXPECTED_ERROR_MESSAGE
        logger.error("request error on %s channel: %s", channel, message, extra={"channel": channel})
        return RequestBuildError(message)

    # --- response phase ---
    def on_response(self, channel: str, response: httpx.Response) -> Any:
        path = response.request.url.path
        logger.debug(
            "response %s %s",
            response.status_code,
            path,
            extra={"channel": channel, "status": response.status_code, "path": path},
        )
        return decode_body(response)

    def on_response_error(self, channel: str, response: httpx.Response) -> ApiError:
        status = response.status_code
        path = response.request.url.path
        data = decode_body(response)
        message = extract_message(data) or f"Request failed with status code {status}"
        extra = {"channel": channel, "status": status, "path": path}
        logger.warning("response error %s %s", status, path, extra=extra)

        if status == 401:
            # any 401 invalidates the session on every channel
            self._tokens.clear_token()
            logger.warning("unauthorized, bearer token cleared", extra=extra)
        elif status in _STATUS_DIAGNOSTICS:
            logger.error(_STATUS_DIAGNOSTICS[status], extra=extra)
        else:
            logger.error("An error occurred: %s", message, extra=extra)

        if status in (401, 403):
            return AuthError(status, message, data)
        return ApiError(status, message, data)

    def on_transport_error(self, channel: str, exc: httpx.RequestError) -> GeoMapClientError:
        if isinstance(exc, (httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
            # the request never left the process
            return self.on_request_error(channel, exc)
        logger.error("network error on %s channel: %s", channel, exc, extra={"channel": channel})
        return NetworkError()
