from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .channels import Channel

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"


class TokenStore:
    """Holds the current bearer token and keeps every attached channel in sync.

    ``set_token``/``clear_token`` update all channels under one lock and without
    suspension points, so no request can be dispatched while only part of the
    channels carry the new value.
    """

    def __init__(self) -> None:
        self._token: str | None = None
        self._channels: list[Channel] = []
        self._lock = threading.RLock()

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def bearer(self) -> str | None:
        token = self._token
        return f"Bearer {token}" if token else None

    def attach(self, channel: Channel) -> None:
        with self._lock:
            if channel in self._channels:
                return
            self._channels.append(channel)
            self._apply(channel)

    def set_token(self, token: str) -> None:
        if not token or not token.strip():
            raise ValueError("token must be a non-empty string")
        with self._lock:
            self._token = token
            for channel in self._channels:
                self._apply(channel)
        logger.debug("bearer token set on %d channel(s)", len(self._channels))

    def clear_token(self) -> None:
        with self._lock:
            self._token = None
            for channel in self._channels:
                self._apply(channel)
        logger.debug("bearer token cleared on %d channel(s)", len(self._channels))

    def _apply(self, channel: Channel) -> None:
        bearer = self.bearer()
        if bearer:
            channel.headers[AUTH_HEADER] = bearer
        else:
            channel.headers.pop(AUTH_HEADER, None)
