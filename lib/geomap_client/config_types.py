from __future__ import annotations

from dataclasses import dataclass

CHANNEL_NAMES = ("main", "auth", "gis", "upload")

DEFAULT_TIMEOUT_S = 15.0
UPLOAD_TIMEOUT_S = 60.0


@dataclass(frozen=True)
class EndpointConfig:
    main: str
    auth: str
    gis: str
    upload: str

    def url_for(self, name: str) -> str:
        if name not in CHANNEL_NAMES:
            raise ValueError(f"unknown channel: {name!r}")
        return getattr(self, name)

    def as_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in CHANNEL_NAMES}


def channel_timeout(name: str) -> float:
    return UPLOAD_TIMEOUT_S if name == "upload" else DEFAULT_TIMEOUT_S
