from __future__ import annotations

from typing import Any, AsyncIterator, Callable

import httpx

from .channels import Channel
from .errors import RequestBuildError
from .models import MultipartForm, UploadProgress

UPLOAD_FIELD_NAME = "file"

ProgressCallback = Callable[[UploadProgress], None]


class _ProgressStream(httpx.AsyncByteStream):
    def __init__(self, stream: Any, total: int | None, callback: ProgressCallback):
        self._stream = stream
        self._total = total
        self._callback = callback

    async def __aiter__(self) -> AsyncIterator[bytes]:
        loaded = 0
        async for chunk in self._stream:
            loaded += len(chunk)
            self._callback(UploadProgress(loaded=loaded, total=self._total))
            yield chunk


class Service:
    """Typed request facade over one channel.

    Methods return the decoded response body. Failures surface as the
    ``GeoMapClientError`` raised by the channel, untouched.
    """

    def __init__(self, channel: Channel, upload_channel: Channel):
        self.channel = channel
        self._upload_channel = upload_channel

    async def get(self, path: str, params: dict[str, Any] | None = None, **config: Any) -> Any:
        return await self.channel.request("GET", path, params=params, **config)

    async def post(self, path: str, data: Any = None, **config: Any) -> Any:
        return await self.channel.request("POST", path, json=data, **config)

    async def put(self, path: str, data: Any = None, **config: Any) -> Any:
        return await self.channel.request("PUT", path, json=data, **config)

    async def patch(self, path: str, data: Any = None, **config: Any) -> Any:
        return await self.channel.request("PATCH", path, json=data, **config)

    async def delete(self, path: str, **config: Any) -> Any:
        return await self.channel.request("DELETE", path, **config)

    async def upload(
            self,
            path: str,
            file: Any,
            on_progress: ProgressCallback | None = None,
            **config: Any,
    ) -> Any:
        """POST a multipart body on the upload channel.

        ``file`` is either a ``MultipartForm`` (sent unchanged) or a bare file
        (binary file object, bytes or an httpx file tuple), wrapped under the
        ``file`` field.
        """
        form = file if isinstance(file, MultipartForm) else MultipartForm(files={UPLOAD_FIELD_NAME: file})
        if not form.files and not form.data:
            raise RequestBuildError("multipart payload is empty")
        files, data = form.files, form.data or None
        if not files:
            # httpx only builds multipart/form-data when at least one part is a file field
            files = {k: (None, str(v)) for k, v in form.data.items()}
            data = None

        # httpx sets multipart/form-data with its boundary; a caller content type would drop it
        headers = {
            k: v for k, v in (config.pop("headers", None) or {}).items()
            if k.lower() != "content-type"
        }
        request = self._upload_channel.build_request(
            "POST",
            path,
            files=files,
            data=data,
            headers=headers,
            **config,
        )
        if on_progress is not None:
            length = request.headers.get("Content-Length")
            total = int(length) if length and length.isdigit() else None
            request.stream = _ProgressStream(request.stream, total, on_progress)
        return await self._upload_channel.send(request)
