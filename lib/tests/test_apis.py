from __future__ import annotations

import io
import json
import logging

import httpx
import pytest

from geomap_client import ApiError, GeoMapClient, MapBounds, MultipartForm, NetworkError, RequestBuildError
from geomap_client.config_types import EndpointConfig

ENDPOINTS = EndpointConfig(
    main="http://main.test",
    auth="http://auth.test",
    gis="http://gis.test",
    upload="http://upload.test",
)


def _client(handler) -> GeoMapClient:
    return GeoMapClient(ENDPOINTS, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_login_sets_token_for_following_requests() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"token": "t-1", "user": {"id": 1, "name": "Ana", "email": "a@x.test"}})
        return httpx.Response(200, json={"id": 1, "name": "Ana", "email": "a@x.test"})

    async with _client(handler) as client:
        response = await client.auth.login(email="a@x.test", password="secret")
        profile = await client.users.get_profile()

    assert response["user"]["name"] == "Ana"
    assert profile["email"] == "a@x.test"
    assert seen[0].url.host == "auth.test"
    assert json.loads(seen[0].content) == {"email": "a@x.test", "password": "secret"}
    assert "Authorization" not in seen[0].headers
    assert seen[1].url.host == "main.test"
    assert seen[1].headers["Authorization"] == "Bearer t-1"


@pytest.mark.asyncio
async def test_refresh_token_replaces_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "fresh"})

    async with _client(handler) as client:
        client.set_token("old")
        await client.auth.refresh_token()

    assert client.tokens.token == "fresh"
    assert client.channels.gis.headers["Authorization"] == "Bearer fresh"


@pytest.mark.asyncio
async def test_logout_clears_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    async with _client(handler) as client:
        client.set_token("abc")
        await client.auth.logout()

    assert client.tokens.token is None


@pytest.mark.asyncio
async def test_logout_failure_still_clears_token_and_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "logout broken"})

    async with _client(handler) as client:
        client.set_token("abc")
        with pytest.raises(ApiError) as exc_info:
            await client.auth.logout()

    assert exc_info.value.status == 500
    assert client.tokens.token is None
    assert all("Authorization" not in c.headers for c in client.channels)


@pytest.mark.asyncio
async def test_logout_network_failure_still_clears_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    async with _client(handler) as client:
        client.set_token("abc")
        with pytest.raises(NetworkError):
            await client.auth.logout()

    assert client.tokens.token is None


@pytest.mark.asyncio
async def test_user_endpoints() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"users": [], "total": 0})

    async with _client(handler) as client:
        await client.users.get_users(page=2, limit=50)
        await client.users.update_profile({"name": "Bea"})
        await client.users.delete_user(7)

    assert seen[0].url.params["page"] == "2"
    assert seen[0].url.params["limit"] == "50"
    assert seen[1].method == "PUT" and seen[1].url.path == "/user/profile"
    assert seen[2].method == "DELETE" and seen[2].url.path == "/users/7"


@pytest.mark.asyncio
async def test_gis_endpoints() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "1", "name": "Manila", "latitude": 14.6, "longitude": 121.0}])

    bounds = MapBounds(north=40.7831, south=40.7489, east=-73.9441, west=-73.9927)
    async with _client(handler) as client:
        locations = await client.gis.search_location("Manila")
        await client.gis.get_map_data(bounds)
        await client.gis.create_layer({"name": "Projects", "type": "circle", "data": []})
        await client.gis.update_layer("layer 1", {"name": "Renamed"})
        await client.gis.delete_layer("layer-1")

    assert locations[0]["name"] == "Manila"
    assert all(r.url.host == "gis.test" for r in seen)
    assert seen[0].url.path == "/search" and seen[0].url.params["q"] == "Manila"
    assert seen[1].url.path == "/map-data" and seen[1].url.params["north"] == "40.7831"
    assert seen[2].method == "POST" and seen[2].url.path == "/layers"
    assert seen[3].url.raw_path.startswith(b"/layers/layer%201")
    assert seen[4].method == "DELETE"


def test_map_bounds_validation() -> None:
    with pytest.raises(ValueError):
        MapBounds(north=1.0, south=2.0, east=0.0, west=0.0)


@pytest.mark.asyncio
async def test_geojson_goes_through_the_pipeline() -> None:
    seen: list[httpx.Request] = []
    collection = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"status": "Ongoing"}, "geometry": {"type": "Point", "coordinates": [121.0, 14.6]}},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=collection)

    async with _client(handler) as client:
        client.set_token("abc")
        data = await client.gis.get_geojson("https://data.test/projects.geojson")

    assert data == collection
    assert seen[0].url.host == "data.test"
    assert seen[0].headers["Authorization"] == "Bearer abc"
    assert "_t" in seen[0].url.params


@pytest.mark.asyncio
async def test_geojson_on_foreign_host_warns_about_token(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"type": "FeatureCollection", "features": []})

    caplog.set_level(logging.WARNING, logger="geomap_client")
    async with _client(handler) as client:
        await client.gis.get_geojson("/projects.geojson")
        assert not any("outside the gis channel host" in r.getMessage() for r in caplog.records)

        client.set_token("abc")
        await client.gis.get_geojson("https://data.test/projects.geojson")

    warnings = [r for r in caplog.records if "outside the gis channel host" in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].host == "data.test"


@pytest.mark.asyncio
async def test_geojson_rejects_non_geojson_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"rows": []})

    async with _client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.gis.get_geojson("/projects.geojson")

    assert exc_info.value.data == {"rows": []}


@pytest.mark.asyncio
async def test_upload_wraps_bare_file_in_one_field() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "f-1"})

    fh = io.BytesIO(b"col1,col2\n1,2\n")
    fh.name = "points.csv"
    async with _client(handler) as client:
        result = await client.gis_service.upload(
            "/files/upload",
            fh,
            headers={"Content-Type": "application/json"},
        )

    request = seen[0]
    body = request.content
    assert result == {"id": "f-1"}
    assert request.url.host == "upload.test"
    assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert body.count(b"Content-Disposition") == 1
    assert b'name="file"; filename="points.csv"' in body
    assert b"col1,col2" in body


@pytest.mark.asyncio
async def test_upload_forwards_prebuilt_form() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    form = MultipartForm(
        files={"attachment": ("roads.geojson", b"{}", "application/geo+json")},
        data={"layer": "roads"},
    )
    async with _client(handler) as client:
        await client.files.upload(form)

    body = seen[0].content
    assert seen[0].url.path == "/files/upload"
    assert b'name="attachment"; filename="roads.geojson"' in body
    assert b'name="layer"' in body
    assert b'name="file"' not in body


@pytest.mark.asyncio
async def test_upload_reports_progress() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    events = []
    async with _client(handler) as client:
        await client.files.upload(b"x" * 4096, events.append)

    assert events
    assert events[-1].total is not None
    assert events[-1].loaded == events[-1].total
    assert events[-1].percent == 100
    loaded = [e.loaded for e in events]
    assert loaded == sorted(loaded)


@pytest.mark.asyncio
async def test_upload_forwards_fields_only_form_as_multipart() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async with _client(handler) as client:
        await client.files.upload(MultipartForm(data={"layer": "roads", "zoom": 12}))

    request = seen[0]
    body = request.content
    assert request.url.host == "upload.test"
    assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert b'name="layer"' in body
    assert b"roads" in body
    assert b'name="zoom"' in body
    assert b"filename=" not in body


@pytest.mark.asyncio
async def test_upload_rejects_empty_form() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async with _client(handler) as client:
        with pytest.raises(RequestBuildError):
            await client.files.upload(MultipartForm())

    assert calls == []


@pytest.mark.asyncio
async def test_upload_progress_callback_failure_is_request_build_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    def on_progress(progress) -> None:
        raise RuntimeError("callback failed")

    async with _client(handler) as client:
        with pytest.raises(RequestBuildError) as exc_info:
            await client.files.upload(b"abc", on_progress)

    assert exc_info.value.status == 0
    assert exc_info.value.message == "callback failed"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


class _BrokenFile(io.BytesIO):
    name = "broken.csv"

    def read(self, *args):
        raise OSError("disk went away")


@pytest.mark.asyncio
async def test_upload_file_read_failure_is_request_build_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    async with _client(handler) as client:
        with pytest.raises(RequestBuildError) as exc_info:
            await client.files.upload(_BrokenFile(b"a,b\n"))

    assert exc_info.value.message == "disk went away"
