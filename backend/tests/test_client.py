"""Tests for the API client and its offline read cache."""

import httpx
import pytest
from httpx import ASGITransport

from app.client.api_client import ApiClient, ApiError
from app.client.offline_cache import OfflineCache
from app.main import app
from conftest import TEST_PASSWORD, registration_payload

PACKAGES = [{"id": "basic", "name": "Basic", "price": 45000}]


class FlakyServer:
    """MockTransport handler whose behaviour can be switched per test."""

    def __init__(self):
        self.mode = "ok"
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.mode == "down":
            raise httpx.ConnectError("connection refused", request=request)
        if self.mode == "error":
            return httpx.Response(500, json={"error": "boom", "code": "INTERNAL_SERVER_ERROR"})
        if request.url.path == "/api/packages" and request.method == "GET":
            return httpx.Response(200, json=PACKAGES)
        if request.url.path == "/api/packages" and request.method == "PUT":
            return httpx.Response(403, json={"error": "Requires role: admin", "code": "HTTP_403"})
        return httpx.Response(404, json={"error": "Not found", "code": "HTTP_404"})


@pytest.fixture
def server() -> FlakyServer:
    return FlakyServer()


@pytest.fixture
def cache(tmp_path) -> OfflineCache:
    return OfflineCache(tmp_path / "cache")


@pytest.mark.unit
class TestOfflineCache:

    def test_put_get(self, cache: OfflineCache):
        cache.put("/registrations?status=completed", [{"id": "r1"}])
        assert cache.get("/registrations?status=completed") == [{"id": "r1"}]
        assert cache.get("/registrations") is None

    def test_corrupt_entry_reads_as_missing(self, cache: OfflineCache):
        cache.put("/packages", PACKAGES)
        path = next(cache.directory.glob("*.json"))
        path.write_text("[object Object]", encoding="utf-8")

        assert cache.get("/packages") is None

    def test_clear(self, cache: OfflineCache):
        cache.put("/a", 1)
        cache.put("/b", 2)
        cache.clear()
        assert cache.get("/a") is None
        assert list(cache.directory.glob("*.json")) == []


@pytest.mark.asyncio
class TestApiClientFallback:

    async def test_fresh_read_is_cached(self, server: FlakyServer, cache: OfflineCache):
        async with ApiClient("http://api.test", cache=cache, transport=httpx.MockTransport(server)) as api:
            result = await api.list_packages()

        assert result.data == PACKAGES
        assert result.stale is False
        assert cache.get("/packages") == PACKAGES

    async def test_unreachable_server_serves_stale(self, server: FlakyServer, cache: OfflineCache):
        async with ApiClient("http://api.test", cache=cache, transport=httpx.MockTransport(server)) as api:
            await api.list_packages()
            server.mode = "down"
            result = await api.list_packages()

        assert result.data == PACKAGES
        assert result.stale is True

    async def test_server_error_serves_stale(self, server: FlakyServer, cache: OfflineCache):
        async with ApiClient("http://api.test", cache=cache, transport=httpx.MockTransport(server)) as api:
            await api.list_packages()
            server.mode = "error"
            result = await api.list_packages()

        assert result.stale is True

    async def test_no_cache_entry_raises(self, server: FlakyServer, cache: OfflineCache):
        server.mode = "down"
        async with ApiClient("http://api.test", cache=cache, transport=httpx.MockTransport(server)) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.list_packages()

        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "SERVER_UNREACHABLE"

    async def test_server_error_without_cache_propagates(self, server: FlakyServer):
        server.mode = "error"
        async with ApiClient("http://api.test", transport=httpx.MockTransport(server)) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.list_packages()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "boom"

    async def test_client_errors_are_not_masked(self, server: FlakyServer, cache: OfflineCache):
        cache.put("/files/x", {"id": "x"})
        async with ApiClient("http://api.test", cache=cache, transport=httpx.MockTransport(server)) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.get_file("x")
        assert exc_info.value.status_code == 404

    async def test_writes_never_use_cache(self, server: FlakyServer, cache: OfflineCache):
        async with ApiClient("http://api.test", cache=cache, token="t", transport=httpx.MockTransport(server)) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.replace_packages(PACKAGES)

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "HTTP_403"
        assert server.requests[-1].headers["Authorization"] == "Bearer t"


@pytest.mark.integration
@pytest.mark.asyncio
class TestApiClientAgainstApp:

    async def test_customer_flow(self, client, customer_user, tmp_path):
        # client fixture wires app.state.db; reuse the app through the client
        transport = ASGITransport(app=app)
        async with ApiClient("http://test", cache=OfflineCache(tmp_path / "c"), transport=transport) as api:
            await api.login(customer_user.email, TEST_PASSWORD)
            me = await api.me()
            assert me.data["id"] == customer_user.id

            created = await api.create_registration(registration_payload())
            assert created["id"] == "r1"

            action = await api.run_action("r1", "submit_contact_details")
            assert action["registration"]["currentStep"] == "company-details"

            listed = await api.list_registrations()
            assert [r["id"] for r in listed.data] == ["r1"]

            uploaded = await api.upload_file("notes.txt", b"hello", "text/plain")
            fetched = await api.get_file(uploaded["file"]["id"])
            assert fetched.data["success"] is True
            assert fetched.data["file"]["originalName"] == "notes.txt"

            with pytest.raises(ApiError) as exc_info:
                await api.run_action("r1", "approve_payment")
            assert exc_info.value.status_code == 403
