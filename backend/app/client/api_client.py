"""Async client for the IncorpDesk API.

Reads go to the server first. If the server is unreachable or answers
5xx, the last successful response for the same call is returned from
the offline cache with ``stale=True``; it is never treated as current
and never written back. Writes always go to the server and raise on
failure.

Usage:
    async with ApiClient("http://localhost:8000", cache=OfflineCache(".cache")) as api:
        await api.login("me@example.com", "secret")
        result = await api.list_registrations()
        if result.stale:
            ...
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.client.offline_cache import OfflineCache

logger = logging.getLogger("incorpdesk.client")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, code: str | None = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            response.status_code,
            body.get("error") or response.reason_phrase or "Request failed",
            body.get("code"),
        )


@dataclass
class ApiResult:
    data: Any
    stale: bool = False


class ApiClient:
    def __init__(
        self,
        base_url: str,
        cache: OfflineCache | None = None,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api",
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Plumbing ─────────────────────────────────────────────

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _read(self, path: str, params: dict | None = None) -> ApiResult:
        cache_key = path if not params else f"{path}?{httpx.QueryParams(params)}"
        try:
            response = await self._http.get(path, params=params, headers=self._headers())
        except httpx.TransportError as e:
            return self._fallback(cache_key, e)

        if response.status_code >= 500:
            return self._fallback(cache_key, ApiError.from_response(response))
        if response.is_error:
            raise ApiError.from_response(response)

        data = response.json()
        if self.cache is not None:
            self.cache.put(cache_key, data)
        return ApiResult(data)

    def _fallback(self, cache_key: str, error: Exception) -> ApiResult:
        cached = self.cache.get(cache_key) if self.cache is not None else None
        if cached is None:
            if isinstance(error, ApiError):
                raise error
            raise ApiError(503, f"Server unreachable: {error}", "SERVER_UNREACHABLE") from error
        logger.warning("Serving stale %s from offline cache (%s)", cache_key, error)
        return ApiResult(cached, stale=True)

    async def _write(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        if response.is_error:
            raise ApiError.from_response(response)
        return response.json()

    # ── Auth ─────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> dict:
        data = await self._write("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["accessToken"]
        return data

    async def register(self, name: str, email: str, password: str) -> dict:
        data = await self._write(
            "POST", "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.token = data["accessToken"]
        return data

    async def me(self) -> ApiResult:
        return await self._read("/auth/me")

    # ── Registrations ────────────────────────────────────────

    async def list_registrations(self) -> ApiResult:
        return await self._read("/registrations")

    async def get_registration(self, registration_id: str) -> ApiResult:
        return await self._read(f"/registrations/{registration_id}")

    async def registration_events(self, registration_id: str) -> ApiResult:
        return await self._read(f"/registrations/{registration_id}/events")

    async def create_registration(self, registration: dict) -> dict:
        return await self._write("POST", "/registrations", json=registration)

    async def update_registration(self, registration_id: str, changes: dict) -> dict:
        return await self._write("PUT", f"/registrations/{registration_id}", json=changes)

    async def delete_registration(self, registration_id: str) -> dict:
        return await self._write("DELETE", f"/registrations/{registration_id}")

    async def update_balance_payment(self, registration_id: str, receipt: dict | None) -> dict:
        return await self._write(
            "PUT", f"/registrations/{registration_id}/balance-payment",
            json={"balancePaymentReceipt": receipt},
        )

    async def update_customer_documents(
        self,
        registration_id: str,
        documents: dict | None,
        acknowledged: bool | None = None,
    ) -> dict:
        body: dict = {"customerDocuments": documents}
        if acknowledged is not None:
            body["documentsAcknowledged"] = acknowledged
        return await self._write(
            "PUT", f"/registrations/{registration_id}/customer-documents", json=body
        )

    async def run_action(self, registration_id: str, action: str) -> dict:
        return await self._write("POST", f"/registrations/{registration_id}/actions/{action}")

    # ── Catalogue and settings ───────────────────────────────

    async def list_packages(self) -> ApiResult:
        return await self._read("/packages")

    async def replace_packages(self, packages: list[dict]) -> dict:
        return await self._write("PUT", "/packages", json={"packages": packages})

    async def list_bank_details(self) -> ApiResult:
        return await self._read("/bank-details")

    async def replace_bank_details(self, bank_details: list[dict]) -> dict:
        return await self._write("PUT", "/bank-details", json={"bankDetails": bank_details})

    async def get_settings(self) -> ApiResult:
        return await self._read("/settings")

    async def update_settings(self, values: dict) -> dict:
        return await self._write("PUT", "/settings", json=values)

    async def list_document_templates(self) -> ApiResult:
        return await self._read("/document-templates")

    # ── Files ────────────────────────────────────────────────

    async def upload_file(self, filename: str, content: bytes, mime_type: str) -> dict:
        return await self._write(
            "POST", "/upload", files={"file": (filename, content, mime_type)}
        )

    async def get_file(self, file_id: str) -> ApiResult:
        return await self._read(f"/files/{file_id}")

    async def delete_file(self, file_id: str) -> dict:
        return await self._write("DELETE", f"/files/{file_id}")
