"""Tests for the file storage service and the upload/files endpoints."""

import base64
import re

import pytest
from httpx import AsyncClient

from app.services.file_storage import FileStorageService, category_for

TEXT_50 = b"x" * 49 + b"\n"


@pytest.mark.storage
@pytest.mark.unit
class TestCategoryFor:

    def test_categories(self):
        assert category_for("image/png") == "images"
        assert category_for("application/pdf") == "documents"
        assert category_for("text/plain") == "documents"
        assert category_for("application/zip") == "temp"

    def test_validate(self, storage: FileStorageService):
        assert storage.validate("application/pdf", 1024) is None
        assert storage.validate("application/pdf", 11 * 1024 * 1024) == (
            "File size exceeds maximum allowed size of 10MB"
        )
        assert storage.validate("application/x-msdownload", 10) == (
            "File type application/x-msdownload is not allowed"
        )


@pytest.mark.storage
@pytest.mark.asyncio
class TestFileStorageService:

    async def test_save_text_file(self, storage: FileStorageService, db_session):
        result = await storage.save_file(db_session, TEXT_50, "notes.txt", "text/plain")

        assert result.success is True
        stored = result.file
        assert stored.category == "documents"
        assert stored.file_size == 50
        assert re.fullmatch(r"/uploads/documents/[0-9a-f]{32}\.txt", stored.url)
        assert (storage.upload_dir / "documents" / stored.file_name).read_bytes() == TEXT_50

    async def test_oversized_file_is_not_written(self, tmp_path, db_session):
        small = FileStorageService(tmp_path / "small", max_file_size=10, url_prefix="/uploads")

        result = await small.save_file(db_session, b"0123456789AB", "big.pdf", "application/pdf")

        assert result.success is False
        assert "maximum allowed size" in result.error
        assert not (tmp_path / "small").exists()

    async def test_disallowed_type_is_not_written(self, storage: FileStorageService, db_session):
        result = await storage.save_file(db_session, b"MZ", "tool.exe", "application/x-msdownload")

        assert result.success is False
        assert result.error == "File type application/x-msdownload is not allowed"
        assert await storage.list_files(db_session) == []

    async def test_lookup_by_id_url_and_relative_path(self, storage: FileStorageService, db_session):
        stored = (await storage.save_file(db_session, b"\x89PNG", "logo.png", "image/png")).file

        assert (await storage.get_file_by_id(db_session, stored.id)).url == stored.url
        assert (await storage.get_file_info(db_session, stored.url)).id == stored.id
        relative = f"images/{stored.file_name}"
        assert (await storage.get_file_info(db_session, relative)).id == stored.id
        assert await storage.get_file_info(db_session, "/uploads/images/missing.png") is None

    async def test_delete_file(self, storage: FileStorageService, db_session):
        stored = (await storage.save_file(db_session, b"%PDF", "a.pdf", "application/pdf")).file
        blob = storage.upload_dir / "documents" / stored.file_name

        assert await storage.delete_file(db_session, stored.url) is True

        assert not blob.exists()
        assert await storage.get_file_by_id(db_session, stored.id) is None
        assert await storage.delete_file(db_session, stored.url) is False

    async def test_list_by_category(self, storage: FileStorageService, db_session):
        await storage.save_file(db_session, b"\x89PNG", "a.png", "image/png")
        await storage.save_file(db_session, b"%PDF", "b.pdf", "application/pdf")

        assert len(await storage.list_files(db_session)) == 2
        images = await storage.list_files(db_session, "images")
        assert [f.original_name for f in images] == ["a.png"]

    async def test_save_base64(self, storage: FileStorageService, db_session):
        payload = base64.b64encode(b"hello world").decode()

        result = await storage.save_base64_file(
            db_session, f"data:text/plain;base64,{payload}", "hello.txt"
        )

        assert result.success is True
        assert result.file.file_size == 11
        assert (storage.upload_dir / "documents" / result.file.file_name).read_bytes() == b"hello world"

    async def test_save_base64_rejects_garbage(self, storage: FileStorageService, db_session):
        result = await storage.save_base64_file(db_session, "data:text/plain;base64,@@@", "x.txt")
        assert result.success is False

        result = await storage.save_base64_file(db_session, "not a data url", "x.txt")
        assert result.error == "Invalid base64 data URL"

    async def test_find_orphans(self, storage: FileStorageService, db_session):
        kept = (await storage.save_file(db_session, b"%PDF", "kept.pdf", "application/pdf")).file
        stray = storage.upload_dir / "documents" / "deadbeef.pdf"
        stray.write_bytes(b"left behind")

        orphans = await storage.find_orphans(db_session)

        assert orphans == [stray]
        assert kept.file_name not in {p.name for p in orphans}


@pytest.mark.storage
@pytest.mark.integration
@pytest.mark.asyncio
class TestUploadEndpoints:

    async def test_upload_text_file(self, client: AsyncClient, customer_user, customer_headers: dict):
        response = await client.post(
            "/api/upload",
            files={"file": ("notes.txt", TEXT_50, "text/plain")},
            headers=customer_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["file"]["category"] == "documents"
        assert data["file"]["fileSize"] == 50
        assert data["file"]["originalName"] == "notes.txt"
        assert data["file"]["uploadedBy"] == customer_user.id
        assert re.fullmatch(r"/uploads/documents/[0-9a-f]{32}\.txt", data["file"]["url"])

    async def test_upload_fetch_delete(self, client: AsyncClient, customer_headers: dict):
        uploaded = (await client.post(
            "/api/upload",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
            headers=customer_headers,
        )).json()["file"]

        by_path = await client.get("/api/upload", params={"path": uploaded["url"]}, headers=customer_headers)
        assert by_path.status_code == 200
        assert by_path.json()["success"] is True
        assert by_path.json()["file"]["id"] == uploaded["id"]

        by_id = await client.get(f"/api/files/{uploaded['id']}", headers=customer_headers)
        assert by_id.status_code == 200
        assert by_id.json()["success"] is True
        assert by_id.json()["file"]["url"] == uploaded["url"]

        deleted = await client.delete("/api/upload", params={"path": uploaded["url"]}, headers=customer_headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "File deleted successfully"

        gone = await client.get(f"/api/files/{uploaded['id']}", headers=customer_headers)
        assert gone.status_code == 404

    async def test_rejected_upload(self, client: AsyncClient, customer_headers: dict):
        response = await client.post(
            "/api/upload",
            files={"file": ("virus.exe", b"MZ", "application/x-msdownload")},
            headers=customer_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UPLOAD_REJECTED"

    async def test_upload_requires_file(self, client: AsyncClient, customer_headers: dict):
        response = await client.post("/api/upload", data={"uploadedBy": "x"}, headers=customer_headers)
        assert response.status_code == 400

    async def test_only_uploader_or_admin_deletes(
        self,
        client: AsyncClient,
        customer_headers: dict,
        other_headers: dict,
        admin_headers: dict,
    ):
        uploaded = (await client.post(
            "/api/upload",
            files={"file": ("a.pdf", b"%PDF", "application/pdf")},
            headers=customer_headers,
        )).json()["file"]

        forbidden = await client.delete(f"/api/files/{uploaded['id']}", headers=other_headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["code"] == "PERMISSION_DENIED"

        allowed = await client.delete(f"/api/files/{uploaded['id']}", headers=admin_headers)
        assert allowed.status_code == 200

    async def test_uploaded_by_only_honoured_for_admins(
        self, client: AsyncClient, customer_user, customer_headers: dict, admin_headers: dict
    ):
        as_customer = (await client.post(
            "/api/upload",
            files={"file": ("a.pdf", b"%PDF", "application/pdf")},
            data={"uploadedBy": "someone-else"},
            headers=customer_headers,
        )).json()["file"]
        assert as_customer["uploadedBy"] == customer_user.id

        on_behalf = (await client.post(
            "/api/upload",
            files={"file": ("b.pdf", b"%PDF", "application/pdf")},
            data={"uploadedBy": customer_user.id},
            headers=admin_headers,
        )).json()["file"]
        assert on_behalf["uploadedBy"] == customer_user.id

    async def test_list_scoped_to_uploader(
        self, client: AsyncClient, customer_headers: dict, other_headers: dict, admin_headers: dict
    ):
        for headers, name in ((customer_headers, "mine.pdf"), (other_headers, "theirs.pdf")):
            await client.post(
                "/api/upload",
                files={"file": (name, b"%PDF", "application/pdf")},
                headers=headers,
            )

        mine = (await client.get("/api/files", headers=customer_headers)).json()
        assert [f["originalName"] for f in mine] == ["mine.pdf"]

        everything = (await client.get("/api/files", params={"category": "documents"}, headers=admin_headers)).json()
        assert len(everything) == 2

    async def test_unknown_category(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/files", params={"category": "videos"}, headers=admin_headers)
        assert response.status_code == 400

    async def test_upload_requires_auth(self, client: AsyncClient):
        response = await client.post(
            "/api/upload", files={"file": ("a.pdf", b"%PDF", "application/pdf")}
        )
        assert response.status_code == 401
