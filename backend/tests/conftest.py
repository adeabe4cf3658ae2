"""Pytest configuration and fixtures for IncorpDesk tests.

Every test gets a fresh in-memory SQLite database (aiosqlite) and a
temporary upload directory. The app's lifespan is not run; fixtures set
``app.state.db`` and override the storage dependency directly.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_access_token
from app.auth.password import hash_password
from app.config import settings
from app.database import Database
from app.main import app
from app.models.user import User, UserRole
from app.services.file_storage import FileStorageService, get_file_storage

TEST_PASSWORD = "testpassword123"


# ── Test Database Setup ──────────────────────────────────────────

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Token revocation off unless a test installs a fake Redis."""
    monkeypatch.setattr(settings, "redis_url", "")


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.async_session() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> FileStorageService:
    return FileStorageService(
        upload_dir=tmp_path / "uploads",
        max_file_size=10 * 1024 * 1024,
        url_prefix="/uploads",
    )


@pytest_asyncio.fixture
async def client(database: Database, storage: FileStorageService) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the in-memory database and temp storage."""
    app.state.db = database
    app.dependency_overrides[get_file_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    app.state.db = None


# ── Test Data Fixtures ───────────────────────────────────────────

async def make_user(database: Database, name: str, email: str, role: UserRole) -> User:
    async with database.async_session() as session:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(TEST_PASSWORD),
            role=role,
        )
        session.add(user)
        await session.commit()
        return user


def headers_for(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(database: Database) -> User:
    return await make_user(database, "Admin User", "admin@example.com", UserRole.ADMIN)


@pytest_asyncio.fixture
async def customer_user(database: Database) -> User:
    return await make_user(database, "Test Customer", "customer@example.com", UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def other_customer(database: Database) -> User:
    return await make_user(database, "Other Customer", "other@example.com", UserRole.CUSTOMER)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def customer_headers(customer_user: User) -> dict:
    return headers_for(customer_user)


@pytest.fixture
def other_headers(other_customer: User) -> dict:
    return headers_for(other_customer)


def registration_payload(registration_id: str = "r1", **overrides) -> dict:
    payload = {
        "id": registration_id,
        "companyName": "Acme",
        "contactPersonName": "Jane Doe",
        "contactPersonEmail": "jane@example.com",
        "contactPersonPhone": "+94 77 000 0000",
        "selectedPackage": "basic",
        "paymentReceipt": {
            "id": "f1",
            "name": "receipt.pdf",
            "type": "application/pdf",
            "size": 1200,
            "url": "/uploads/documents/f1.pdf",
        },
    }
    payload.update(overrides)
    return payload


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "workflow: Registration workflow tests")
    config.addinivalue_line("markers", "storage: File storage tests")
