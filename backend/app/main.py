import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.database import Database
from app.middleware.exceptions import register_exception_handlers
from app.routers import (
    auth,
    bank_details,
    document_templates,
    files,
    health,
    packages,
    registrations,
    users,
)
from app.routers import settings as settings_router
from app.services.file_storage import get_file_storage
from app.services.seeding import ensure_admin
from app.utils.cache import close_redis

logger = logging.getLogger("incorpdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database, prepare storage and the first admin; close on shutdown.

    Without a database URL the app still starts; DB-backed routes answer 503.
    """
    get_file_storage().ensure_directories()

    url = settings.resolved_database_url
    database = Database(url, echo=settings.debug) if url else None
    app.state.db = database

    if database is None:
        logger.warning("No database configured; API runs in degraded mode (503)")
    else:
        if settings.auto_create_tables:
            await database.create_all()
        async with database.async_session() as session:
            await ensure_admin(
                session,
                settings.admin_email,
                settings.admin_password,
                settings.admin_name,
            )
            await session.commit()
        logger.info("Database ready")

    yield

    if database is not None:
        await database.dispose()
    await close_redis()


app = FastAPI(
    title="IncorpDesk",
    description="Company incorporation dashboard backend",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(registrations.router, prefix="/api/registrations", tags=["registrations"])
app.include_router(packages.router, prefix="/api/packages", tags=["packages"])
app.include_router(bank_details.router, prefix="/api/bank-details", tags=["bank-details"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["settings"])
app.include_router(
    document_templates.router, prefix="/api/document-templates", tags=["document-templates"]
)
app.include_router(files.upload_router, prefix="/api/upload", tags=["files"])
app.include_router(files.files_router, prefix="/api/files", tags=["files"])

# ── Uploaded blobs ───────────────────────────────────────────
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
