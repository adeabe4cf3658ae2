"""Management CLI.

Usage:
    python -m app.cli create-admin EMAIL PASSWORD [NAME]   # first admin account
    python -m app.cli list-files [images|documents|temp]   # stored file metadata
    python -m app.cli cleanup-orphans [--dry-run]          # blobs with no metadata row
"""

import asyncio
import sys

from app.config import settings
from app.database import Database
from app.services.file_storage import FileStorageService
from app.services.seeding import ensure_admin


def _database() -> Database:
    url = settings.resolved_database_url
    if not url:
        print("No database configured (set DATABASE_URL or DB_HOST).")
        sys.exit(1)
    return Database(url)


async def create_admin(email: str, password: str, name: str) -> None:
    database = _database()
    try:
        await database.create_all()
        async with database.async_session() as session:
            user = await ensure_admin(session, email, password, name)
            await session.commit()
        if user is None:
            print("An admin already exists; nothing changed.")
        else:
            print(f"  Admin ready: {user.email} ({user.id})")
    finally:
        await database.dispose()


async def list_files(category: str | None) -> None:
    database = _database()
    storage = FileStorageService()
    try:
        async with database.async_session() as session:
            files = await storage.list_files(session, category)
        for f in files:
            print(f"  {f.id}  {f.category:<9}  {f.file_size:>9}  {f.original_name}")
        print(f"\n{len(files)} file(s)")
    finally:
        await database.dispose()


async def cleanup_orphans(dry_run: bool) -> None:
    database = _database()
    storage = FileStorageService()
    try:
        async with database.async_session() as session:
            orphans = await storage.find_orphans(session)
        for path in orphans:
            print(f"  {'would remove' if dry_run else 'removing'} {path}")
            if not dry_run:
                path.unlink(missing_ok=True)
        print(f"\n{len(orphans)} orphan(s)")
    finally:
        await database.dispose()


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    args = sys.argv[2:]
    if cmd == "create-admin" and len(args) >= 2:
        asyncio.run(create_admin(args[0], args[1], args[2] if len(args) > 2 else settings.admin_name))
    elif cmd == "list-files":
        asyncio.run(list_files(args[0] if args else None))
    elif cmd == "cleanup-orphans":
        asyncio.run(cleanup_orphans("--dry-run" in args))
    else:
        print("Usage: python -m app.cli [create-admin EMAIL PASSWORD [NAME]|list-files [CATEGORY]|cleanup-orphans [--dry-run]]")
