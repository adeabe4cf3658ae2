"""Branding settings: a single row with id "default"."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_admin
from app.database import get_db
from app.models.app_settings import DEFAULT_SETTINGS, SETTINGS_ID, AppSettings
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.settings import SettingsOut, SettingsUpdate

router = APIRouter()


@router.get("", response_model=SettingsOut)
async def get_settings(db: AsyncSession = Depends(get_db)):
    row = await db.get(AppSettings, SETTINGS_ID)
    if row is None:
        return SettingsOut(id=SETTINGS_ID, **DEFAULT_SETTINGS)
    return row


@router.put("", response_model=SuccessResponse)
async def update_settings(
    body: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    row = await db.get(AppSettings, SETTINGS_ID)
    if row is None:
        row = AppSettings(id=SETTINGS_ID)
        db.add(row)

    values = body.model_dump()
    for key, default in DEFAULT_SETTINGS.items():
        setattr(row, key, values.get(key) or default)
    await db.flush()
    return SuccessResponse(message="Settings updated")
