"""AppSettings: the singleton branding row (id ``default``)."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

SETTINGS_ID = "default"

DEFAULT_SETTINGS = {
    "title": "Dashboard V3",
    "description": "Company Registration Dashboard",
    "logo_url": None,
    "favicon_url": None,
    "primary_color": "#000000",
    "secondary_color": "#ffffff",
}


class AppSettings(Base):
    __tablename__ = "settings"

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=SETTINGS_ID)
    title: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(500))
    favicon_url: Mapped[str | None] = mapped_column(String(500))
    primary_color: Mapped[str] = mapped_column(String(7), default="#000000")
    secondary_color: Mapped[str] = mapped_column(String(7), default="#ffffff")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
