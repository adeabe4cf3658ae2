from pydantic import Field

from app.schemas.common import CamelModel

_COLOR = r"^#[0-9a-fA-F]{6}$"


class SettingsOut(CamelModel):
    id: str = "default"
    title: str | None
    description: str | None
    logo_url: str | None = None
    favicon_url: str | None = None
    primary_color: str
    secondary_color: str


class SettingsUpdate(CamelModel):
    """Omitted fields fall back to the built-in defaults."""
    title: str | None = None
    description: str | None = None
    logo_url: str | None = None
    favicon_url: str | None = None
    primary_color: str | None = Field(default=None, pattern=_COLOR)
    secondary_color: str | None = Field(default=None, pattern=_COLOR)
