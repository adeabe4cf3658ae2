from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class PackageIn(CamelModel):
    id: str | None = None
    name: str = Field(min_length=1)
    description: str | None = None
    price: float = 0
    advance_amount: float | None = 0
    balance_amount: float | None = 0
    features: list[str] = Field(default_factory=list)


class PackageOut(CamelModel):
    id: str
    name: str
    description: str | None
    price: float
    advance_amount: float | None
    balance_amount: float | None
    features: list[str] | None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PackageReplace(CamelModel):
    """Full replacement of the active package set."""
    packages: list[PackageIn] = Field(default_factory=list)
