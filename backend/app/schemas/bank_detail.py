from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class BankDetailIn(CamelModel):
    id: str | None = None
    bank_name: str = Field(min_length=1)
    account_name: str = Field(min_length=1)
    account_number: str = Field(min_length=1)
    branch: str | None = None
    swift_code: str | None = None
    additional_instructions: str | None = None


class BankDetailOut(CamelModel):
    id: str
    bank_name: str
    account_name: str
    account_number: str
    branch: str | None
    swift_code: str | None
    additional_instructions: str | None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BankDetailReplace(CamelModel):
    bank_details: list[BankDetailIn] = Field(default_factory=list)
