"""Bank details shown to customers paying by bank transfer.

Same replace-all semantics as packages: PUT deactivates every row and
upserts the submitted set inside one transaction.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_admin
from app.database import get_db
from app.middleware.exceptions import ConflictError
from app.models.bank_detail import BankDetail
from app.models.user import User
from app.schemas.bank_detail import BankDetailIn, BankDetailOut, BankDetailReplace
from app.schemas.common import CreatedResponse, SuccessResponse

router = APIRouter()


def _apply(detail: BankDetail, body: BankDetailIn) -> None:
    detail.bank_name = body.bank_name
    detail.account_name = body.account_name
    detail.account_number = body.account_number
    detail.branch = body.branch
    detail.swift_code = body.swift_code
    detail.additional_instructions = body.additional_instructions
    detail.is_active = True


@router.get("", response_model=list[BankDetailOut])
async def list_bank_details(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(BankDetail)
        .where(BankDetail.is_active.is_(True))
        .order_by(BankDetail.bank_name)
    )
    return result.scalars().all()


@router.post("", response_model=CreatedResponse)
async def create_bank_detail(
    body: BankDetailIn,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    if body.id and await db.get(BankDetail, body.id) is not None:
        raise ConflictError("Bank detail with this id already exists")

    detail = BankDetail()
    if body.id:
        detail.id = body.id
    _apply(detail, body)
    db.add(detail)
    await db.flush()
    return CreatedResponse(id=detail.id)


@router.put("", response_model=SuccessResponse)
async def replace_bank_details(
    body: BankDetailReplace,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    await db.execute(update(BankDetail).values(is_active=False))

    for item in body.bank_details:
        detail = await db.get(BankDetail, item.id) if item.id else None
        if detail is None:
            detail = BankDetail()
            if item.id:
                detail.id = item.id
            db.add(detail)
        _apply(detail, item)
    await db.flush()
    return SuccessResponse(message=f"{len(body.bank_details)} bank detail(s) active")
