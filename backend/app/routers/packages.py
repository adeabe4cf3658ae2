"""Package catalogue.

GET returns only active packages, cheapest first. PUT replaces the active
set: every row is deactivated, then the submitted packages are upserted
and reactivated, all in the request's single transaction.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_admin
from app.database import get_db
from app.middleware.exceptions import ConflictError
from app.models.package import Package
from app.models.user import User
from app.schemas.common import CreatedResponse, SuccessResponse
from app.schemas.package import PackageIn, PackageOut, PackageReplace

router = APIRouter()


def _apply(package: Package, body: PackageIn) -> None:
    package.name = body.name
    package.description = body.description
    package.price = body.price
    package.advance_amount = body.advance_amount or 0
    package.balance_amount = body.balance_amount or 0
    package.features = list(body.features)
    package.is_active = True


@router.get("", response_model=list[PackageOut])
async def list_packages(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Package).where(Package.is_active.is_(True)).order_by(Package.price)
    )
    return result.scalars().all()


@router.post("", response_model=CreatedResponse)
async def create_package(
    body: PackageIn,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    if body.id and await db.get(Package, body.id) is not None:
        raise ConflictError("A package with this id already exists")

    package = Package()
    if body.id:
        package.id = body.id
    _apply(package, body)
    db.add(package)
    await db.flush()
    return CreatedResponse(id=package.id)


@router.put("", response_model=SuccessResponse)
async def replace_packages(
    body: PackageReplace,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    await db.execute(update(Package).values(is_active=False))

    for item in body.packages:
        package = await db.get(Package, item.id) if item.id else None
        if package is None:
            package = Package()
            if item.id:
                package.id = item.id
            db.add(package)
        _apply(package, item)
    await db.flush()
    return SuccessResponse(message=f"{len(body.packages)} package(s) active")
