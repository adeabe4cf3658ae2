"""Registration routes: the company-incorporation wizard and its review.

Route overview:
  GET    /                        — list (admins: all, customers: own)
  POST   /                        — first wizard submission (idempotent on id)
  PUT    /                        — update, id in body
  GET    /{id}                    — one registration
  PUT    /{id}                    — partial update, workflow changes inferred
  DELETE /{id}                    — delete plus referenced files
  PUT    /{id}/balance-payment    — balance receipt; status "rejected" sends it back
  PUT    /{id}/customer-documents — customer-signed documents + acknowledgement
  POST   /{id}/actions/{action}   — explicit workflow action
  GET    /{id}/events             — workflow audit trail

Every change to status, step, or an approval gate is validated by
app.services.workflow and recorded as a RegistrationEvent.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, is_admin
from app.database import get_db
from app.middleware.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.models.registration import Registration, RegistrationStatus
from app.models.registration_event import RegistrationEvent
from app.models.user import User
from app.services.file_storage import FileStorageService, get_file_storage
from app.services.workflow import (
    ADMIN_ACTIONS,
    ATTACHMENT_FIELDS,
    WORKFLOW_FIELDS,
    Action,
    InvalidTransition,
    WorkflowState,
    apply_action,
    check_content_edit,
    infer_action,
)
from app.schemas.registration import (
    ActionResponse,
    BalancePaymentUpdate,
    CustomerDocumentsUpdate,
    RegistrationCreate,
    RegistrationEventOut,
    RegistrationOut,
    RegistrationUpdate,
    RegistrationWriteResponse,
)
from app.schemas.common import SuccessResponse
from app.utils.activity import log_event
from app.utils.case import dict_keys_to_camel

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that are NOT NULL; a PUT may change them but not clear them
REQUIRED_FIELDS = (
    "company_name",
    "contact_person_name",
    "contact_person_email",
    "contact_person_phone",
    "selected_package",
)


class RegistrationUpdateWithId(RegistrationUpdate):
    id: str


# ── Helpers ──────────────────────────────────────────────────

async def _get_registration(db: AsyncSession, registration_id: str, user: User) -> Registration:
    """Load a registration the user may see; others' registrations are 404."""
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    registration = result.scalar_one_or_none()
    if not registration or (not is_admin(user) and registration.user_id != user.id):
        raise NotFoundError("Registration", registration_id)
    return registration


def _check_action_allowed(user: User, action: Action | None) -> None:
    if action in ADMIN_ACTIONS and not is_admin(user):
        raise PermissionDeniedError(f"Only admins can {action.value.replace('_', ' ')}")


async def _run_action(
    db: AsyncSession,
    user: User,
    registration: Registration,
    action: Action,
    details: dict | None = None,
) -> WorkflowState:
    """Apply one action to the registration and record it."""
    _check_action_allowed(user, action)
    before = WorkflowState.of(registration)
    after = apply_action(before, action)
    after.apply_to(registration)
    await log_event(
        db, user, registration,
        action=action.value, before=before, after=after, details=details,
    )
    logger.info(
        "Registration %s: %s (%s/%s → %s/%s)",
        registration.id, action.value,
        before.status.value, before.step.value,
        after.status.value, after.step.value,
        extra={"registration_id": registration.id, "actor_id": user.id},
    )
    return after


def _attachment_urls(registration: Registration) -> list[str]:
    """Every file URL referenced from a registration's attachment columns."""
    urls = []
    for column in sorted(ATTACHMENT_FIELDS):
        value = getattr(registration, column)
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, dict) and isinstance(item.get("url"), str):
                urls.append(item["url"])
    return urls


async def _apply_update(
    db: AsyncSession,
    user: User,
    registration: Registration,
    body: RegistrationUpdate,
) -> Registration:
    """Apply a partial update: content fields directly, workflow via one action."""
    data = body.model_dump(exclude_unset=True)
    data.pop("id", None)

    version = data.pop("version", None)
    if version is not None and version != registration.version:
        raise ConflictError(
            "Registration was changed by someone else; reload and try again",
            error_code="STALE_VERSION",
        )

    requested = {key: data.pop(key) for key in list(data) if key in WORKFLOW_FIELDS}

    if "customer_documents" in data:
        data.update(Registration.customer_document_values(data.pop("customer_documents")))

    for key in REQUIRED_FIELDS:
        if key in data and not data[key]:
            raise ValidationError(f"{key} cannot be empty")

    changed = {key for key, value in data.items() if getattr(registration, key) != value}

    before = WorkflowState.of(registration)
    content_action = check_content_edit(before, changed)
    action = infer_action(before, requested)
    _check_action_allowed(user, action)

    for key in changed:
        setattr(registration, key, data[key])

    if content_action is not None:
        await log_event(
            db, user, registration, action=content_action.value,
            before=before, after=before, details={"fields": sorted(changed)},
        )
    if action is not None:
        await _run_action(db, user, registration, action)

    if changed or action is not None:
        registration.version += 1
    await db.flush()
    return registration


# ── Collection ───────────────────────────────────────────────

@router.get("", response_model=list[RegistrationOut])
async def list_registrations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    query = select(Registration).order_by(Registration.created_at.desc())
    if not is_admin(user):
        query = query.where(Registration.user_id == user.id)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=RegistrationWriteResponse)
async def create_registration(
    body: RegistrationCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a registration on the first wizard submission.

    Re-posting an existing id the caller owns is a no-op success, so a
    client retrying after a lost response does not create a duplicate.
    """
    if body.id:
        result = await db.execute(select(Registration).where(Registration.id == body.id))
        existing = result.scalar_one_or_none()
        if existing is not None:
            if existing.user_id != user.id and not is_admin(user):
                raise ConflictError("A registration with this id already exists")
            return RegistrationWriteResponse(
                id=existing.id,
                version=existing.version,
                message="Registration already exists",
            )

    data = body.model_dump(exclude_unset=True)
    requested = {key: data.pop(key) for key in list(data) if key in WORKFLOW_FIELDS}
    data.pop("id", None)

    initial = WorkflowState.initial()
    action = infer_action(initial, requested)
    _check_action_allowed(user, action)

    registration = Registration(user_id=user.id, version=1, **data)
    if body.id:
        registration.id = body.id
    initial.apply_to(registration)
    db.add(registration)
    await db.flush()

    if action is not None:
        await _run_action(db, user, registration, action)
        await db.flush()

    logger.info(
        "Registration %s created by %s", registration.id, user.id,
        extra={"registration_id": registration.id},
    )
    return RegistrationWriteResponse(id=registration.id, version=registration.version)


@router.put("", response_model=RegistrationWriteResponse)
async def update_registration_by_body(
    body: RegistrationUpdateWithId,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    registration = await _get_registration(db, body.id, user)
    await _apply_update(db, user, registration, body)
    return RegistrationWriteResponse(id=registration.id, version=registration.version)


# ── Single registration ──────────────────────────────────────

@router.get("/{registration_id}", response_model=RegistrationOut)
async def get_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _get_registration(db, registration_id, user)


@router.put("/{registration_id}", response_model=RegistrationWriteResponse)
async def update_registration(
    registration_id: str,
    body: RegistrationUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    registration = await _get_registration(db, registration_id, user)
    await _apply_update(db, user, registration, body)
    return RegistrationWriteResponse(id=registration.id, version=registration.version)


@router.delete("/{registration_id}", response_model=SuccessResponse)
async def delete_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Delete a registration and, best effort, the files it references.

    Customers may only cancel a registration whose payment was rejected.
    """
    registration = await _get_registration(db, registration_id, user)
    state = WorkflowState.of(registration)
    if not is_admin(user) and state.status != RegistrationStatus.PAYMENT_REJECTED:
        raise InvalidTransition("Only a registration with a rejected payment can be cancelled")

    for url in _attachment_urls(registration):
        if not await storage.delete_file(db, url):
            logger.warning(
                "Could not delete file %s of registration %s", url, registration.id,
                extra={"registration_id": registration.id},
            )

    await db.execute(
        delete(RegistrationEvent).where(RegistrationEvent.registration_id == registration.id)
    )
    await db.delete(registration)
    await db.flush()

    logger.info("Registration %s deleted by %s", registration_id, user.id)
    return SuccessResponse(message="Registration deleted")


# ── Sub-resources ────────────────────────────────────────────

@router.put("/{registration_id}/balance-payment", response_model=SuccessResponse)
async def update_balance_payment(
    registration_id: str,
    body: BalancePaymentUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Store the balance-payment receipt.

    A receipt whose ``status`` is ``rejected`` also sends the registration
    back to the documentation step (admin only).
    """
    registration = await _get_registration(db, registration_id, user)
    receipt = body.model_dump(exclude_unset=True).get("balance_payment_receipt")

    state = WorkflowState.of(registration)
    if receipt != registration.balance_payment_receipt:
        check_content_edit(state, {"balance_payment_receipt"})

    if receipt and receipt.get("status") == "rejected":
        await _run_action(
            db, user, registration, Action.REJECT_BALANCE_PAYMENT,
            details={"receipt": receipt.get("name")},
        )

    registration.balance_payment_receipt = receipt
    registration.version += 1
    await db.flush()
    return SuccessResponse(message="Balance payment receipt updated")


@router.put("/{registration_id}/customer-documents", response_model=SuccessResponse)
async def update_customer_documents(
    registration_id: str,
    body: CustomerDocumentsUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    registration = await _get_registration(db, registration_id, user)
    update = RegistrationUpdate.model_validate(body.model_dump(exclude_unset=True))
    await _apply_update(db, user, registration, update)
    return SuccessResponse(message="Customer documents updated")


@router.post("/{registration_id}/actions/{action}", response_model=ActionResponse)
async def run_action(
    registration_id: str,
    action: Action,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    registration = await _get_registration(db, registration_id, user)
    await _run_action(db, user, registration, action)
    registration.version += 1
    await db.flush()
    await db.refresh(registration)
    return ActionResponse(
        action=action.value,
        registration=RegistrationOut.model_validate(registration),
    )


@router.get("/{registration_id}/events", response_model=list[RegistrationEventOut])
async def list_events(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_registration(db, registration_id, user)
    result = await db.execute(
        select(RegistrationEvent)
        .where(RegistrationEvent.registration_id == registration_id)
        .order_by(RegistrationEvent.created_at, RegistrationEvent.id)
    )
    return [
        RegistrationEventOut.model_validate(event).model_copy(
            update={"details": dict_keys_to_camel(event.details)}
        )
        for event in result.scalars().all()
    ]
