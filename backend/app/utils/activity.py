"""Lightweight helper for recording registration workflow events.

Usage:
    await log_event(
        db, user, registration, action="approve_payment",
        before=old_state, after=new_state,
    )

The row is added to the current session and committed with the
enclosing transaction; no extra flush is performed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.registration_event import RegistrationEvent
from app.models.user import User

if TYPE_CHECKING:
    from app.models.registration import Registration
    from app.services.workflow import WorkflowState


async def log_event(
    db: AsyncSession,
    user: User | None,
    registration: Registration,
    *,
    action: str,
    before: WorkflowState,
    after: WorkflowState,
    details: dict | None = None,
) -> RegistrationEvent:
    """Append a workflow event to the current DB session."""
    entry = RegistrationEvent(
        registration_id=registration.id,
        action=action,
        from_status=before.status.value,
        to_status=after.status.value,
        from_step=before.step.value,
        to_step=after.step.value,
        actor_id=user.id if user else None,
        actor_name=user.name if user else None,
        details=details,
    )
    db.add(entry)
    return entry
