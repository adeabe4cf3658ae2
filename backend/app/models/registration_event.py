"""RegistrationEvent: immutable audit trail of workflow actions.

Records who moved a registration, from where, to where, and when.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.utils.jsonsafe import SafeJSON


class RegistrationEvent(Base):
    __tablename__ = "registration_events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    registration_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("registrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── What ───────────────────────────────────────────────────
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    from_status: Mapped[str] = mapped_column(String(50), nullable=False)
    to_status: Mapped[str] = mapped_column(String(50), nullable=False)
    from_step: Mapped[str] = mapped_column(String(50), nullable=False)
    to_step: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Who ────────────────────────────────────────────────────
    actor_id: Mapped[str | None] = mapped_column(String(64))
    actor_name: Mapped[str | None] = mapped_column(String(255))

    # ── Context ────────────────────────────────────────────────
    details: Mapped[dict | None] = mapped_column(SafeJSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
