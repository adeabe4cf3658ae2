import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.utils.jsonsafe import SafeJSON


class Package(Base):
    """A priced incorporation offering shown to customers."""

    __tablename__ = "packages"

    id: Mapped[str] = mapped_column(
        String(255), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    advance_amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)
    balance_amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)
    # Ordered list of feature strings
    features: Mapped[list | None] = mapped_column(SafeJSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
