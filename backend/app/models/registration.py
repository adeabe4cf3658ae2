"""Registration: one company-incorporation case moving through the wizard.

Workflow position is the pair (status, current_step), both constrained to
their enums at the column level. Approval gates are independent booleans
that only change through workflow actions (see app.services.workflow).

Attachments are FileReference dicts ``{id, name, type, size, url}`` kept
in SafeJSON text columns. The customer-signed counterparts of the five
legal documents live in their own ``customer_*`` columns and are grouped
into a single ``customerDocuments`` object on the wire.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.utils.jsonsafe import SafeJSON


class RegistrationStatus(str, enum.Enum):
    PAYMENT_PROCESSING = "payment-processing"
    PAYMENT_REJECTED = "payment-rejected"
    DOCUMENTATION_PROCESSING = "documentation-processing"
    INCORPORATION_PROCESSING = "incorporation-processing"
    COMPLETED = "completed"


class RegistrationStep(str, enum.Enum):
    CONTACT_DETAILS = "contact-details"
    COMPANY_DETAILS = "company-details"
    DOCUMENTATION = "documentation"
    INCORPORATE = "incorporate"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda e: [m.value for m in e],
        native_enum=False,
        validate_strings=True,
    )


# customerDocuments field name -> column attribute
CUSTOMER_DOCUMENT_COLUMNS = {
    "form1": "customer_form1",
    "letter_of_engagement": "customer_letter_of_engagement",
    "aoa": "customer_aoa",
    "form18": "customer_form18",
    "address_proof": "customer_address_proof",
}


class Registration(Base):
    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(
        String(255), primary_key=True, default=lambda: f"reg-{uuid.uuid4().hex}"
    )
    user_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # ── Contact details ───────────────────────────────────────
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_person_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_person_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_person_phone: Mapped[str] = mapped_column(String(255), nullable=False)
    selected_package: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), default="bankTransfer")

    # ── Workflow ──────────────────────────────────────────────
    current_step: Mapped[RegistrationStep] = mapped_column(
        _enum_column(RegistrationStep, "registration_step"),
        default=RegistrationStep.CONTACT_DETAILS,
        nullable=False,
        index=True,
    )
    status: Mapped[RegistrationStatus] = mapped_column(
        _enum_column(RegistrationStatus, "registration_status"),
        default=RegistrationStatus.PAYMENT_PROCESSING,
        nullable=False,
        index=True,
    )
    payment_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    details_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    documents_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    documents_published: Mapped[bool] = mapped_column(Boolean, default=False)
    documents_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Attachments ───────────────────────────────────────────
    payment_receipt: Mapped[dict | None] = mapped_column(SafeJSON)
    balance_payment_receipt: Mapped[dict | None] = mapped_column(SafeJSON)
    form1: Mapped[dict | None] = mapped_column(SafeJSON)
    letter_of_engagement: Mapped[dict | None] = mapped_column(SafeJSON)
    aoa: Mapped[dict | None] = mapped_column(SafeJSON)
    form18: Mapped[dict | None] = mapped_column(SafeJSON)
    address_proof: Mapped[dict | None] = mapped_column(SafeJSON)
    customer_form1: Mapped[dict | None] = mapped_column(SafeJSON)
    customer_letter_of_engagement: Mapped[dict | None] = mapped_column(SafeJSON)
    customer_aoa: Mapped[dict | None] = mapped_column(SafeJSON)
    customer_form18: Mapped[dict | None] = mapped_column(SafeJSON)
    customer_address_proof: Mapped[dict | None] = mapped_column(SafeJSON)
    incorporation_certificate: Mapped[dict | None] = mapped_column(SafeJSON)
    step3_additional_doc: Mapped[list | None] = mapped_column(SafeJSON)
    step3_signed_additional_doc: Mapped[list | None] = mapped_column(SafeJSON)
    step4_final_additional_doc: Mapped[list | None] = mapped_column(SafeJSON)

    # ── Company details ───────────────────────────────────────
    company_name_english: Mapped[str | None] = mapped_column(String(255))
    company_name_sinhala: Mapped[str | None] = mapped_column(String(255))
    is_foreign_owned: Mapped[str | None] = mapped_column(String(10))
    business_address_number: Mapped[str | None] = mapped_column(String(255))
    business_address_street: Mapped[str | None] = mapped_column(String(255))
    business_address_city: Mapped[str | None] = mapped_column(String(255))
    postal_code: Mapped[str | None] = mapped_column(String(20))
    share_price: Mapped[str | None] = mapped_column(String(50))
    number_of_shareholders: Mapped[str | None] = mapped_column(String(10))
    shareholders: Mapped[list | None] = mapped_column(SafeJSON)
    make_simple_books_secretary: Mapped[str | None] = mapped_column(String(10))
    number_of_directors: Mapped[str | None] = mapped_column(String(10))
    directors: Mapped[list | None] = mapped_column(SafeJSON)
    import_export_status: Mapped[str | None] = mapped_column(String(20))
    imports_to_add: Mapped[str | None] = mapped_column(Text)
    exports_to_add: Mapped[str | None] = mapped_column(Text)
    other_business_activities: Mapped[str | None] = mapped_column(Text)
    drama_sedaka_division: Mapped[str | None] = mapped_column(String(255))
    business_email: Mapped[str | None] = mapped_column(String(255))
    business_contact_number: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def customer_documents(self) -> dict | None:
        """The five customer-signed documents as one object, or None if empty."""
        docs = {
            key: getattr(self, column)
            for key, column in CUSTOMER_DOCUMENT_COLUMNS.items()
            if getattr(self, column)
        }
        return docs or None

    @staticmethod
    def customer_document_values(docs: dict | None) -> dict:
        """Column values replacing all five customer documents; absent keys clear."""
        docs = docs or {}
        return {column: docs.get(key) or None for key, column in CUSTOMER_DOCUMENT_COLUMNS.items()}
