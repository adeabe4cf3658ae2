"""Registration wire schemas.

Attachments travel as FileReference objects; the five customer-signed
documents are grouped under ``customerDocuments``. Shareholders,
directors, and the per-step additional documents are opaque JSON lists
owned by the frontend.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, computed_field

from app.models.registration import RegistrationStatus, RegistrationStep
from app.schemas.common import CamelModel, FileReference


class CustomerDocuments(CamelModel):
    form1: FileReference | None = None
    letter_of_engagement: FileReference | None = None
    aoa: FileReference | None = None
    form18: FileReference | None = None
    address_proof: FileReference | None = None


class RegistrationContent(CamelModel):
    """Fields a customer or admin may write directly (no workflow meaning)."""

    payment_method: str | None = None

    # ── Attachments ───────────────────────────────────────────
    payment_receipt: FileReference | None = None
    balance_payment_receipt: FileReference | None = None
    form1: FileReference | None = None
    letter_of_engagement: FileReference | None = None
    aoa: FileReference | None = None
    form18: FileReference | None = None
    address_proof: FileReference | None = None
    incorporation_certificate: FileReference | None = None
    step3_additional_doc: list[Any] | None = None
    step3_signed_additional_doc: list[Any] | None = None
    step4_final_additional_doc: list[Any] | None = None

    # ── Company details ───────────────────────────────────────
    company_name_english: str | None = None
    company_name_sinhala: str | None = None
    is_foreign_owned: str | None = None
    business_address_number: str | None = None
    business_address_street: str | None = None
    business_address_city: str | None = None
    postal_code: str | None = None
    share_price: str | None = None
    number_of_shareholders: str | None = None
    shareholders: list[Any] | None = None
    make_simple_books_secretary: str | None = None
    number_of_directors: str | None = None
    directors: list[Any] | None = None
    import_export_status: str | None = None
    imports_to_add: str | None = None
    exports_to_add: str | None = None
    other_business_activities: str | None = None
    drama_sedaka_division: str | None = None
    business_email: str | None = None
    business_contact_number: str | None = None


class WorkflowFields(CamelModel):
    current_step: RegistrationStep | None = None
    status: RegistrationStatus | None = None
    payment_approved: bool | None = None
    details_approved: bool | None = None
    documents_approved: bool | None = None
    documents_published: bool | None = None
    documents_acknowledged: bool | None = None


class RegistrationCreate(RegistrationContent, WorkflowFields):
    id: str | None = Field(default=None, min_length=1, max_length=255)
    company_name: str = Field(min_length=1)
    contact_person_name: str = Field(min_length=1)
    contact_person_email: str = Field(min_length=1)
    contact_person_phone: str = Field(min_length=1)
    selected_package: str = Field(min_length=1)


class RegistrationUpdate(RegistrationContent, WorkflowFields):
    """Partial update; only the keys present in the body are applied."""

    # When sent, must equal the stored version or the write is refused
    version: int | None = None
    company_name: str | None = None
    contact_person_name: str | None = None
    contact_person_email: str | None = None
    contact_person_phone: str | None = None
    selected_package: str | None = None
    customer_documents: CustomerDocuments | None = None


class RegistrationOut(RegistrationContent):
    id: str
    user_id: str | None = None
    version: int
    company_name: str
    contact_person_name: str
    contact_person_email: str
    contact_person_phone: str
    selected_package: str
    current_step: RegistrationStep
    status: RegistrationStatus
    payment_approved: bool
    details_approved: bool
    documents_approved: bool
    documents_published: bool
    documents_acknowledged: bool
    customer_documents: CustomerDocuments | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field(alias="_id")
    @property
    def legacy_id(self) -> str:
        """Copy of ``id`` for dashboards that still read ``_id``."""
        return self.id


class RegistrationWriteResponse(CamelModel):
    success: bool = True
    id: str
    version: int | None = None
    message: str | None = None


class BalancePaymentUpdate(CamelModel):
    balance_payment_receipt: FileReference | None = None


class CustomerDocumentsUpdate(CamelModel):
    customer_documents: CustomerDocuments | None = None
    documents_acknowledged: bool | None = None


class ActionResponse(CamelModel):
    success: bool = True
    action: str
    registration: RegistrationOut


class RegistrationEventOut(CamelModel):
    id: str
    registration_id: str
    action: str
    from_status: str
    to_status: str
    from_step: str
    to_step: str
    actor_id: str | None
    actor_name: str | None
    details: dict | None
    created_at: datetime
