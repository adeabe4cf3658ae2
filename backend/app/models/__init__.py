"""Aggregate model imports for Alembic auto-detection."""

from app.models.user import User, UserRole  # noqa: F401
from app.models.registration import (  # noqa: F401
    Registration,
    RegistrationStatus,
    RegistrationStep,
)
from app.models.registration_event import RegistrationEvent  # noqa: F401
from app.models.package import Package  # noqa: F401
from app.models.bank_detail import BankDetail  # noqa: F401
from app.models.app_settings import AppSettings  # noqa: F401
from app.models.document_template import DocumentTemplate  # noqa: F401
from app.models.stored_file import StoredFile  # noqa: F401
