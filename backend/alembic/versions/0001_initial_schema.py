"""Initial schema: users, registrations, workflow events, catalogue, files.

Revision ID: 0001
Revises:
Create Date: 2026-10-16
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

REGISTRATION_STATUSES = (
    "payment-processing",
    "payment-rejected",
    "documentation-processing",
    "incorporation-processing",
    "completed",
)
REGISTRATION_STEPS = ("contact-details", "company-details", "documentation", "incorporate")


def _json(name: str) -> sa.Column:
    # SafeJSON is stored as plain text
    return sa.Column(name, sa.Text())


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "customer", name="user_role", native_enum=False),
            nullable=False,
            server_default="customer",
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "registrations",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("contact_person_name", sa.String(255), nullable=False),
        sa.Column("contact_person_email", sa.String(255), nullable=False),
        sa.Column("contact_person_phone", sa.String(255), nullable=False),
        sa.Column("selected_package", sa.String(255), nullable=False),
        sa.Column("payment_method", sa.String(50), server_default="bankTransfer"),
        sa.Column(
            "current_step",
            sa.Enum(*REGISTRATION_STEPS, name="registration_step", native_enum=False),
            nullable=False,
            server_default="contact-details",
        ),
        sa.Column(
            "status",
            sa.Enum(*REGISTRATION_STATUSES, name="registration_status", native_enum=False),
            nullable=False,
            server_default="payment-processing",
        ),
        sa.Column("payment_approved", sa.Boolean(), server_default=sa.false()),
        sa.Column("details_approved", sa.Boolean(), server_default=sa.false()),
        sa.Column("documents_approved", sa.Boolean(), server_default=sa.false()),
        sa.Column("documents_published", sa.Boolean(), server_default=sa.false()),
        sa.Column("documents_acknowledged", sa.Boolean(), server_default=sa.false()),
        _json("payment_receipt"),
        _json("balance_payment_receipt"),
        _json("form1"),
        _json("letter_of_engagement"),
        _json("aoa"),
        _json("form18"),
        _json("address_proof"),
        _json("customer_form1"),
        _json("customer_letter_of_engagement"),
        _json("customer_aoa"),
        _json("customer_form18"),
        _json("customer_address_proof"),
        _json("incorporation_certificate"),
        _json("step3_additional_doc"),
        _json("step3_signed_additional_doc"),
        _json("step4_final_additional_doc"),
        sa.Column("company_name_english", sa.String(255)),
        sa.Column("company_name_sinhala", sa.String(255)),
        sa.Column("is_foreign_owned", sa.String(10)),
        sa.Column("business_address_number", sa.String(255)),
        sa.Column("business_address_street", sa.String(255)),
        sa.Column("business_address_city", sa.String(255)),
        sa.Column("postal_code", sa.String(20)),
        sa.Column("share_price", sa.String(50)),
        sa.Column("number_of_shareholders", sa.String(10)),
        _json("shareholders"),
        sa.Column("make_simple_books_secretary", sa.String(10)),
        sa.Column("number_of_directors", sa.String(10)),
        _json("directors"),
        sa.Column("import_export_status", sa.String(20)),
        sa.Column("imports_to_add", sa.Text()),
        sa.Column("exports_to_add", sa.Text()),
        sa.Column("other_business_activities", sa.Text()),
        sa.Column("drama_sedaka_division", sa.String(255)),
        sa.Column("business_email", sa.String(255)),
        sa.Column("business_contact_number", sa.String(255)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_registrations_user_id", "registrations", ["user_id"])
    op.create_index("ix_registrations_status", "registrations", ["status"])
    op.create_index("ix_registrations_current_step", "registrations", ["current_step"])
    op.create_index("ix_registrations_created_at", "registrations", ["created_at"])

    op.create_table(
        "registration_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "registration_id",
            sa.String(255),
            sa.ForeignKey("registrations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("from_status", sa.String(50), nullable=False),
        sa.Column("to_status", sa.String(50), nullable=False),
        sa.Column("from_step", sa.String(50), nullable=False),
        sa.Column("to_step", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.String(64)),
        sa.Column("actor_name", sa.String(255)),
        _json("details"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_registration_events_registration_id", "registration_events", ["registration_id"])
    op.create_index("ix_registration_events_action", "registration_events", ["action"])
    op.create_index("ix_registration_events_created_at", "registration_events", ["created_at"])

    op.create_table(
        "packages",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("advance_amount", sa.Numeric(10, 2), server_default="0"),
        sa.Column("balance_amount", sa.Numeric(10, 2), server_default="0"),
        _json("features"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_packages_is_active", "packages", ["is_active"])

    op.create_table(
        "bank_details",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("bank_name", sa.String(255), nullable=False),
        sa.Column("account_name", sa.String(255), nullable=False),
        sa.Column("account_number", sa.String(255), nullable=False),
        sa.Column("branch", sa.String(255)),
        sa.Column("swift_code", sa.String(50)),
        sa.Column("additional_instructions", sa.Text()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_bank_details_is_active", "bank_details", ["is_active"])

    op.create_table(
        "settings",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("title", sa.String(255)),
        sa.Column("description", sa.Text()),
        sa.Column("logo_url", sa.String(500)),
        sa.Column("favicon_url", sa.String(500)),
        sa.Column("primary_color", sa.String(7), server_default="#000000"),
        sa.Column("secondary_color", sa.String(7), server_default="#ffffff"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "document_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("document_type", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(255)),
        sa.Column("size", sa.Integer()),
        sa.Column("url", sa.String(500)),
        sa.Column("file_path", sa.String(500)),
        sa.Column("file_id", sa.String(64)),
        sa.Column("director_index", sa.Integer()),
        sa.Column("uploaded_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_document_templates_document_type", "document_templates", ["document_type"])
    op.create_index("ix_document_templates_created_at", "document_templates", ["created_at"])

    op.create_table(
        "stored_files",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("file_name", sa.String(64), nullable=False),
        sa.Column("file_path", sa.String(1024), nullable=False),
        sa.Column("file_type", sa.String(255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("uploaded_by", sa.String(64)),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_stored_files_category", "stored_files", ["category"])
    op.create_index("ix_stored_files_url", "stored_files", ["url"], unique=True)
    op.create_index("ix_stored_files_uploaded_at", "stored_files", ["uploaded_at"])


def downgrade() -> None:
    op.drop_table("stored_files")
    op.drop_table("document_templates")
    op.drop_table("settings")
    op.drop_table("bank_details")
    op.drop_table("packages")
    op.drop_table("registration_events")
    op.drop_table("registrations")
    op.drop_table("users")
