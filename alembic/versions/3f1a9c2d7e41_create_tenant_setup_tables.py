"""create tenant, seed data and setup audit tables

Revision ID: 3f1a9c2d7e41
Revises:
Create Date: 2026-10-19 09:12:44.120318

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e41'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _tenant_owned(table: str, *columns: sa.Column) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenant.id"), nullable=False),
        *columns,
        *_timestamps(),
    )
    op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])


def upgrade() -> None:
    op.create_table(
        "tenant",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("subscription_plan", sa.String(50), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tenant_slug", "tenant", ["slug"], unique=True)

    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "membership",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenant.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column(
            "role",
            sa.Enum("OWNER", "ADMIN", "MEMBER", name="membershiprole"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_membership_tenant_id", "membership", ["tenant_id"])
    op.create_index("ix_membership_user_id", "membership", ["user_id"])

    _tenant_owned(
        "tag_category",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False),
        sa.Column("multiple", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
    )
    _tenant_owned(
        "tag",
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("tag_category.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
    )
    op.create_index("ix_tag_category_id", "tag", ["category_id"])

    _tenant_owned(
        "email_templates",
        sa.Column(
            "template_type",
            sa.Enum("INVOICE", "PAYMENT_REMINDER", "PAYMENT_RECEIVED", name="emailtemplatetype"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("subject_template", sa.String(500), nullable=False),
        sa.Column("greeting_message", sa.String(2000), nullable=False),
        sa.Column("footer_message", sa.String(2000), nullable=False),
        sa.Column("primary_color", sa.String(20), nullable=False),
        sa.Column("secondary_color", sa.String(20), nullable=False),
        sa.Column("accent_color", sa.String(20), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
    )
    _tenant_owned(
        "invoice_template",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("template_data", sa.JSON(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
    )
    _tenant_owned(
        "user_preferences",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
    )
    op.create_index("ix_user_preferences_user_id", "user_preferences", ["user_id"])

    _tenant_owned(
        "irs_mileage_rate",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.String(500), nullable=False),
    )
    op.create_index("ix_irs_mileage_rate_year", "irs_mileage_rate", ["year"])

    _tenant_owned(
        "tenant_usage",
        sa.Column("plan_type", sa.String(50), nullable=False),
        sa.Column("current_period_start", sa.DateTime(), nullable=False),
        sa.Column("current_period_end", sa.DateTime(), nullable=False),
        sa.Column("limits", sa.JSON(), nullable=False),
        sa.Column("usage", sa.JSON(), nullable=False),
    )
    _tenant_owned(
        "vendor_category",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
    )

    op.create_table(
        "tenant_setup_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenant.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("setup_version", sa.String(20), nullable=False),
        sa.Column("steps_completed", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "STARTED", "COMPLETED", "ROLLED_BACK", "ROLLBACK_FAILED", name="setupstatus"
            ),
            nullable=False,
        ),
        sa.Column("setup_data", sa.JSON(), nullable=False),
        sa.Column("rollback_performed", sa.Boolean(), nullable=True),
        sa.Column("rollback_reason", sa.String(2000), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tenant_setup_log_tenant_id", "tenant_setup_log", ["tenant_id"])
    op.create_index("ix_tenant_setup_log_status", "tenant_setup_log", ["status"])

    op.create_table(
        "migration_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("migration_type", sa.String(100), nullable=False),
        sa.Column("migration_version", sa.String(20), nullable=False),
        sa.Column("tenants_processed", sa.Integer(), nullable=False),
        sa.Column("successful_migrations", sa.Integer(), nullable=False),
        sa.Column("failed_migrations", sa.Integer(), nullable=False),
        sa.Column("migration_time_ms", sa.Integer(), nullable=False),
        sa.Column("migration_data", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_migration_log_migration_type", "migration_log", ["migration_type"])


def downgrade() -> None:
    for table in (
        "migration_log",
        "tenant_setup_log",
        "vendor_category",
        "tenant_usage",
        "irs_mileage_rate",
        "user_preferences",
        "invoice_template",
        "email_templates",
        "tag",
        "tag_category",
        "membership",
        "user",
        "tenant",
    ):
        op.drop_table(table)
    for enum_name in ("setupstatus", "emailtemplatetype", "membershiprole"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
