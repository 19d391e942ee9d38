"""Email and invoice templates seeded per tenant."""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin, json_column


class EmailTemplateType(StrEnum):
    INVOICE = "invoice"
    PAYMENT_REMINDER = "payment_reminder"
    PAYMENT_RECEIVED = "payment_received"


class EmailTemplate(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "email_templates"

    template_type: EmailTemplateType = Field(nullable=False)
    name: str = Field(max_length=255, nullable=False)
    description: str = Field(default="", max_length=500)
    subject_template: str = Field(max_length=500)
    greeting_message: str = Field(default="", max_length=2000)
    footer_message: str = Field(default="", max_length=2000)
    primary_color: str = Field(max_length=20)
    secondary_color: str = Field(max_length=20)
    accent_color: str = Field(max_length=20)
    company_name: str = Field(default="", max_length=255)  # denormalized from tenant
    is_active: bool = Field(default=True)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id")


class InvoiceTemplate(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "invoice_template"

    name: str = Field(max_length=255, nullable=False)
    description: str = Field(default="", max_length=500)
    # Layout, colors, typography and section toggles
    template_data: dict = Field(default_factory=dict, sa_column=json_column())
    is_default: bool = Field(default=False)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id")
