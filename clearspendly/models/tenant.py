"""Tenant model — top-level isolation boundary."""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TimestampMixin, json_column, new_uuid


class SubscriptionPlan(StrEnum):
    FREE = "free"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    subscription_plan: str = Field(default=SubscriptionPlan.FREE, max_length=50)

    # Branding / features / locale defaults, written by the branding setup step
    settings: dict = Field(default_factory=dict, sa_column=json_column())


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    subscription_plan: str
    settings: dict
