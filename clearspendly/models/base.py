"""Shared base fields and column helpers for all models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def json_column() -> Column:
    """A NOT NULL JSON column (JSONB-compatible on Postgres, TEXT on SQLite)."""
    return Column(JSON, nullable=False)


class TimestampMixin(SQLModel):
    """Created / updated timestamps injected into every table."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class TenantOwnedMixin(TimestampMixin):
    """Rows seeded per tenant; every one is deletable by ``tenant_id`` alone."""

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenant.id", nullable=False, index=True)
