"""Audit records for tenant setup sessions and bulk tenant migrations.

Rows here are appended and updated, never deleted.
"""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TimestampMixin, json_column, new_uuid


class SetupStatus(StrEnum):
    STARTED = "started"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_FAILED = "rollback_failed"


class TenantSetupLog(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant_setup_log"

    # Same value as the setup session id
    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenant.id", nullable=False, index=True)
    user_id: uuid.UUID | None = Field(default=None, foreign_key="user.id")
    setup_version: str = Field(default="1.0.0", max_length=20)
    steps_completed: int = Field(default=0)
    status: SetupStatus = Field(default=SetupStatus.STARTED, index=True)

    # Durable audit record; each transition merges into the previous blob
    setup_data: dict = Field(default_factory=dict, sa_column=json_column())

    rollback_performed: bool | None = Field(default=None)
    rollback_reason: str | None = Field(default=None, max_length=2000)
    completed_at: datetime | None = Field(default=None)


class MigrationLog(TimestampMixin, SQLModel, table=True):
    __tablename__ = "migration_log"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    migration_type: str = Field(max_length=100, nullable=False, index=True)
    migration_version: str = Field(default="1.0.0", max_length=20)
    tenants_processed: int = Field(default=0)
    successful_migrations: int = Field(default=0)
    failed_migrations: int = Field(default=0)
    migration_time_ms: int = Field(default=0)
    migration_data: list = Field(default_factory=list, sa_column=json_column())


# ── Pydantic schemas ─────────────────────────────────────────

class TenantSetupLogRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID | None
    setup_version: str
    steps_completed: int
    status: SetupStatus
    setup_data: dict
    rollback_performed: bool | None
    rollback_reason: str | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class MigrationLogRead(SQLModel):
    id: uuid.UUID
    migration_type: str
    migration_version: str
    tenants_processed: int
    successful_migrations: int
    failed_migrations: int
    migration_time_ms: int
    created_at: datetime
