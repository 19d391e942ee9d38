"""User and membership models.

Users are global; a Membership attaches a user to a tenant with a role.
"""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TimestampMixin, new_uuid


class MembershipRole(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "user"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    display_name: str = Field(default="", max_length=255)
    is_active: bool = Field(default=True)


class Membership(TimestampMixin, SQLModel, table=True):
    __tablename__ = "membership"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenant.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True)
    role: MembershipRole = Field(default=MembershipRole.MEMBER)


# ── Pydantic schemas ─────────────────────────────────────────

class UserRead(SQLModel):
    id: uuid.UUID
    email: str
    display_name: str
    is_active: bool
