"""Per-user preferences within a tenant."""

import uuid

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin, json_column


class UserPreferences(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "user_preferences"

    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, index=True)
    preferences: dict = Field(default_factory=dict, sa_column=json_column())
