"""VendorCategory model — business-expense categories for vendors."""

import uuid

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin


class VendorCategory(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "vendor_category"

    name: str = Field(max_length=255, nullable=False)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id")
