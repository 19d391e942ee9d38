"""Tag taxonomy — categories and the tags that belong to them."""

import uuid

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin


class TagCategory(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "tag_category"

    name: str = Field(max_length=100, nullable=False)
    description: str = Field(default="", max_length=500)
    color: str = Field(default="#6b7280", max_length=20)
    required: bool = Field(default=False)
    # Whether more than one tag from this category may be applied to a receipt
    multiple: bool = Field(default=False)
    sort_order: int = Field(default=0)


class Tag(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "tag"

    category_id: uuid.UUID = Field(foreign_key="tag_category.id", nullable=False, index=True)
    name: str = Field(max_length=100, nullable=False)
    created_by: uuid.UUID | None = Field(default=None, foreign_key="user.id")
