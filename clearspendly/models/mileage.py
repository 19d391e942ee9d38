"""IRS standard mileage rates — historical seed data, never edited."""

import uuid
from datetime import date
from decimal import Decimal

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin


class IRSMileageRate(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "irs_mileage_rate"

    user_id: uuid.UUID | None = Field(default=None, foreign_key="user.id")
    year: int = Field(nullable=False, index=True)
    rate: Decimal = Field(max_digits=6, decimal_places=4)  # USD per mile
    effective_date: date = Field(nullable=False)
    notes: str = Field(default="", max_length=500)
