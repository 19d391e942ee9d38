"""TenantUsage model — plan quotas and running counters for a billing period."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from clearspendly.models.base import TenantOwnedMixin, json_column


class TenantUsage(TenantOwnedMixin, SQLModel, table=True):
    __tablename__ = "tenant_usage"

    plan_type: str = Field(max_length=50, nullable=False)
    current_period_start: datetime = Field(nullable=False)
    current_period_end: datetime = Field(nullable=False)

    # Quotas for the plan; -1 means unlimited
    limits: dict = Field(default_factory=dict, sa_column=json_column())
    # Counters incremented by the app at runtime
    usage: dict = Field(default_factory=dict, sa_column=json_column())
