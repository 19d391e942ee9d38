"""Tenant setup endpoints — full setup, status probe and drift repair."""

import uuid
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from clearspendly.api.deps import AdminRequired, SetupService
from clearspendly.models.tenant import SubscriptionPlan
from clearspendly.services.setup_steps import SetupContext
from clearspendly.services.tenant_setup import PLACEHOLDER_COMPANY_NAME, SetupResult

router = APIRouter(prefix="/tenant-setup", tags=["tenant-setup"], dependencies=[AdminRequired])


# ── Request / response schemas ───────────────────────────────

class TenantSetupRequest(BaseModel):
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    user_email: str = Field(default="", max_length=320)
    company_name: str = Field(max_length=255)
    # Free-form on purpose: unknown plans are seeded with free-tier limits
    subscription_plan: str = Field(default=SubscriptionPlan.FREE, max_length=50)


class RepairRequest(BaseModel):
    user_id: uuid.UUID
    company_name: str = Field(default=PLACEHOLDER_COMPANY_NAME, max_length=255)
    subscription_plan: str = Field(default=SubscriptionPlan.FREE, max_length=50)


class SetupResultRead(BaseModel):
    success: bool
    message: str
    data: Any = None
    errors: list[str] | None = None
    rollback_performed: bool = False
    setup_time_ms: int | None = None

    @classmethod
    def from_result(cls, result: SetupResult) -> "SetupResultRead":
        return cls(**asdict(result))


class SetupStatusResponse(BaseModel):
    tenant_id: uuid.UUID
    setup_completed: bool


# ── Routes ────────────────────────────────────────────────────

@router.post("", response_model=SetupResultRead, summary="Run full tenant setup")
async def run_tenant_setup(body: TenantSetupRequest, service: SetupService) -> SetupResultRead:
    """Seed every default component for a tenant, rolling back on failure.

    Always answers 200; ``success`` and ``errors`` carry the outcome.
    """
    context = SetupContext(
        tenant_id=body.tenant_id,
        user_id=body.user_id,
        user_email=body.user_email,
        company_name=body.company_name,
        subscription_plan=body.subscription_plan,
    )
    result = await service.setup_tenant(context)
    return SetupResultRead.from_result(result)


@router.get("/{tenant_id}/status", response_model=SetupStatusResponse)
async def get_setup_status(tenant_id: uuid.UUID, service: SetupService) -> SetupStatusResponse:
    completed = await service.check_tenant_setup_status(tenant_id)
    return SetupStatusResponse(tenant_id=tenant_id, setup_completed=completed)


@router.post(
    "/{tenant_id}/repair",
    response_model=SetupResultRead,
    summary="Add components missing from an existing tenant",
)
async def repair_tenant(
    tenant_id: uuid.UUID, body: RepairRequest, service: SetupService
) -> SetupResultRead:
    result = await service.add_missing_components(
        tenant_id,
        body.user_id,
        company_name=body.company_name,
        subscription_plan=body.subscription_plan,
    )
    return SetupResultRead.from_result(result)
