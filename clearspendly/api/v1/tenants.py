"""Tenant sign-up (bootstrap) and lookup endpoints."""

import uuid

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import select

from clearspendly.api.deps import AdminRequired, Session, SetupService
from clearspendly.api.v1.tenant_setup import SetupResultRead
from clearspendly.models.tenant import SubscriptionPlan, Tenant, TenantRead
from clearspendly.models.user import Membership, MembershipRole, User, UserRead
from clearspendly.services.setup_steps import SetupContext

router = APIRouter(prefix="/tenants", tags=["tenants"])


# ── Bootstrap request / response schemas ──────────────────────

class TenantBootstrapRequest(BaseModel):
    """Everything needed to create a tenant + owner and seed its defaults."""
    tenant_name: str = Field(min_length=1, max_length=255)
    tenant_slug: str = Field(max_length=100, pattern=r"^[a-z0-9\-]+$")
    owner_email: EmailStr
    owner_display_name: str = Field(default="", max_length=255)
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE
    run_setup: bool = True


class TenantBootstrapResponse(BaseModel):
    tenant: TenantRead
    owner: UserRead
    setup: SetupResultRead | None = None


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=TenantBootstrapResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new tenant and run its setup",
)
async def bootstrap_tenant(
    body: TenantBootstrapRequest,
    session: Session,
    service: SetupService,
) -> TenantBootstrapResponse:
    """Create a tenant, its owner user and membership, then seed defaults.

    The tenant is created even when setup fails; the setup outcome is
    reported in ``setup`` and a failed setup has already been rolled back.
    """
    existing = await session.execute(select(Tenant).where(Tenant.slug == body.tenant_slug))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Slug '{body.tenant_slug}' is already taken",
        )

    # 1. Tenant
    tenant = Tenant(
        name=body.tenant_name,
        slug=body.tenant_slug,
        subscription_plan=body.subscription_plan,
    )
    session.add(tenant)
    await session.flush()  # populate tenant.id

    # 2. Owner user + membership
    owner = User(email=body.owner_email, display_name=body.owner_display_name)
    session.add(owner)
    await session.flush()
    session.add(Membership(tenant_id=tenant.id, user_id=owner.id, role=MembershipRole.OWNER))
    await session.commit()

    # 3. Seed defaults (separate sessions per write)
    setup = None
    if body.run_setup:
        result = await service.setup_tenant(SetupContext(
            tenant_id=tenant.id,
            user_id=owner.id,
            user_email=owner.email,
            company_name=tenant.name,
            subscription_plan=tenant.subscription_plan,
        ))
        setup = SetupResultRead.from_result(result)
        await session.refresh(tenant)  # branding rewrote settings

    return TenantBootstrapResponse(
        tenant=TenantRead.model_validate(tenant),
        owner=UserRead.model_validate(owner),
        setup=setup,
    )


@router.get(
    "/{tenant_id}",
    response_model=TenantRead,
    dependencies=[AdminRequired],
    summary="Get a tenant",
)
async def get_tenant(tenant_id: uuid.UUID, session: Session) -> TenantRead:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return TenantRead.model_validate(tenant)
