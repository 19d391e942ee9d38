"""Admin maintenance endpoints — per-tenant setup repair and bulk migration."""

import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import select

from clearspendly.api.deps import AdminRequired, Session, SetupService
from clearspendly.api.v1.tenant_setup import SetupResultRead
from clearspendly.models.setup_log import (
    MigrationLog,
    MigrationLogRead,
    TenantSetupLog,
    TenantSetupLogRead,
)
from clearspendly.models.tenant import Tenant, TenantRead
from clearspendly.models.user import User
from clearspendly.services.setup_steps import SetupContext
from clearspendly.services.tenant_migration import (
    MIGRATION_TYPE,
    find_tenant_owner,
    migrate_existing_tenants,
)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[AdminRequired])


class IndividualSetupRequest(BaseModel):
    tenant_id: uuid.UUID
    force: bool = False


class IndividualSetupResponse(BaseModel):
    success: bool
    message: str
    tenant_id: uuid.UUID
    tenant_name: str
    skipped: bool = False
    setup_result: SetupResultRead | None = None


class TenantSetupStatusResponse(BaseModel):
    tenant: TenantRead
    setup_completed: bool
    setup_log: TenantSetupLogRead | None = None
    component_status: dict[str, bool]
    completion_percentage: int
    missing_components: list[str]


class MigrationRunResponse(BaseModel):
    success: bool
    message: str
    total_tenants: int
    successful_migrations: int
    failed_migrations: int
    migration_time_ms: int
    results: list[dict[str, Any]]


class MigrationStatusResponse(BaseModel):
    total_tenants: int
    tenants_with_setup: int
    migration_progress: int
    recent_migrations: list[MigrationLogRead]


async def _get_tenant_and_owner(session: Session, tenant_id: uuid.UUID) -> tuple[Tenant, uuid.UUID]:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    owner_id = await find_tenant_owner(session, tenant_id)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found or has no owner"
        )
    return tenant, owner_id


# ── Individual tenant ────────────────────────────────────────

@router.post("/setup-individual-tenant", response_model=IndividualSetupResponse)
async def setup_individual_tenant(
    body: IndividualSetupRequest,
    session: Session,
    service: SetupService,
) -> IndividualSetupResponse:
    """Repair one tenant, or re-run its full setup when ``force`` is set."""
    tenant, owner_id = await _get_tenant_and_owner(session, body.tenant_id)

    if not body.force and await service.check_tenant_setup_status(tenant.id):
        return IndividualSetupResponse(
            success=True,
            message="Tenant already has setup completed",
            tenant_id=tenant.id,
            tenant_name=tenant.name,
            skipped=True,
        )

    if body.force:
        owner = await session.get(User, owner_id)
        result = await service.setup_tenant(SetupContext(
            tenant_id=tenant.id,
            user_id=owner_id,
            user_email=owner.email if owner else "",
            company_name=tenant.name,
            subscription_plan=tenant.subscription_plan,
        ))
    else:
        result = await service.add_missing_components(
            tenant.id,
            owner_id,
            company_name=tenant.name,
            subscription_plan=tenant.subscription_plan,
        )

    return IndividualSetupResponse(
        success=result.success,
        message=result.message,
        tenant_id=tenant.id,
        tenant_name=tenant.name,
        setup_result=SetupResultRead.from_result(result),
    )


@router.get("/setup-individual-tenant", response_model=TenantSetupStatusResponse)
async def get_individual_tenant_status(
    tenant_id: uuid.UUID,
    session: Session,
    service: SetupService,
) -> TenantSetupStatusResponse:
    """Setup log and per-component presence for one tenant."""
    tenant, owner_id = await _get_tenant_and_owner(session, tenant_id)

    result = await session.execute(
        select(TenantSetupLog)
        .where(TenantSetupLog.tenant_id == tenant_id)
        .order_by(TenantSetupLog.created_at.desc())  # type: ignore[union-attr]
        .limit(1)
    )
    setup_log = result.scalar_one_or_none()
    report = await service.component_status(tenant_id, owner_id)

    return TenantSetupStatusResponse(
        tenant=TenantRead.model_validate(tenant),
        setup_completed=setup_log is not None,
        setup_log=TenantSetupLogRead.model_validate(setup_log) if setup_log else None,
        component_status=report["components"],
        completion_percentage=report["completion_percentage"],
        missing_components=report["missing"],
    )


# ── Bulk migration ───────────────────────────────────────────

@router.post("/migrate-existing-tenants", response_model=MigrationRunResponse)
async def run_migration(session: Session, service: SetupService) -> MigrationRunResponse:
    """Repair every tenant that predates the setup pipeline."""
    summary = await migrate_existing_tenants(session, service)
    return MigrationRunResponse(
        success=True,
        message=(
            f"Migration completed: {summary['successful_migrations']} successful, "
            f"{summary['failed_migrations']} failed"
        ),
        **summary,
    )


@router.get("/migrate-existing-tenants", response_model=MigrationStatusResponse)
async def get_migration_status(session: Session) -> MigrationStatusResponse:
    total_tenants = (await session.execute(select(func.count()).select_from(Tenant))).scalar_one()
    tenants_with_setup = (
        await session.execute(select(func.count(func.distinct(TenantSetupLog.tenant_id))))
    ).scalar_one()

    result = await session.execute(
        select(MigrationLog)
        .where(MigrationLog.migration_type == MIGRATION_TYPE)
        .order_by(MigrationLog.created_at.desc())  # type: ignore[union-attr]
        .limit(5)
    )
    recent = [MigrationLogRead.model_validate(m) for m in result.scalars().all()]

    return MigrationStatusResponse(
        total_tenants=total_tenants,
        tenants_with_setup=tenants_with_setup,
        migration_progress=round(tenants_with_setup / total_tenants * 100) if total_tenants else 0,
        recent_migrations=recent,
    )
