"""Bring tenants created before the setup pipeline up to date.

Walks every tenant, skips those that already have a setup log, and repairs
the rest through the drift detector. One migration_log row records the run.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clearspendly.models.setup_log import MigrationLog
from clearspendly.models.tenant import Tenant
from clearspendly.models.user import Membership, MembershipRole
from clearspendly.services.tenant_setup import TenantSetupService

logger = logging.getLogger(__name__)

MIGRATION_TYPE = "tenant_setup_migration"
MIGRATION_VERSION = "1.0.0"


async def find_tenant_owner(session: AsyncSession, tenant_id: uuid.UUID) -> uuid.UUID | None:
    """User id of the tenant's earliest owner membership, if any."""
    stmt = (
        select(Membership.user_id)
        .where(Membership.tenant_id == tenant_id, Membership.role == MembershipRole.OWNER)
        .order_by(Membership.created_at)
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def migrate_existing_tenants(
    session: AsyncSession, service: TenantSetupService
) -> dict[str, Any]:
    """Repair every tenant without a setup log; returns a run summary."""
    started = time.monotonic()

    result = await session.execute(select(Tenant).order_by(Tenant.created_at))
    tenants = list(result.scalars().all())
    logger.info("Found %d existing tenants to migrate", len(tenants))

    results: list[dict[str, Any]] = []
    success_count = 0
    error_count = 0

    for tenant in tenants:
        entry: dict[str, Any] = {"tenant_id": str(tenant.id), "tenant_name": tenant.name}

        owner_id = await find_tenant_owner(session, tenant.id)
        if owner_id is None:
            logger.warning("Skipping tenant %s: no owner found", tenant.id)
            results.append({**entry, "success": False, "error": "No owner found"})
            error_count += 1
            continue

        try:
            # A failed lookup counts the tenant as failed rather than "not set up"
            if await service.has_setup_log(tenant.id):
                results.append(
                    {**entry, "success": True, "message": "Already setup", "skipped": True}
                )
                success_count += 1
                continue

            repair = await service.add_missing_components(
                tenant.id,
                owner_id,
                company_name=tenant.name,
                subscription_plan=tenant.subscription_plan,
            )
        except Exception as exc:
            logger.exception("Error migrating tenant %s", tenant.id)
            results.append({**entry, "success": False, "error": str(exc)})
            error_count += 1
            continue

        if repair.success:
            success_count += 1
        else:
            error_count += 1
        results.append({
            **entry,
            "success": repair.success,
            "message": repair.message,
            "data": repair.data,
            "errors": repair.errors,
        })

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Migration completed in %dms: %d successful, %d failed",
        elapsed_ms, success_count, error_count,
    )

    try:
        session.add(MigrationLog(
            migration_type=MIGRATION_TYPE,
            migration_version=MIGRATION_VERSION,
            tenants_processed=len(tenants),
            successful_migrations=success_count,
            failed_migrations=error_count,
            migration_time_ms=elapsed_ms,
            migration_data=results,
        ))
        await session.commit()
    except Exception:
        logger.exception("Failed to write migration log")
        await session.rollback()

    return {
        "total_tenants": len(tenants),
        "successful_migrations": success_count,
        "failed_migrations": error_count,
        "migration_time_ms": elapsed_ms,
        "results": results,
    }
