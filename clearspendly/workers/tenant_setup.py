"""Worker tasks — tenant setup off the request path and the bulk migration."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict

from clearspendly.core.database import async_session_factory
from clearspendly.services.data_access import TableStore
from clearspendly.services.setup_steps import SetupContext
from clearspendly.services.tenant_migration import migrate_existing_tenants as run_migration
from clearspendly.services.tenant_setup import TenantSetupService

logger = logging.getLogger(__name__)


def _service() -> TenantSetupService:
    return TenantSetupService(TableStore(async_session_factory))


async def run_tenant_setup(
    ctx: dict,
    tenant_id: str,
    user_id: str,
    user_email: str,
    company_name: str,
    subscription_plan: str = "free",
) -> dict:
    """ARQ task: run the full setup pipeline for one tenant.

    Returns:
        The SetupResult as a dict (ARQ stores it as the job result).
    """
    try:
        context = SetupContext(
            tenant_id=uuid.UUID(tenant_id),
            user_id=uuid.UUID(user_id),
            user_email=user_email,
            company_name=company_name,
            subscription_plan=subscription_plan,
        )
    except ValueError:
        logger.error("Invalid ids for tenant setup job: tenant=%s user=%s", tenant_id, user_id)
        return {"success": False, "message": "invalid_ids"}

    result = await _service().setup_tenant(context)
    if result.success:
        logger.info("Setup job finished for tenant %s", tenant_id)
    else:
        logger.error("Setup job failed for tenant %s: %s", tenant_id, result.errors)
    return asdict(result)


async def migrate_existing_tenants(ctx: dict) -> dict:
    """ARQ task: repair every tenant that has no setup log yet."""
    async with async_session_factory() as session:
        summary = await run_migration(session, _service())
    logger.info(
        "Tenant migration: %d successful, %d failed",
        summary["successful_migrations"], summary["failed_migrations"],
    )
    return summary
