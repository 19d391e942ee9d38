"""ARQ worker entrypoint."""

import asyncio
import logging

from arq.connections import RedisSettings

from clearspendly.core.config import get_settings
from clearspendly.workers.tenant_setup import migrate_existing_tenants, run_tenant_setup


def _redis_settings() -> RedisSettings:
    """Parse REDIS_URL (redis://[:password@]host:port/db) into ARQ RedisSettings."""
    return RedisSettings.from_dsn(get_settings().redis_url)


async def startup(ctx: dict) -> None:
    """Called when the worker starts."""
    from clearspendly.core.database import init_db

    logging.basicConfig(level=get_settings().log_level.upper())
    await init_db()


async def shutdown(ctx: dict) -> None:
    """Called when the worker shuts down."""
    from clearspendly.core.database import dispose_db

    await dispose_db()


class WorkerSettings:
    """ARQ worker configuration."""
    functions = [run_tenant_setup, migrate_existing_tenants]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = _redis_settings()
    max_jobs = 10
    # Worst case per setup: 8 steps x 3 attempts x 30s plus backoff
    job_timeout = 900


if __name__ == "__main__":
    from arq import run_worker
    asyncio.run(run_worker(WorkerSettings))  # type: ignore[arg-type]
