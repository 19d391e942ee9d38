"""Setup audit log — persisted trail of each setup session.

Every write here is a side channel: failures are logged and dropped so that
audit storage problems never block tenant provisioning. Each status
transition merges into the stored ``setup_data`` instead of replacing it.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from clearspendly.models.base import utcnow
from clearspendly.models.setup_log import SetupStatus, TenantSetupLog
from clearspendly.services.data_access import TableStore
from clearspendly.services.setup_steps import SetupContext

logger = logging.getLogger(__name__)


class SetupAuditLog:
    def __init__(self, store: TableStore, setup_version: str = "1.0.0") -> None:
        self._store = store
        self._setup_version = setup_version

    async def log_start(self, session_id: uuid.UUID, context: SetupContext) -> None:
        """Insert the session row. Never raises."""
        try:
            await self._store.insert(TenantSetupLog, {
                "id": session_id,
                "tenant_id": context.tenant_id,
                "user_id": context.user_id,
                "setup_version": self._setup_version,
                "steps_completed": 0,
                "status": SetupStatus.STARTED,
                "setup_data": {
                    "status": SetupStatus.STARTED.value,
                    "context": context.to_dict(),
                    "started_at": utcnow().isoformat(),
                },
                "completed_at": None,
            })
        except Exception:
            logger.exception("Failed to log setup start for session %s", session_id)

    async def log_completion(
        self,
        session_id: uuid.UUID,
        context: SetupContext,
        results: list[dict[str, Any]],
        total_steps: int,
    ) -> None:
        """Mark the session completed with a per-step summary. Never raises."""
        completed = len(results)
        await self._transition(
            session_id,
            SetupStatus.COMPLETED,
            {
                "context": context.to_dict(),
                "results": results,
                "summary": {
                    "total_steps": total_steps,
                    "completed_steps": completed,
                    "success_rate": (completed / total_steps * 100) if total_steps else 100.0,
                },
            },
            steps_completed=completed,
            completed_at=utcnow(),
        )

    async def log_rollback(
        self, session_id: uuid.UUID, context: SetupContext, steps_rolled_back: list[str]
    ) -> None:
        """Never raises."""
        await self._transition(
            session_id,
            SetupStatus.ROLLED_BACK,
            {
                "context": context.to_dict(),
                "rolled_back_steps": steps_rolled_back,
                "rollback_completed_at": utcnow().isoformat(),
            },
            rollback_performed=True,
        )

    async def log_rollback_failure(
        self, session_id: uuid.UUID, context: SetupContext, error: str
    ) -> None:
        """Never raises."""
        await self._transition(
            session_id,
            SetupStatus.ROLLBACK_FAILED,
            {
                "context": context.to_dict(),
                "rollback_error": error,
                "rollback_failed_at": utcnow().isoformat(),
            },
            rollback_performed=False,
            rollback_reason="Rollback execution failed",
        )

    async def _transition(
        self,
        session_id: uuid.UUID,
        status: SetupStatus,
        data: dict[str, Any],
        **columns: Any,
    ) -> None:
        try:
            rows = await self._store.select(TenantSetupLog, {"id": session_id}, limit=1)
            if not rows:
                logger.warning(
                    "No setup log row for session %s; dropping %s update", session_id, status
                )
                return
            setup_data = {**(rows[0].setup_data or {}), **data, "status": status.value}
            await self._store.update(
                TenantSetupLog,
                {"status": status, "setup_data": setup_data, **columns},
                {"id": session_id},
            )
        except Exception:
            logger.exception("Failed to log setup %s for session %s", status, session_id)
