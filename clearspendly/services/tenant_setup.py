"""Tenant setup orchestrator — seeds a new tenant with retry and rollback.

Flow:
  1. Validate the context against live tenant / user rows
  2. Write a "started" audit row
  3. Run each step in order under a timeout, retrying with exponential backoff
  4. On a step that exhausts its retries, roll back every completed step in
     reverse order and record the rollback outcome
  5. Otherwise record completion and return per-step results

The service keeps no per-call state on the instance, so one instance can
serve concurrent setups for different tenants.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from clearspendly.core.config import Settings, get_settings
from clearspendly.models.setup_log import TenantSetupLog
from clearspendly.models.tenant import Tenant
from clearspendly.models.user import User
from clearspendly.services.data_access import DataAccessError, TableStore
from clearspendly.services.setup_audit import SetupAuditLog
from clearspendly.services.setup_steps import SETUP_STEPS, SetupContext, SetupStep, find_step

logger = logging.getLogger(__name__)

# Used when the drift repair path has no real tenant values to hand
PLACEHOLDER_COMPANY_NAME = "Your Company"


@dataclass(frozen=True)
class SetupPolicy:
    """Timeout / retry knobs for one setup run."""
    step_timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> SetupPolicy:
        return cls(
            step_timeout_seconds=settings.setup_step_timeout_seconds,
            max_retries=settings.setup_max_retries,
            backoff_seconds=settings.setup_backoff_seconds,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait before retry ``attempt`` (1-based): 2s, 4s, ..."""
        return self.backoff_seconds * 2 ** attempt


@dataclass
class SetupResult:
    """Structured outcome handed back to every caller. Never an exception."""
    success: bool
    message: str
    data: Any = None
    errors: list[str] | None = None
    rollback_performed: bool = False
    setup_time_ms: int | None = None


class StepTimeoutError(Exception):
    """A step did not settle within the policy timeout."""


class StepFailedError(Exception):
    """A step exhausted its retries; ``cause`` is the last attempt's error."""

    def __init__(self, step_name: str, cause: Exception, attempts: int) -> None:
        self.step_name = step_name
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"{step_name} failed after {attempts} attempts: {cause}")


@dataclass
class _CompletedStep:
    step: SetupStep
    result: Any


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


class TenantSetupService:
    def __init__(
        self,
        store: TableStore,
        *,
        steps: Sequence[SetupStep] = SETUP_STEPS,
        policy: SetupPolicy | None = None,
        audit: SetupAuditLog | None = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._steps = tuple(steps)
        self._policy = policy or SetupPolicy.from_settings(settings)
        self._audit = audit or SetupAuditLog(store, setup_version=settings.setup_version)

    @property
    def steps(self) -> tuple[SetupStep, ...]:
        return self._steps

    # ── Full setup ───────────────────────────────────────────

    async def setup_tenant(self, context: SetupContext) -> SetupResult:
        """Run every setup step for a freshly created tenant.

        Args:
            context: Tenant / owner identity and the subscription plan.

        Returns:
            SetupResult. On success ``data`` holds the session id and the
            per-step results in execution order. On failure ``errors`` holds
            the last error of the failing step and ``rollback_performed`` is
            True whenever any step had started.
        """
        logger.info("Starting tenant setup for tenant %s", context.tenant_id)
        started = time.monotonic()
        session_id = uuid.uuid4()

        validation_errors = await self._validate_context(context)
        if validation_errors:
            logger.warning(
                "Setup context for tenant %s is invalid: %s", context.tenant_id, validation_errors
            )
            return SetupResult(
                success=False,
                message="Setup context validation failed",
                errors=validation_errors,
                setup_time_ms=_elapsed_ms(started),
            )

        completed: list[_CompletedStep] = []
        results: list[dict[str, Any]] = []

        try:
            await self._audit.log_start(session_id, context)

            for step in self._steps:
                logger.info("Executing step: %s", step.name)
                try:
                    result, retry_count, step_ms = await self._execute_with_retry(step, context)
                except StepFailedError as exc:
                    logger.error(
                        "Step %s failed after %d retries for tenant %s",
                        step.name, self._policy.max_retries, context.tenant_id,
                    )
                    await self._rollback_with_logging(context, session_id, completed)
                    return SetupResult(
                        success=False,
                        message=(
                            f"Setup failed at step: {step.name} "
                            f"after {self._policy.max_retries} retries"
                        ),
                        errors=[_error_message(exc.cause)],
                        rollback_performed=True,
                        setup_time_ms=_elapsed_ms(started),
                    )

                completed.append(_CompletedStep(step=step, result=result))
                results.append({
                    "step": step.name,
                    "success": True,
                    "data": result,
                    "execution_time_ms": step_ms,
                    "retry_count": retry_count,
                })
                logger.info(
                    "Completed: %s (%dms, %d retries)", step.name, step_ms, retry_count
                )

            await self._audit.log_completion(session_id, context, results, len(self._steps))

        except Exception as exc:
            logger.exception("Critical error during setup of tenant %s", context.tenant_id)
            await self._rollback_with_logging(context, session_id, completed)
            return SetupResult(
                success=False,
                message="Critical error during tenant setup",
                errors=[_error_message(exc)],
                rollback_performed=True,
                setup_time_ms=_elapsed_ms(started),
            )

        total_ms = _elapsed_ms(started)
        logger.info("Tenant %s setup completed in %dms", context.tenant_id, total_ms)
        return SetupResult(
            success=True,
            message="Tenant setup completed successfully",
            data={
                "tenant_id": str(context.tenant_id),
                "steps_completed": len(results),
                "setup_time_ms": total_ms,
                "setup_session_id": str(session_id),
                "results": results,
            },
            setup_time_ms=total_ms,
        )

    async def _validate_context(self, context: SetupContext) -> list[str]:
        errors: list[str] = []

        if not context.tenant_id or not context.user_id or not context.company_name.strip():
            errors.append("Missing required context fields")

        try:
            if not await self._store.exists(Tenant, {"id": context.tenant_id}):
                errors.append("Tenant not found or inaccessible")
        except DataAccessError:
            logger.exception("Tenant lookup failed for %s", context.tenant_id)
            errors.append("Failed to validate tenant")

        try:
            if not await self._store.exists(User, {"id": context.user_id}):
                errors.append("User not found")
        except DataAccessError:
            logger.exception("User lookup failed for %s", context.user_id)
            errors.append("Failed to validate user")

        return errors

    async def _execute_with_retry(
        self, step: SetupStep, context: SetupContext
    ) -> tuple[Any, int, int]:
        """Returns (result, retry_count, elapsed_ms) or raises StepFailedError."""
        started = time.monotonic()
        attempt = 0
        while True:
            try:
                result = await self._execute_with_timeout(step, context)
                return result, attempt, _elapsed_ms(started)
            except Exception as exc:
                attempt += 1
                logger.warning("Attempt %d failed for step %s: %s", attempt, step.name, exc)
                # A failed attempt may have committed some rows; the step's
                # tenant-scoped rollback clears them before the next attempt
                await self._discard_partial_attempt(step, context)
                if attempt > self._policy.max_retries:
                    raise StepFailedError(step.name, exc, attempt) from exc
                await _sleep(self._policy.backoff_delay(attempt))

    async def _discard_partial_attempt(self, step: SetupStep, context: SetupContext) -> None:
        """Undo whatever a failed attempt wrote. Never raises."""
        if step.rollback is None:
            return
        try:
            await step.rollback(self._store, context, None)
        except Exception:
            logger.exception("Cleanup after failed attempt of %s failed", step.name)

    async def _execute_with_timeout(self, step: SetupStep, context: SetupContext) -> Any:
        timeout = self._policy.step_timeout_seconds
        try:
            return await asyncio.wait_for(step.execute(self._store, context), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise StepTimeoutError(
                f"Step {step.name} timed out after {int(timeout * 1000)}ms"
            ) from exc

    # ── Rollback ─────────────────────────────────────────────

    async def _rollback(
        self, context: SetupContext, completed: list[_CompletedStep]
    ) -> tuple[list[str], list[str]]:
        """Undo completed steps newest-first. Returns (rolled_back, failures)."""
        rolled_back: list[str] = []
        failures: list[str] = []
        for entry in reversed(completed):
            if entry.step.rollback is None:
                continue
            try:
                await entry.step.rollback(self._store, context, entry.result)
            except Exception as exc:
                logger.exception("Rollback failed for: %s", entry.step.name)
                failures.append(f"{entry.step.name}: {_error_message(exc)}")
                continue
            logger.info("Rolled back: %s", entry.step.name)
            rolled_back.append(entry.step.name)
        return rolled_back, failures

    async def _rollback_with_logging(
        self,
        context: SetupContext,
        session_id: uuid.UUID,
        completed: list[_CompletedStep],
    ) -> None:
        """Best-effort rollback plus one audit update. Never raises."""
        logger.warning(
            "Rolling back %d completed setup steps for tenant %s",
            len(completed), context.tenant_id,
        )
        try:
            rolled_back, failures = await self._rollback(context, completed)
        except Exception as exc:
            logger.exception("Critical: rollback failed for tenant %s", context.tenant_id)
            await self._audit.log_rollback_failure(session_id, context, _error_message(exc))
            return

        if failures:
            await self._audit.log_rollback_failure(session_id, context, "; ".join(failures))
        else:
            await self._audit.log_rollback(session_id, context, rolled_back)

    # ── Status and drift repair ──────────────────────────────

    async def has_setup_log(self, tenant_id: uuid.UUID) -> bool:
        """Like ``check_tenant_setup_status`` but lets ``DataAccessError`` through."""
        return await self._store.exists(TenantSetupLog, {"tenant_id": tenant_id})

    async def check_tenant_setup_status(self, tenant_id: uuid.UUID) -> bool:
        """True if any setup session has ever been logged for the tenant."""
        try:
            return await self.has_setup_log(tenant_id)
        except DataAccessError:
            logger.exception("Setup status lookup failed for tenant %s", tenant_id)
            return False

    async def identify_missing_components(
        self, tenant_id: uuid.UUID, user_id: uuid.UUID
    ) -> list[str]:
        """Names of the steps whose rows are absent, in step order."""
        missing: list[str] = []
        for step in self._steps:
            if step.probe is None:
                continue
            if not await step.probe(self._store, tenant_id, user_id):
                missing.append(step.name)
        return missing

    async def add_missing_components(
        self,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        company_name: str = PLACEHOLDER_COMPANY_NAME,
        subscription_plan: str = "free",
        user_email: str = "",
    ) -> SetupResult:
        """Re-run only the steps whose rows are missing.

        No retry, no rollback and no audit row: each component's outcome is
        reported in ``data`` and a failing component does not stop the rest.
        """
        logger.info("Checking for missing components in tenant %s", tenant_id)
        started = time.monotonic()
        context = SetupContext(
            tenant_id=tenant_id,
            user_id=user_id,
            user_email=user_email,
            company_name=company_name,
            subscription_plan=subscription_plan,
        )

        try:
            missing = await self.identify_missing_components(tenant_id, user_id)
        except DataAccessError as exc:
            logger.exception("Could not probe components for tenant %s", tenant_id)
            return SetupResult(
                success=False,
                message="Failed to identify missing components",
                errors=[_error_message(exc)],
                setup_time_ms=_elapsed_ms(started),
            )

        results: list[dict[str, Any]] = []
        for component in missing:
            step = find_step(component, self._steps)
            if step is None:
                continue
            try:
                data = await step.execute(self._store, context)
            except Exception as exc:
                logger.exception("Failed to add %s for tenant %s", component, tenant_id)
                results.append(
                    {"component": component, "success": False, "error": _error_message(exc)}
                )
                continue
            results.append({"component": component, "success": True, "data": data})

        added = sum(1 for r in results if r["success"])
        logger.info("Added %d of %d missing components to tenant %s", added, len(missing), tenant_id)
        return SetupResult(
            success=True,
            message=f"Added {added} missing components",
            data=results,
            setup_time_ms=_elapsed_ms(started),
        )

    async def component_status(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> dict[str, Any]:
        """Presence of every component plus a completion percentage."""
        components: dict[str, bool] = {}
        for step in self._steps:
            if step.probe is not None:
                components[step.name] = await step.probe(self._store, tenant_id, user_id)

        completed = sum(1 for present in components.values() if present)
        total = len(components)
        return {
            "components": components,
            "completed": completed,
            "total": total,
            "completion_percentage": round(completed / total * 100) if total else 100,
            "missing": [name for name, present in components.items() if not present],
        }
