"""Tenant setup steps — table-scoped seed writers and their compensations.

Each step is a plain record of three coroutines:
  execute(store, context)          -> JSON-safe summary of what was written
  rollback(store, context, result) -> delete / restore what execute wrote
  probe(store, tenant_id, user_id) -> True if the step's rows already exist

Steps never catch their own data-access errors; the orchestrator owns retry,
timeout and rollback.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from copy import deepcopy
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Any

from clearspendly.core.catalog import (
    BILLING_PERIOD_DAYS,
    DEFAULT_EMAIL_TEMPLATES,
    DEFAULT_INVOICE_TEMPLATE,
    DEFAULT_TAG_CATEGORIES,
    DEFAULT_USER_PREFERENCES,
    DEFAULT_VENDOR_CATEGORIES,
    EMPTY_USAGE_COUNTERS,
    IRS_MILEAGE_RATES,
    build_tenant_settings,
    get_usage_limits,
    mileage_rate_note,
)
from clearspendly.models.base import utcnow
from clearspendly.models.mileage import IRSMileageRate
from clearspendly.models.preferences import UserPreferences
from clearspendly.models.tag import Tag, TagCategory
from clearspendly.models.template import EmailTemplate, EmailTemplateType, InvoiceTemplate
from clearspendly.models.tenant import Tenant
from clearspendly.models.usage import TenantUsage
from clearspendly.models.vendor import VendorCategory
from clearspendly.services.data_access import TableStore


@dataclass(frozen=True)
class SetupContext:
    """Who and what is being provisioned. Threaded unchanged through every step."""
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    user_email: str
    company_name: str
    subscription_plan: str = "free"

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["tenant_id"] = str(self.tenant_id)
        data["user_id"] = str(self.user_id)
        return data


ExecuteFn = Callable[[TableStore, SetupContext], Awaitable[Any]]
RollbackFn = Callable[[TableStore, SetupContext, Any], Awaitable[None]]
ProbeFn = Callable[[TableStore, uuid.UUID, uuid.UUID], Awaitable[bool]]


@dataclass(frozen=True)
class SetupStep:
    name: str
    execute: ExecuteFn
    rollback: RollbackFn | None = None
    probe: ProbeFn | None = None


# ── 1. Tag categories + tags ─────────────────────────────────

async def create_tag_system(store: TableStore, context: SetupContext) -> dict:
    category_ids: list[str] = []
    tag_count = 0

    for category_data in DEFAULT_TAG_CATEGORIES:
        category = await store.insert(TagCategory, {
            "tenant_id": context.tenant_id,
            "name": category_data["name"],
            "description": category_data["description"],
            "color": category_data["color"],
            "required": category_data["required"],
            "multiple": category_data["multiple"],
            "sort_order": category_data["sort_order"],
        })
        category_ids.append(str(category.id))

        for tag_name in category_data["tags"]:
            await store.insert(Tag, {
                "tenant_id": context.tenant_id,
                "category_id": category.id,
                "name": tag_name,
                "created_by": context.user_id,
            })
            tag_count += 1

    return {"categories": len(category_ids), "tags": tag_count, "category_ids": category_ids}


async def rollback_tag_system(store: TableStore, context: SetupContext, result: Any) -> None:
    # Tags reference categories, so they go first
    await store.delete(Tag, {"tenant_id": context.tenant_id})
    await store.delete(TagCategory, {"tenant_id": context.tenant_id})


async def has_tag_categories(store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    return await store.exists(TagCategory, {"tenant_id": tenant_id})


# ── 2. Email templates ───────────────────────────────────────

async def create_email_templates(store: TableStore, context: SetupContext) -> dict:
    template_ids: list[str] = []
    for template_data in DEFAULT_EMAIL_TEMPLATES:
        template = await store.insert(EmailTemplate, {
            **template_data,
            "template_type": EmailTemplateType(template_data["template_type"]),
            "tenant_id": context.tenant_id,
            "company_name": context.company_name,
            "is_active": True,
            "created_by": context.user_id,
        })
        template_ids.append(str(template.id))
    return {"templates": len(template_ids), "template_ids": template_ids}


async def rollback_email_templates(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(EmailTemplate, {"tenant_id": context.tenant_id})


async def has_email_templates(store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    return await store.exists(EmailTemplate, {"tenant_id": tenant_id})


# ── 3. Invoice template ──────────────────────────────────────

async def create_invoice_template(store: TableStore, context: SetupContext) -> dict:
    template = await store.insert(InvoiceTemplate, {
        "tenant_id": context.tenant_id,
        "name": DEFAULT_INVOICE_TEMPLATE["name"],
        "description": DEFAULT_INVOICE_TEMPLATE["description"],
        "template_data": deepcopy(DEFAULT_INVOICE_TEMPLATE["template_data"]),
        "is_default": True,
        "created_by": context.user_id,
    })
    return {"template_id": str(template.id), "is_default": template.is_default}


async def rollback_invoice_template(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(InvoiceTemplate, {"tenant_id": context.tenant_id})


async def has_invoice_template(store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    return await store.exists(InvoiceTemplate, {"tenant_id": tenant_id})


# ── 4. User preferences ──────────────────────────────────────

async def create_user_preferences(store: TableStore, context: SetupContext) -> dict:
    preferences = await store.insert(UserPreferences, {
        "tenant_id": context.tenant_id,
        "user_id": context.user_id,
        "preferences": deepcopy(DEFAULT_USER_PREFERENCES),
    })
    return {"preferences_id": str(preferences.id)}


async def rollback_user_preferences(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(
        UserPreferences, {"tenant_id": context.tenant_id, "user_id": context.user_id}
    )


async def has_user_preferences(
    store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    return await store.exists(UserPreferences, {"tenant_id": tenant_id, "user_id": user_id})


# ── 5. IRS mileage rates ─────────────────────────────────────

async def create_irs_mileage_rates(store: TableStore, context: SetupContext) -> dict:
    years: list[int] = []
    for rate_data in IRS_MILEAGE_RATES:
        await store.insert(IRSMileageRate, {
            "tenant_id": context.tenant_id,
            "user_id": context.user_id,
            "year": rate_data["year"],
            "rate": rate_data["rate"],
            "effective_date": rate_data["effective_date"],
            "notes": mileage_rate_note(rate_data["year"]),
        })
        years.append(rate_data["year"])
    return {"rates": len(years), "years": years}


async def rollback_irs_mileage_rates(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(IRSMileageRate, {"tenant_id": context.tenant_id})


async def has_irs_mileage_rates(
    store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    return await store.exists(IRSMileageRate, {"tenant_id": tenant_id})


# ── 6. Usage tracking ────────────────────────────────────────

async def create_usage_tracking(store: TableStore, context: SetupContext) -> dict:
    limits = get_usage_limits(context.subscription_plan)
    period_start = utcnow()
    usage = await store.insert(TenantUsage, {
        "tenant_id": context.tenant_id,
        "plan_type": context.subscription_plan,
        "current_period_start": period_start,
        "current_period_end": period_start + timedelta(days=BILLING_PERIOD_DAYS),
        "limits": limits,
        "usage": dict(EMPTY_USAGE_COUNTERS),
    })
    return {
        "usage_id": str(usage.id),
        "plan_type": usage.plan_type,
        "limits": limits,
        "current_period_end": usage.current_period_end.isoformat(),
    }


async def rollback_usage_tracking(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(TenantUsage, {"tenant_id": context.tenant_id})


async def has_usage_tracking(store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    return await store.exists(TenantUsage, {"tenant_id": tenant_id})


# ── 7. Vendor categories ─────────────────────────────────────

async def create_vendor_categories(store: TableStore, context: SetupContext) -> dict:
    for category_name in DEFAULT_VENDOR_CATEGORIES:
        await store.insert(VendorCategory, {
            "tenant_id": context.tenant_id,
            "name": category_name,
            "created_by": context.user_id,
        })
    return {"categories": len(DEFAULT_VENDOR_CATEGORIES)}


async def rollback_vendor_categories(store: TableStore, context: SetupContext, result: Any) -> None:
    await store.delete(VendorCategory, {"tenant_id": context.tenant_id})


async def has_vendor_categories(
    store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    return await store.exists(VendorCategory, {"tenant_id": tenant_id})


# ── 8. Tenant branding ───────────────────────────────────────

async def setup_tenant_branding(store: TableStore, context: SetupContext) -> dict:
    """Write branding / features / defaults into ``tenant.settings``.

    Unrelated keys already on the tenant are kept. The previous value rides
    along for rollback.
    """
    tenants = await store.select(Tenant, {"id": context.tenant_id}, limit=1)
    if not tenants:
        raise LookupError(f"Tenant {context.tenant_id} not found")
    previous_settings = deepcopy(tenants[0].settings or {})

    settings = {
        **previous_settings,
        **build_tenant_settings(context.company_name, context.subscription_plan),
    }
    await store.update(Tenant, {"settings": settings}, {"id": context.tenant_id})
    return {"settings": settings, "previous_settings": previous_settings}


async def rollback_tenant_branding(store: TableStore, context: SetupContext, result: Any) -> None:
    # The settings update is the step's only write; no snapshot means nothing was written
    if not result or "previous_settings" not in result:
        return
    await store.update(
        Tenant, {"settings": result["previous_settings"]}, {"id": context.tenant_id}
    )


async def has_tenant_branding(store: TableStore, tenant_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    tenants = await store.select(Tenant, {"id": tenant_id}, limit=1)
    return bool(tenants) and "branding" in (tenants[0].settings or {})


# ── Ordered step table ───────────────────────────────────────

TAG_SYSTEM = "Create Default Tag Categories and Tags"
EMAIL_TEMPLATES = "Create Default Email Templates"
INVOICE_TEMPLATE = "Create Default Invoice Template"
USER_PREFERENCES = "Initialize User Preferences"
IRS_MILEAGE_RATES_STEP = "Setup IRS Mileage Rates"
USAGE_TRACKING = "Initialize Usage Tracking"
VENDOR_CATEGORIES = "Create Default Vendor Categories"
TENANT_BRANDING = "Setup Tenant Branding"

SETUP_STEPS: tuple[SetupStep, ...] = (
    SetupStep(TAG_SYSTEM, create_tag_system, rollback_tag_system, has_tag_categories),
    SetupStep(
        EMAIL_TEMPLATES, create_email_templates, rollback_email_templates, has_email_templates
    ),
    SetupStep(
        INVOICE_TEMPLATE, create_invoice_template, rollback_invoice_template, has_invoice_template
    ),
    SetupStep(
        USER_PREFERENCES, create_user_preferences, rollback_user_preferences, has_user_preferences
    ),
    SetupStep(
        IRS_MILEAGE_RATES_STEP,
        create_irs_mileage_rates,
        rollback_irs_mileage_rates,
        has_irs_mileage_rates,
    ),
    SetupStep(USAGE_TRACKING, create_usage_tracking, rollback_usage_tracking, has_usage_tracking),
    SetupStep(
        VENDOR_CATEGORIES,
        create_vendor_categories,
        rollback_vendor_categories,
        has_vendor_categories,
    ),
    SetupStep(
        TENANT_BRANDING, setup_tenant_branding, rollback_tenant_branding, has_tenant_branding
    ),
)


def find_step(name: str, steps: tuple[SetupStep, ...] = SETUP_STEPS) -> SetupStep | None:
    return next((step for step in steps if step.name == name), None)
