"""Tests for the individual setup steps, their compensations and probes."""

import uuid

import pytest

from clearspendly.core.catalog import DEFAULT_TAG_CATEGORIES, get_usage_limits
from clearspendly.models.tag import Tag, TagCategory
from clearspendly.models.template import EmailTemplate
from clearspendly.models.tenant import Tenant
from clearspendly.models.usage import TenantUsage
from clearspendly.services import setup_steps
from clearspendly.services.data_access import TableStore
from clearspendly.services.setup_steps import SETUP_STEPS, SetupContext, find_step


def _context_for(tenant, owner, **overrides) -> SetupContext:
    values = {
        "tenant_id": tenant.id,
        "user_id": owner.id,
        "user_email": owner.email,
        "company_name": tenant.name,
    }
    values.update(overrides)
    return SetupContext(**values)


def test_steps_run_in_fixed_order():
    assert [step.name for step in SETUP_STEPS] == [
        "Create Default Tag Categories and Tags",
        "Create Default Email Templates",
        "Create Default Invoice Template",
        "Initialize User Preferences",
        "Setup IRS Mileage Rates",
        "Initialize Usage Tracking",
        "Create Default Vendor Categories",
        "Setup Tenant Branding",
    ]
    assert all(step.rollback is not None and step.probe is not None for step in SETUP_STEPS)


def test_find_step():
    assert find_step(setup_steps.USAGE_TRACKING).execute is setup_steps.create_usage_tracking
    assert find_step("Nonexistent Step") is None


def test_context_to_dict_is_json_safe():
    tenant_id, user_id = uuid.uuid4(), uuid.uuid4()
    context = SetupContext(tenant_id, user_id, "a@b.com", "Acme")

    assert context.to_dict() == {
        "tenant_id": str(tenant_id),
        "user_id": str(user_id),
        "user_email": "a@b.com",
        "company_name": "Acme",
        "subscription_plan": "free",
    }


@pytest.mark.asyncio
async def test_tag_system_seeds_categories_and_tags(store: TableStore, tenant_owner):
    tenant, owner = tenant_owner

    result = await setup_steps.create_tag_system(store, _context_for(tenant, owner))

    expected_tags = sum(len(c["tags"]) for c in DEFAULT_TAG_CATEGORIES)
    assert result["categories"] == 5
    assert result["tags"] == expected_tags
    categories = await store.select(TagCategory, {"tenant_id": tenant.id})
    assert {c.name for c in categories} == {
        "Project", "Department", "Tax Status", "Client", "Expense Type",
    }
    expense_type = next(c for c in categories if c.name == "Expense Type")
    assert expense_type.multiple is True
    assert len(await store.select(Tag, {"tenant_id": tenant.id})) == expected_tags


@pytest.mark.asyncio
async def test_tag_rollback_leaves_other_tenants_alone(store: TableStore, tenant_factory):
    first, first_owner = await tenant_factory("tags-first")
    second, second_owner = await tenant_factory("tags-second")
    first_ctx = _context_for(first, first_owner)
    await setup_steps.create_tag_system(store, first_ctx)
    await setup_steps.create_tag_system(store, _context_for(second, second_owner))

    await setup_steps.rollback_tag_system(store, first_ctx, None)

    assert await store.exists(TagCategory, {"tenant_id": first.id}) is False
    assert await store.exists(Tag, {"tenant_id": first.id}) is False
    assert len(await store.select(TagCategory, {"tenant_id": second.id})) == 5


@pytest.mark.asyncio
async def test_email_templates_carry_company_name(store: TableStore, tenant_owner):
    tenant, owner = tenant_owner

    result = await setup_steps.create_email_templates(
        store, _context_for(tenant, owner, company_name="Globex")
    )

    assert result["templates"] == 3
    templates = await store.select(EmailTemplate, {"tenant_id": tenant.id})
    assert {t.template_type.value for t in templates} == {
        "invoice", "payment_reminder", "payment_received",
    }
    assert all(t.company_name == "Globex" for t in templates)


@pytest.mark.asyncio
@pytest.mark.parametrize("plan", ["free", "starter", "enterprise"])
async def test_usage_tracking_uses_plan_limits(store: TableStore, tenant_owner, plan):
    tenant, owner = tenant_owner

    result = await setup_steps.create_usage_tracking(
        store, _context_for(tenant, owner, subscription_plan=plan)
    )

    assert result["plan_type"] == plan
    usage = (await store.select(TenantUsage, {"tenant_id": tenant.id}))[0]
    assert usage.limits == get_usage_limits(plan)
    assert all(value == 0 for value in usage.usage.values())
    assert (usage.current_period_end - usage.current_period_start).days == 30


@pytest.mark.asyncio
async def test_unknown_plan_falls_back_to_free_limits(store: TableStore, tenant_owner):
    tenant, owner = tenant_owner

    result = await setup_steps.create_usage_tracking(
        store, _context_for(tenant, owner, subscription_plan="platinum")
    )

    assert result["limits"] == get_usage_limits("free")
    assert result["limits"]["receipts_per_month"] == 50


@pytest.mark.asyncio
async def test_branding_rollback_restores_previous_settings(store: TableStore, tenant_factory):
    tenant, owner = await tenant_factory("branded", settings={"legacy_theme": "blue"})
    context = _context_for(tenant, owner, subscription_plan="professional")

    result = await setup_steps.setup_tenant_branding(store, context)

    assert result["previous_settings"] == {"legacy_theme": "blue"}
    updated = (await store.select(Tenant, {"id": tenant.id}))[0]
    assert updated.settings["branding"]["company_name"] == tenant.name
    assert updated.settings["features"]["advanced_analytics"] is True

    await setup_steps.rollback_tenant_branding(store, context, result)

    restored = (await store.select(Tenant, {"id": tenant.id}))[0]
    assert restored.settings == {"legacy_theme": "blue"}


@pytest.mark.asyncio
async def test_branding_requires_existing_tenant(store: TableStore, tenant_owner):
    _, owner = tenant_owner
    context = SetupContext(uuid.uuid4(), owner.id, owner.email, "Ghost Co")

    with pytest.raises(LookupError):
        await setup_steps.setup_tenant_branding(store, context)


@pytest.mark.asyncio
async def test_branding_probe_looks_for_branding_key(store: TableStore, tenant_factory):
    tenant, owner = await tenant_factory("probe-branding", settings={"legacy_theme": "blue"})

    assert await setup_steps.has_tenant_branding(store, tenant.id, owner.id) is False
    await setup_steps.setup_tenant_branding(store, _context_for(tenant, owner))
    assert await setup_steps.has_tenant_branding(store, tenant.id, owner.id) is True


@pytest.mark.asyncio
async def test_branding_rollback_without_snapshot_writes_nothing(
    store: TableStore, tenant_factory
):
    tenant, owner = await tenant_factory("no-snapshot", settings={"legacy_theme": "blue"})

    await setup_steps.rollback_tenant_branding(store, _context_for(tenant, owner), None)

    unchanged = (await store.select(Tenant, {"id": tenant.id}))[0]
    assert unchanged.settings == {"legacy_theme": "blue"}


@pytest.mark.asyncio
async def test_probes_match_execute(store: TableStore, tenant_owner):
    """Every probe flips from False to True once its step has run."""
    tenant, owner = tenant_owner
    context = _context_for(tenant, owner)

    for step in SETUP_STEPS:
        assert await step.probe(store, tenant.id, owner.id) is False, step.name
        await step.execute(store, context)
        assert await step.probe(store, tenant.id, owner.id) is True, step.name
