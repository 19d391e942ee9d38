"""Tests for admin setup-repair and migration endpoints."""

import uuid

import pytest
from httpx import AsyncClient

from clearspendly.models.tag import TagCategory
from clearspendly.services import setup_steps
from clearspendly.services.setup_steps import SetupContext


@pytest.mark.asyncio
async def test_individual_setup_repairs_unset_tenant(
    client: AsyncClient, admin_headers, tenant_owner, store
):
    tenant, _ = tenant_owner

    resp = await client.post(
        "/v1/admin/setup-individual-tenant",
        json={"tenant_id": str(tenant.id)},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["skipped"] is False
    assert body["tenant_name"] == "Acme Corp"
    assert body["setup_result"]["message"] == "Added 8 missing components"
    assert len(await store.select(TagCategory, {"tenant_id": tenant.id})) == 5


@pytest.mark.asyncio
async def test_individual_setup_skips_set_up_tenant(
    client: AsyncClient, admin_headers, setup_service, setup_context
):
    await setup_service.setup_tenant(setup_context)

    resp = await client.post(
        "/v1/admin/setup-individual-tenant",
        json={"tenant_id": str(setup_context.tenant_id)},
        headers=admin_headers,
    )

    body = resp.json()
    assert body["success"] is True
    assert body["skipped"] is True
    assert body["message"] == "Tenant already has setup completed"
    assert body["setup_result"] is None


@pytest.mark.asyncio
async def test_forced_setup_runs_full_pipeline(
    client: AsyncClient, admin_headers, setup_service, setup_context
):
    await setup_service.setup_tenant(setup_context)

    resp = await client.post(
        "/v1/admin/setup-individual-tenant",
        json={"tenant_id": str(setup_context.tenant_id), "force": True},
        headers=admin_headers,
    )

    body = resp.json()
    assert body["skipped"] is False
    assert body["setup_result"]["message"] == "Tenant setup completed successfully"


@pytest.mark.asyncio
async def test_individual_setup_unknown_or_ownerless_tenant(
    client: AsyncClient, admin_headers, tenant_factory
):
    orphan, _ = await tenant_factory("orphan", with_owner=False)

    for tenant_id in (uuid.uuid4(), orphan.id):
        resp = await client.post(
            "/v1/admin/setup-individual-tenant",
            json={"tenant_id": str(tenant_id)},
            headers=admin_headers,
        )
        assert resp.status_code == 404


@pytest.mark.asyncio
async def test_individual_status_report(
    client: AsyncClient, admin_headers, store, tenant_owner
):
    tenant, owner = tenant_owner
    context = SetupContext(tenant.id, owner.id, owner.email, tenant.name)
    await setup_steps.create_tag_system(store, context)
    await setup_steps.create_email_templates(store, context)

    resp = await client.get(
        "/v1/admin/setup-individual-tenant",
        params={"tenant_id": str(tenant.id)},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["tenant"]["id"] == str(tenant.id)
    assert body["setup_completed"] is False
    assert body["setup_log"] is None
    assert body["completion_percentage"] == 25
    assert body["component_status"][setup_steps.EMAIL_TEMPLATES] is True
    assert setup_steps.TENANT_BRANDING in body["missing_components"]


@pytest.mark.asyncio
async def test_individual_status_includes_latest_log(
    client: AsyncClient, admin_headers, setup_service, setup_context
):
    await setup_service.setup_tenant(setup_context)

    resp = await client.get(
        "/v1/admin/setup-individual-tenant",
        params={"tenant_id": str(setup_context.tenant_id)},
        headers=admin_headers,
    )

    body = resp.json()
    assert body["setup_completed"] is True
    assert body["setup_log"]["status"] == "completed"
    assert body["completion_percentage"] == 100
    assert body["missing_components"] == []


@pytest.mark.asyncio
async def test_migration_run_and_status(
    client: AsyncClient, admin_headers, setup_service, tenant_factory
):
    done, done_owner = await tenant_factory("already-done")
    await tenant_factory("legacy")
    await tenant_factory("ownerless", with_owner=False)
    await setup_service.setup_tenant(
        SetupContext(done.id, done_owner.id, done_owner.email, done.name)
    )

    resp = await client.post("/v1/admin/migrate-existing-tenants", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_tenants"] == 3
    assert body["successful_migrations"] == 2
    assert body["failed_migrations"] == 1
    assert body["message"] == "Migration completed: 2 successful, 1 failed"

    resp = await client.get("/v1/admin/migrate-existing-tenants", headers=admin_headers)

    status_body = resp.json()
    assert status_body["total_tenants"] == 3
    assert status_body["tenants_with_setup"] == 1
    assert status_body["migration_progress"] == 33
    assert len(status_body["recent_migrations"]) == 1
    assert status_body["recent_migrations"][0]["tenants_processed"] == 3


@pytest.mark.asyncio
async def test_admin_routes_reject_wrong_key(client: AsyncClient):
    resp = await client.post(
        "/v1/admin/migrate-existing-tenants",
        headers={"Authorization": "Bearer nope"},
    )
    assert resp.status_code == 401
