"""Tests for the table-scoped data access layer."""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from clearspendly.models.tenant import Tenant
from clearspendly.models.vendor import VendorCategory
from clearspendly.services.data_access import DataAccessError, TableStore


@pytest.mark.asyncio
async def test_insert_returns_populated_row(store: TableStore, tenant_owner):
    tenant, owner = tenant_owner

    row = await store.insert(VendorCategory, {
        "tenant_id": tenant.id,
        "name": "Utilities",
        "created_by": owner.id,
    })

    assert row.id is not None
    assert row.created_at is not None
    assert row.name == "Utilities"


@pytest.mark.asyncio
async def test_select_filters_by_every_column(store: TableStore, tenant_factory):
    first, _ = await tenant_factory("first")
    second, _ = await tenant_factory("second")
    for name in ("Travel", "Insurance"):
        await store.insert(VendorCategory, {"tenant_id": first.id, "name": name})
    await store.insert(VendorCategory, {"tenant_id": second.id, "name": "Travel"})

    assert len(await store.select(VendorCategory, {"tenant_id": first.id})) == 2
    rows = await store.select(VendorCategory, {"tenant_id": second.id, "name": "Travel"})
    assert len(rows) == 1
    assert rows[0].tenant_id == second.id
    assert len(await store.select(VendorCategory, {"tenant_id": first.id}, limit=1)) == 1


@pytest.mark.asyncio
async def test_exists(store: TableStore, tenant_owner):
    tenant, _ = tenant_owner

    assert await store.exists(Tenant, {"id": tenant.id}) is True
    assert await store.exists(VendorCategory, {"tenant_id": tenant.id}) is False


@pytest.mark.asyncio
async def test_update_patches_rows_and_bumps_updated_at(store: TableStore, tenant_owner):
    tenant, _ = tenant_owner
    before = (await store.select(Tenant, {"id": tenant.id}))[0].updated_at

    rows = await store.update(Tenant, {"settings": {"theme": "dark"}}, {"id": tenant.id})

    assert len(rows) == 1
    assert rows[0].settings == {"theme": "dark"}
    assert rows[0].updated_at >= before
    reloaded = await store.select(Tenant, {"id": tenant.id})
    assert reloaded[0].settings == {"theme": "dark"}


@pytest.mark.asyncio
async def test_delete_is_scoped_to_filters(store: TableStore, tenant_factory):
    first, _ = await tenant_factory("del-first")
    second, _ = await tenant_factory("del-second")
    await store.insert(VendorCategory, {"tenant_id": first.id, "name": "Travel"})
    await store.insert(VendorCategory, {"tenant_id": second.id, "name": "Travel"})

    removed = await store.delete(VendorCategory, {"tenant_id": first.id})

    assert removed == 1
    assert await store.exists(VendorCategory, {"tenant_id": first.id}) is False
    assert await store.exists(VendorCategory, {"tenant_id": second.id}) is True


@pytest.mark.asyncio
async def test_delete_without_filters_is_refused(store: TableStore):
    with pytest.raises(ValueError):
        await store.delete(VendorCategory, {})


@pytest.mark.asyncio
async def test_integrity_error_is_wrapped(store: TableStore, tenant_owner):
    tenant, _ = tenant_owner

    with pytest.raises(DataAccessError) as exc_info:
        await store.insert(Tenant, {"name": "Dup", "slug": tenant.slug})

    assert exc_info.value.operation == "insert"
    assert exc_info.value.table == "tenant"


@pytest.mark.asyncio
async def test_session_failure_is_wrapped():
    def broken_factory():
        raise SQLAlchemyError("database unavailable")

    store = TableStore(broken_factory)

    with pytest.raises(DataAccessError, match="database unavailable"):
        await store.select(Tenant, {})
