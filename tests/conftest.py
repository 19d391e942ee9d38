"""Shared test fixtures — async SQLite in-memory DB, setup service + test client."""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models so metadata is populated
import clearspendly.models  # noqa: F401
from clearspendly.api.deps import get_setup_service, get_store
from clearspendly.core.config import Settings, get_settings
from clearspendly.core.database import get_session
from clearspendly.main import app
from clearspendly.models.tenant import Tenant
from clearspendly.models.user import Membership, MembershipRole, User
from clearspendly.services.data_access import TableStore
from clearspendly.services.setup_steps import SetupContext
from clearspendly.services.tenant_setup import SetupPolicy, TenantSetupService

ADMIN_API_KEY = "test-admin-key"

TenantFactory = Callable[..., Awaitable[tuple[Tenant, User | None]]]


@pytest.fixture
async def engine():
    # One shared connection so every session sees the same in-memory database
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
def store(test_session_factory) -> TableStore:
    return TableStore(test_session_factory)


@pytest.fixture
def fast_policy() -> SetupPolicy:
    """Real retry counts, no backoff wait."""
    return SetupPolicy(step_timeout_seconds=5.0, max_retries=2, backoff_seconds=0.0)


@pytest.fixture
def setup_service(store, fast_policy) -> TenantSetupService:
    return TenantSetupService(store, policy=fast_policy)


@pytest.fixture
def tenant_factory(session) -> TenantFactory:
    """Create a tenant, optionally with an owner user + membership."""

    async def _create(
        slug: str,
        *,
        name: str | None = None,
        plan: str = "free",
        with_owner: bool = True,
        settings: dict | None = None,
    ) -> tuple[Tenant, User | None]:
        tenant = Tenant(
            name=name or f"{slug.title()} Co",
            slug=slug,
            subscription_plan=plan,
            settings=settings or {},
        )
        session.add(tenant)
        owner = None
        if with_owner:
            owner = User(email=f"owner@{slug}.com", display_name="Owner")
            session.add(owner)
        await session.flush()
        if owner is not None:
            session.add(
                Membership(tenant_id=tenant.id, user_id=owner.id, role=MembershipRole.OWNER)
            )
        await session.commit()
        return tenant, owner

    return _create


@pytest.fixture
async def tenant_owner(tenant_factory) -> tuple[Tenant, User]:
    tenant, owner = await tenant_factory("acme", name="Acme Corp")
    assert owner is not None
    return tenant, owner


@pytest.fixture
def setup_context(tenant_owner) -> SetupContext:
    tenant, owner = tenant_owner
    return SetupContext(
        tenant_id=tenant.id,
        user_id=owner.id,
        user_email=owner.email,
        company_name=tenant.name,
        subscription_plan=tenant.subscription_plan,
    )


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_API_KEY}"}


@pytest.fixture
async def client(session, store, setup_service) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB, store, service and settings overrides."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_setup_service] = lambda: setup_service
    app.dependency_overrides[get_settings] = lambda: Settings(admin_api_key=ADMIN_API_KEY)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
