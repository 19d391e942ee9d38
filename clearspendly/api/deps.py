"""FastAPI dependencies for admin authentication and setup services."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clearspendly.core.config import Settings, get_settings
from clearspendly.core.database import async_session_factory, get_session
from clearspendly.services.data_access import TableStore
from clearspendly.services.tenant_setup import TenantSetupService

bearer_scheme = HTTPBearer()


async def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Accept only the configured ADMIN_API_KEY as bearer token.

    An unset key rejects every request.
    """
    expected = settings.admin_api_key
    if not expected or not secrets.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin API key",
        )


def get_store() -> TableStore:
    return TableStore(async_session_factory)


def get_setup_service(
    store: Annotated[TableStore, Depends(get_store)],
) -> TenantSetupService:
    """A fresh orchestrator per request."""
    return TenantSetupService(store)


# Typed shorthand for use in route signatures
Session = Annotated[AsyncSession, Depends(get_session)]
SetupService = Annotated[TenantSetupService, Depends(get_setup_service)]
AdminRequired = Depends(require_admin)
