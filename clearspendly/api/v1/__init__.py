"""V1 API router aggregation."""

from fastapi import APIRouter

from clearspendly.api.v1.admin import router as admin_router
from clearspendly.api.v1.tenant_setup import router as tenant_setup_router
from clearspendly.api.v1.tenants import router as tenants_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(tenants_router)
v1_router.include_router(tenant_setup_router)
v1_router.include_router(admin_router)
