"""Import all models so SQLModel.metadata picks them up."""

from clearspendly.models.mileage import IRSMileageRate
from clearspendly.models.preferences import UserPreferences
from clearspendly.models.setup_log import (
    MigrationLog,
    MigrationLogRead,
    SetupStatus,
    TenantSetupLog,
    TenantSetupLogRead,
)
from clearspendly.models.tag import Tag, TagCategory
from clearspendly.models.template import EmailTemplate, EmailTemplateType, InvoiceTemplate
from clearspendly.models.tenant import SubscriptionPlan, Tenant, TenantRead
from clearspendly.models.usage import TenantUsage
from clearspendly.models.user import Membership, MembershipRole, User, UserRead
from clearspendly.models.vendor import VendorCategory

__all__ = [
    "EmailTemplate",
    "EmailTemplateType",
    "IRSMileageRate",
    "InvoiceTemplate",
    "Membership",
    "MembershipRole",
    "MigrationLog",
    "MigrationLogRead",
    "SetupStatus",
    "SubscriptionPlan",
    "Tag",
    "TagCategory",
    "Tenant",
    "TenantRead",
    "TenantSetupLog",
    "TenantSetupLogRead",
    "TenantUsage",
    "User",
    "UserPreferences",
    "UserRead",
    "VendorCategory",
]
