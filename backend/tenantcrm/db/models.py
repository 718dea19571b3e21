from tenantcrm.tenants.models import Tenant, TenantMembership  # noqa: F401
from tenantcrm.auth.models import Permission, RefreshToken, Role, RolePermission, User  # noqa: F401
from tenantcrm.crm.models import (  # noqa: F401
    ActivityType,
    InterestLevel,
    Lead,
    LeadSource,
    ProductCategory,
    ProductType,
    SalesPipeline,
    SalesStage,
)
from tenantcrm.audit.models import EventLog  # noqa: F401
