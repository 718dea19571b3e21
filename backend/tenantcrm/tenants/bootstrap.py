"""Provision a brand-new tenant with everything a first login needs.

The steps run in the caller's transaction and are flushed, never committed.
If any step fails the whole session is rolled back, so the database never
holds a tenant without its owner, pipeline or reference data.
"""
import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenantcrm.auth.models import Role, User
from tenantcrm.core.errors import TenantBootstrapError
from tenantcrm.crm.models import (
    ActivityType,
    InterestLevel,
    LeadSource,
    ProductCategory,
    ProductType,
    SalesPipeline,
    SalesStage,
)
from tenantcrm.db.base import new_id
from tenantcrm.tenants import defaults
from tenantcrm.tenants.models import Tenant
from tenantcrm.tenants.store import add_user_to_tenant, grant_all_permissions

logger = logging.getLogger(__name__)


def _slugify(value: str, *, fallback: str) -> str:
    raw = "".join(ch.lower() if ch.isascii() and ch.isalnum() else "-" for ch in value.strip())
    raw = "-".join(part for part in raw.split("-") if part)
    return raw[:40] if raw else fallback


def make_subdomain(name: str) -> str:
    return f"{_slugify(name, fallback='tenant')}-{secrets.token_hex(3)}"


def _create_tenant(db: Session, name: str) -> Tenant:
    tenant = Tenant(id=new_id("t"), name=name, subdomain=make_subdomain(name))
    db.add(tenant)
    db.flush()
    return tenant


def _create_owner_role(db: Session, tenant: Tenant) -> Role:
    role = Role(id=new_id("r"), tenant_id=tenant.id, is_active=True, **defaults.OWNER_ROLE)
    db.add(role)
    db.flush()
    grant_all_permissions(db, role)
    return role


def _create_pipeline(db: Session, tenant: Tenant) -> SalesPipeline:
    pipeline = SalesPipeline(
        id=new_id("sp"),
        tenant_id=tenant.id,
        is_default=True,
        **defaults.DEFAULT_PIPELINE,
    )
    db.add(pipeline)
    db.flush()
    return pipeline


def _create_stages(db: Session, tenant: Tenant, pipeline: SalesPipeline) -> None:
    for position, spec in enumerate(defaults.DEFAULT_SALES_STAGES, start=1):
        db.add(
            SalesStage(
                id=new_id("ss"),
                tenant_id=tenant.id,
                pipeline_id=pipeline.id,
                order=position,
                **spec,
            )
        )


def _create_interest_levels(db: Session, tenant: Tenant) -> None:
    for spec in defaults.DEFAULT_INTEREST_LEVELS:
        db.add(InterestLevel(id=new_id("il"), tenant_id=tenant.id, **spec))


def _create_activity_types(db: Session, tenant: Tenant) -> None:
    for spec in defaults.DEFAULT_ACTIVITY_TYPES:
        db.add(ActivityType(id=new_id("at"), tenant_id=tenant.id, **spec))


def _seed_reference_data(db: Session, tenant: Tenant) -> None:
    for spec in defaults.DEFAULT_LEAD_SOURCES:
        db.add(LeadSource(id=new_id("ls"), tenant_id=tenant.id, is_active=True, **spec))
    for spec in defaults.DEFAULT_PRODUCT_TYPES:
        db.add(ProductType(id=new_id("pt"), tenant_id=tenant.id, **spec))
    for spec in defaults.DEFAULT_PRODUCT_CATEGORIES:
        db.add(ProductCategory(id=new_id("pc"), tenant_id=tenant.id, **spec))


def create_default_tenant(db: Session, user: User, tenant_name: str) -> Tenant:
    """Create a tenant owned by ``user`` with its default CRM configuration.

    Raises TenantBootstrapError after rolling the session back if any insert fails.
    """
    user_id = user.id
    try:
        tenant = _create_tenant(db, tenant_name)
        owner_role = _create_owner_role(db, tenant)
        add_user_to_tenant(db, user_id=user_id, tenant_id=tenant.id, role_id=owner_role.id)
        user.last_tenant_id = tenant.id

        pipeline = _create_pipeline(db, tenant)
        _create_stages(db, tenant, pipeline)
        _create_interest_levels(db, tenant)
        _create_activity_types(db, tenant)
        _seed_reference_data(db, tenant)
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Tenant bootstrap failed for user_id=%s", user_id)
        raise TenantBootstrapError("Tenant provisioning failed, please retry") from exc

    logger.info("Bootstrapped tenant_id=%s for user_id=%s", tenant.id, user_id)
    return tenant
