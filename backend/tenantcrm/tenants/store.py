"""Lookups and writes over tenants, roles, permissions and memberships.

Nothing here commits; callers own the transaction.
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from tenantcrm.auth.models import Permission, Role, RolePermission, User
from tenantcrm.db.base import new_id
from tenantcrm.tenants.defaults import DEFAULT_GLOBAL_ROLES, DEFAULT_PERMISSIONS
from tenantcrm.tenants.models import Tenant, TenantMembership


@dataclass(frozen=True)
class MembershipRow:
    tenant: Tenant
    role: Role
    membership: TenantMembership


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def get_membership(db: Session, user_id: str, tenant_id: str) -> TenantMembership | None:
    return db.execute(
        select(TenantMembership).where(
            TenantMembership.user_id == user_id,
            TenantMembership.tenant_id == tenant_id,
        )
    ).scalar_one_or_none()


def get_membership_with_role(db: Session, user_id: str, tenant_id: str) -> MembershipRow | None:
    row = db.execute(
        select(Tenant, Role, TenantMembership)
        .join(TenantMembership, TenantMembership.tenant_id == Tenant.id)
        .join(Role, Role.id == TenantMembership.role_id)
        .where(
            TenantMembership.user_id == user_id,
            TenantMembership.tenant_id == tenant_id,
        )
    ).first()
    if row is None:
        return None
    return MembershipRow(tenant=row[0], role=row[1], membership=row[2])


def list_user_tenants(db: Session, user_id: str) -> list[MembershipRow]:
    rows = db.execute(
        select(Tenant, Role, TenantMembership)
        .join(TenantMembership, TenantMembership.tenant_id == Tenant.id)
        .join(Role, Role.id == TenantMembership.role_id)
        .where(TenantMembership.user_id == user_id)
        .order_by(TenantMembership.created_at, TenantMembership.id)
    ).all()
    return [MembershipRow(tenant=t, role=r, membership=m) for t, r, m in rows]


def list_tenant_members(db: Session, tenant_id: str) -> list[tuple[User, TenantMembership]]:
    rows = db.execute(
        select(User, TenantMembership)
        .join(TenantMembership, TenantMembership.user_id == User.id)
        .where(TenantMembership.tenant_id == tenant_id)
        .order_by(TenantMembership.created_at, TenantMembership.id)
    ).all()
    return [(u, m) for u, m in rows]


def add_user_to_tenant(
    db: Session,
    *,
    user_id: str,
    tenant_id: str,
    role_id: str,
    manager_id: str | None = None,
) -> TenantMembership:
    membership = TenantMembership(
        id=new_id("tu"),
        user_id=user_id,
        tenant_id=tenant_id,
        role_id=role_id,
        manager_id=manager_id,
        created_at=datetime.utcnow(),
    )
    db.add(membership)
    return membership


def get_role_for_tenant(db: Session, role_id: str, tenant_id: str) -> Role | None:
    """A role is usable in a tenant when it is global or scoped to that tenant."""
    return db.execute(
        select(Role).where(
            Role.id == role_id,
            Role.is_active.is_(True),
            or_(Role.tenant_id.is_(None), Role.tenant_id == tenant_id),
        )
    ).scalar_one_or_none()


def role_has_permission(db: Session, role_id: str, permission_name: str) -> bool:
    found = db.execute(
        select(RolePermission.id)
        .join(Permission, Permission.id == RolePermission.permission_id)
        .where(RolePermission.role_id == role_id, Permission.name == permission_name)
    ).first()
    return found is not None


def grant_all_permissions(db: Session, role: Role) -> int:
    permission_ids = db.execute(select(Permission.id)).scalars().all()
    for permission_id in permission_ids:
        db.add(RolePermission(id=new_id("rp"), role_id=role.id, permission_id=permission_id))
    return len(permission_ids)


def ensure_reference_data(db: Session) -> dict[str, int]:
    """Create missing global roles and permissions. Idempotent."""
    created = {"roles": 0, "permissions": 0}

    existing_roles = set(
        db.execute(select(Role.name).where(Role.tenant_id.is_(None))).scalars().all()
    )
    for spec in DEFAULT_GLOBAL_ROLES:
        if spec["name"] in existing_roles:
            continue
        db.add(Role(id=new_id("r"), tenant_id=None, is_active=True, **spec))
        created["roles"] += 1

    existing_permissions = set(db.execute(select(Permission.name)).scalars().all())
    for spec in DEFAULT_PERMISSIONS:
        if spec["name"] in existing_permissions:
            continue
        db.add(Permission(id=new_id("perm"), **spec))
        created["permissions"] += 1

    db.flush()
    return created
