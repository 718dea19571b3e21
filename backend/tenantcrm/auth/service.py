"""Register, login, refresh, logout and tenant switching.

Each public function here is one unit of work: it either commits everything
it staged or leaves the database untouched.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenantcrm.audit.service import record_event
from tenantcrm.auth.deps import AuthContext
from tenantcrm.auth.models import RefreshToken, User
from tenantcrm.auth.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    hash_token,
    refresh_token_expiry,
    verify_password,
)
from tenantcrm.core.config import settings
from tenantcrm.core.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from tenantcrm.db.base import new_id
from tenantcrm.tenants.bootstrap import create_default_tenant
from tenantcrm.tenants.models import Tenant, TenantMembership
from tenantcrm.tenants.store import (
    MembershipRow,
    add_user_to_tenant,
    get_membership,
    get_role_for_tenant,
    get_user_by_email,
    get_user_by_username,
    list_tenant_members,
    list_user_tenants,
    role_has_permission,
)

logger = logging.getLogger(__name__)

# every refresh rejection looks the same to the caller; the reason goes to the log
INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RegistrationResult:
    user: User
    tenant: Tenant
    tokens: SessionTokens


@dataclass(frozen=True)
class LoginResult:
    user: User
    tenant_id: str | None
    tokens: SessionTokens


@dataclass(frozen=True)
class RefreshResult:
    user: User
    tenant: Tenant | None
    tokens: SessionTokens


@dataclass(frozen=True)
class CurrentSession:
    user: User
    current_tenant: Tenant | None
    tenants: list[MembershipRow]


@dataclass(frozen=True)
class TenantAccess:
    tenant: Tenant
    access_token: str


@dataclass(frozen=True)
class TenantDetail:
    tenant: Tenant
    members: list[tuple[User, TenantMembership]]


def _workspace_name(user: User) -> str:
    return f"{user.display_name}'s Workspace"


def _commit(db: Session, conflict_message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message) from exc


def _enforce_refresh_token_limit(db: Session, *, user_id: str, now: datetime) -> None:
    db.flush()
    active_tokens = (
        db.execute(
            select(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id)
        )
        .scalars()
        .all()
    )
    for stale in active_tokens[settings.MAX_ACTIVE_REFRESH_TOKENS:]:
        stale.revoked = True
        stale.revoked_at = now


def _issue_refresh_token(db: Session, user_id: str) -> str:
    """Persist the hash of a fresh refresh token and hand back the plaintext exactly once."""
    now = datetime.utcnow()
    raw = generate_refresh_token()
    db.add(
        RefreshToken(
            id=new_id("rt"),
            user_id=user_id,
            token_hash=hash_token(raw),
            expires_at=refresh_token_expiry(now),
            revoked=False,
            created_at=now,
        )
    )
    _enforce_refresh_token_limit(db, user_id=user_id, now=now)
    return raw


def _issue_session(db: Session, user: User, tenant_id: str | None) -> SessionTokens:
    return SessionTokens(
        access_token=create_access_token(user.id, user.email, tenant_id),
        refresh_token=_issue_refresh_token(db, user.id),
    )


def _resolve_current_tenant_id(db: Session, user: User) -> str | None:
    """Last-used tenant if the user still belongs to it, else their oldest membership."""
    memberships = list_user_tenants(db, user.id)
    if not memberships:
        return None
    member_of = {row.tenant.id for row in memberships}
    if user.last_tenant_id in member_of:
        return user.last_tenant_id
    user.last_tenant_id = memberships[0].tenant.id
    return user.last_tenant_id


def register_user(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
) -> RegistrationResult:
    email = email.lower()
    if get_user_by_email(db, email):
        raise ConflictError("User already exists with this email")
    if get_user_by_username(db, username):
        raise ConflictError("Username already taken")

    try:
        password_hash = hash_password(password)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    user = User(
        id=new_id("u"),
        username=username,
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        is_active=True,
        last_login_at=datetime.utcnow(),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        # lost a race against a concurrent registration
        db.rollback()
        raise ConflictError("User already exists with this email or username") from exc

    tenant = create_default_tenant(db, user, _workspace_name(user))
    tokens = _issue_session(db, user, tenant.id)
    record_event(
        db,
        event_type="user_registered",
        source_entity="users",
        source_entity_id=user.id,
        description=f"Registered user {user.username}",
        user_id=user.id,
        tenant_id=tenant.id,
    )
    _commit(db, "User already exists with this email or username")
    logger.info("Registered user_id=%s tenant_id=%s", user.id, tenant.id)
    return RegistrationResult(user=user, tenant=tenant, tokens=tokens)


def login(db: Session, *, email: str, password: str) -> LoginResult:
    user = get_user_by_email(db, email)
    # one message for unknown email and wrong password
    if not verify_password(password, user.password_hash if user else None):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    tenant_id = _resolve_current_tenant_id(db, user)
    if tenant_id is None:
        tenant_id = create_default_tenant(db, user, _workspace_name(user)).id

    user.last_login_at = datetime.utcnow()
    tokens = _issue_session(db, user, tenant_id)
    record_event(
        db,
        event_type="login",
        source_entity="users",
        source_entity_id=user.id,
        description="User logged in",
        user_id=user.id,
        tenant_id=tenant_id,
    )
    _commit(db, "Login could not be completed")
    return LoginResult(user=user, tenant_id=tenant_id, tokens=tokens)


def refresh_session(db: Session, raw_refresh_token: str) -> RefreshResult:
    now = datetime.utcnow()
    row = db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_refresh_token))
    ).scalar_one_or_none()
    if not row:
        raise AuthenticationError(INVALID_REFRESH_TOKEN)
    if row.revoked:
        logger.warning("Rejected reuse of revoked refresh token id=%s user_id=%s", row.id, row.user_id)
        record_event(
            db,
            event_type="refresh_reuse_rejected",
            source_entity="refresh_tokens",
            source_entity_id=row.id,
            description="Revoked refresh token presented",
            user_id=row.user_id,
        )
        db.commit()
        raise AuthenticationError(INVALID_REFRESH_TOKEN)
    if row.expires_at <= now:
        logger.info("Rejected expired refresh token id=%s user_id=%s", row.id, row.user_id)
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    user = db.get(User, row.user_id)
    if not user or not user.is_active:
        logger.info("Rejected refresh for missing or inactive user_id=%s", row.user_id)
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    # single use: only one concurrent caller can flip revoked false -> true
    claimed = db.execute(
        update(RefreshToken)
        .where(RefreshToken.id == row.id, RefreshToken.revoked.is_(False))
        .values(revoked=True, revoked_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if claimed != 1:
        db.rollback()
        logger.warning("Lost refresh rotation race for token id=%s", row.id)
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    tenant_id = _resolve_current_tenant_id(db, user)
    tokens = _issue_session(db, user, tenant_id)
    tenant = db.get(Tenant, tenant_id) if tenant_id else None
    db.commit()
    return RefreshResult(user=user, tenant=tenant, tokens=tokens)


def logout(db: Session, raw_refresh_token: str) -> None:
    row = db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_refresh_token))
    ).scalar_one_or_none()
    if not row or row.revoked:
        return

    row.revoked = True
    row.revoked_at = datetime.utcnow()
    record_event(
        db,
        event_type="logout",
        source_entity="refresh_tokens",
        source_entity_id=row.id,
        description="User logged out",
        user_id=row.user_id,
    )
    db.commit()


def current_session(db: Session, ctx: AuthContext) -> CurrentSession:
    user = db.get(User, ctx.user_id)
    if not user:
        raise NotFoundError("User not found")
    tenants = list_user_tenants(db, user.id)
    current = next((row.tenant for row in tenants if row.tenant.id == ctx.tenant_id), None)
    return CurrentSession(user=user, current_tenant=current, tenants=tenants)


def switch_tenant(db: Session, ctx: AuthContext, tenant_id: str) -> TenantAccess:
    if not get_membership(db, ctx.user_id, tenant_id):
        raise ForbiddenError("You do not have access to this tenant")

    user = db.get(User, ctx.user_id)
    tenant = db.get(Tenant, tenant_id)
    if not user or not tenant:
        raise NotFoundError("Tenant not found")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    user.last_tenant_id = tenant.id
    record_event(
        db,
        event_type="tenant_switched",
        source_entity="tenants",
        source_entity_id=tenant.id,
        description="Switched active tenant",
        user_id=user.id,
        tenant_id=tenant.id,
        metadata={"from_tenant_id": ctx.tenant_id},
    )
    db.commit()
    logger.info("user_id=%s switched to tenant_id=%s", user.id, tenant.id)
    return TenantAccess(tenant=tenant, access_token=create_access_token(user.id, user.email, tenant.id))


def create_tenant_for_user(db: Session, user: User, name: str) -> TenantAccess:
    name = name.strip()
    if not name:
        raise ValidationError("Tenant name is required")
    tenant = create_default_tenant(db, user, name)
    record_event(
        db,
        event_type="tenant_created",
        source_entity="tenants",
        source_entity_id=tenant.id,
        description=f"Created tenant {tenant.name}",
        user_id=user.id,
        tenant_id=tenant.id,
    )
    _commit(db, "Tenant already exists")
    return TenantAccess(tenant=tenant, access_token=create_access_token(user.id, user.email, tenant.id))


def get_tenant_detail(db: Session, ctx: AuthContext, tenant_id: str) -> TenantDetail:
    if not get_membership(db, ctx.user_id, tenant_id):
        raise ForbiddenError("You do not have access to this tenant")
    tenant = db.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant not found")
    return TenantDetail(tenant=tenant, members=list_tenant_members(db, tenant_id))


def invite_member(
    db: Session,
    ctx: AuthContext,
    *,
    tenant_id: str,
    email: str,
    role_id: str,
    manager_id: str | None = None,
) -> TenantMembership:
    inviter = get_membership(db, ctx.user_id, tenant_id)
    if not inviter:
        raise ForbiddenError("You do not have access to this tenant")
    if not role_has_permission(db, inviter.role_id, "manage_users"):
        raise ForbiddenError("Missing required permission: manage_users")

    invitee = get_user_by_email(db, email)
    if not invitee:
        raise NotFoundError("User not found")
    role = get_role_for_tenant(db, role_id, tenant_id)
    if not role:
        raise NotFoundError("Role not found")
    if manager_id and not get_membership(db, manager_id, tenant_id):
        raise NotFoundError("Manager is not a member of this tenant")
    if get_membership(db, invitee.id, tenant_id):
        raise ConflictError("User is already a member of this tenant")

    membership = add_user_to_tenant(
        db,
        user_id=invitee.id,
        tenant_id=tenant_id,
        role_id=role.id,
        manager_id=manager_id,
    )
    record_event(
        db,
        event_type="member_invited",
        source_entity="tenant_users",
        source_entity_id=membership.id,
        description=f"Added {invitee.email} as {role.name}",
        user_id=ctx.user_id,
        tenant_id=tenant_id,
    )
    _commit(db, "User is already a member of this tenant")
    return membership


def deactivate_user(db: Session, user: User) -> int:
    """Disable the account and revoke every live refresh token it holds."""
    now = datetime.utcnow()
    user.is_active = False
    revoked = db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user.id, RefreshToken.revoked.is_(False))
        .values(revoked=True, revoked_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    db.commit()
    logger.info("Deactivated user_id=%s, revoked %s refresh tokens", user.id, revoked)
    return revoked


def purge_expired_refresh_tokens(db: Session, now: datetime | None = None) -> int:
    cutoff = now or datetime.utcnow()
    deleted = db.execute(
        delete(RefreshToken)
        .where(RefreshToken.expires_at <= cutoff)
        .execution_options(synchronize_session=False)
    ).rowcount
    db.commit()
    return deleted
