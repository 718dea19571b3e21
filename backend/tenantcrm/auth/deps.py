from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tenantcrm.auth.models import User
from tenantcrm.auth.scope import DataScope, resolve_scope
from tenantcrm.auth.security import verify_access_token
from tenantcrm.core.errors import AuthenticationError, ForbiddenError, ValidationError
from tenantcrm.db.session import get_db
from tenantcrm.tenants.store import get_membership_with_role

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    email: str
    tenant_id: str | None


@dataclass(frozen=True)
class TenantContext:
    user_id: str
    email: str
    tenant_id: str
    role_id: str
    role_name: str
    scope: DataScope


def get_auth_context(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> AuthContext:
    # identity comes only from the verified token; x-tenant-id / x-user-id headers are ignored
    if not creds:
        raise AuthenticationError("Access token required")

    payload = verify_access_token(creds.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    ctx = AuthContext(user_id=payload.user_id, email=payload.email, tenant_id=payload.tenant_id)
    request.state.auth = ctx
    return ctx


def get_current_user(
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, ctx.user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")
    return user


def get_active_auth_context(
    ctx: AuthContext = Depends(get_auth_context),
    user: User = Depends(get_current_user),
) -> AuthContext:
    """Token identity, refused once the account behind it is gone or deactivated."""
    return ctx


def require_tenant(
    request: Request,
    ctx: AuthContext = Depends(get_active_auth_context),
    db: Session = Depends(get_db),
) -> TenantContext:
    if not ctx.tenant_id:
        raise ValidationError("Tenant context required")

    row = get_membership_with_role(db, ctx.user_id, ctx.tenant_id)
    if row is None:
        raise ForbiddenError("You do not have access to this tenant")

    tenant_ctx = TenantContext(
        user_id=ctx.user_id,
        email=ctx.email,
        tenant_id=ctx.tenant_id,
        role_id=row.role.id,
        role_name=row.role.name,
        scope=resolve_scope(row.role.name),
    )
    request.state.tenant = tenant_ctx
    return tenant_ctx

