from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tenantcrm.auth import service
from tenantcrm.auth.deps import AuthContext, get_active_auth_context, get_current_user
from tenantcrm.auth.models import User
from tenantcrm.db.session import get_db
from tenantcrm.tenants.schemas import (
    TenantAccessResponse,
    TenantCreate,
    TenantDetailOut,
    TenantInviteRequest,
    TenantInviteResponse,
    TenantMemberOut,
    TenantMembershipOut,
    TenantOut,
    TenantSwitchRequest,
)
from tenantcrm.tenants.store import list_user_tenants

router = APIRouter()


@router.get("", response_model=list[TenantMembershipOut])
def list_tenants(ctx: AuthContext = Depends(get_active_auth_context), db: Session = Depends(get_db)):
    return [TenantMembershipOut.from_row(row) for row in list_user_tenants(db, ctx.user_id)]


@router.post("", response_model=TenantAccessResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    access = service.create_tenant_for_user(db, current_user, payload.name)
    return TenantAccessResponse(tenant=TenantOut.model_validate(access.tenant), access_token=access.access_token)


@router.post("/switch", response_model=TenantAccessResponse)
def switch_tenant(
    payload: TenantSwitchRequest,
    ctx: AuthContext = Depends(get_active_auth_context),
    db: Session = Depends(get_db),
):
    access = service.switch_tenant(db, ctx, payload.tenant_id)
    return TenantAccessResponse(tenant=TenantOut.model_validate(access.tenant), access_token=access.access_token)


@router.get("/{tenant_id}", response_model=TenantDetailOut)
def get_tenant(
    tenant_id: str,
    ctx: AuthContext = Depends(get_active_auth_context),
    db: Session = Depends(get_db),
):
    detail = service.get_tenant_detail(db, ctx, tenant_id)
    return TenantDetailOut(
        id=detail.tenant.id,
        name=detail.tenant.name,
        subdomain=detail.tenant.subdomain,
        created_at=detail.tenant.created_at,
        members=[
            TenantMemberOut(
                id=user.id,
                username=user.username,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                role_id=membership.role_id,
                manager_id=membership.manager_id,
            )
            for user, membership in detail.members
        ],
    )


@router.post("/{tenant_id}/invite", response_model=TenantInviteResponse, status_code=status.HTTP_201_CREATED)
def invite_member(
    tenant_id: str,
    payload: TenantInviteRequest,
    ctx: AuthContext = Depends(get_active_auth_context),
    db: Session = Depends(get_db),
):
    membership = service.invite_member(
        db,
        ctx,
        tenant_id=tenant_id,
        email=str(payload.email),
        role_id=payload.role_id,
        manager_id=payload.manager_id,
    )
    return TenantInviteResponse(
        tenant_id=membership.tenant_id,
        user_id=membership.user_id,
        role_id=membership.role_id,
    )
