import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from tenantcrm.auth.deps import TenantContext, require_tenant
from tenantcrm.auth.scope import DataScope, apply_scope, narrow_scope, resolve_team_member_ids
from tenantcrm.crm.models import Lead
from tenantcrm.crm.schemas import LeadListResponse, LeadOut
from tenantcrm.db.session import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=LeadListResponse)
def list_leads(
    scope: DataScope | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    ctx: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    effective = narrow_scope(scope, ctx.scope) if scope else ctx.scope

    team_ids = None
    if effective is DataScope.TEAM:
        team_ids = resolve_team_member_ids(db, tenant_id=ctx.tenant_id, manager_id=ctx.user_id)

    stmt = apply_scope(
        select(Lead),
        Lead,
        scope=effective,
        tenant_id=ctx.tenant_id,
        requester_id=ctx.user_id,
        team_ids=team_ids,
    )
    rows = db.execute(stmt.order_by(Lead.created_at.desc(), Lead.id).limit(limit)).scalars().all()
    logger.debug("lead list tenant_id=%s scope=%s rows=%s", ctx.tenant_id, effective.value, len(rows))
    return LeadListResponse(scope=effective, items=[LeadOut.model_validate(r) for r in rows])
