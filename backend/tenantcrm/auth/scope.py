"""Role-driven row visibility.

Every tenant-owned query that honours data scope goes through here, so adding
a role means adding one entry to ROLE_DATA_SCOPES.
"""
from enum import Enum
from typing import Iterable

from sqlalchemy import or_, select, true
from sqlalchemy.orm import Session

from tenantcrm.core.config import settings
from tenantcrm.core.errors import ForbiddenError
from tenantcrm.tenants.models import TenantMembership


class DataScope(str, Enum):
    OWN = "own"
    TEAM = "team"
    ALL = "all"


_SCOPE_WIDTH = {DataScope.OWN: 0, DataScope.TEAM: 1, DataScope.ALL: 2}

ROLE_DATA_SCOPES: dict[str, DataScope] = {
    "owner": DataScope.ALL,
    "admin": DataScope.ALL,
    "administrator": DataScope.ALL,
    "sales manager": DataScope.ALL,
    "director": DataScope.ALL,
    "manager": DataScope.TEAM,
    "supervisor": DataScope.TEAM,
    "team lead": DataScope.TEAM,
    "agent": DataScope.OWN,
    "member": DataScope.OWN,
    "viewer": DataScope.OWN,
}


def _normalize_role_name(name: str | None) -> str:
    return " ".join((name or "").lower().split())


def resolve_scope(role_name: str | None) -> DataScope:
    # unknown roles get the narrowest scope
    return ROLE_DATA_SCOPES.get(_normalize_role_name(role_name), DataScope.OWN)


def narrow_scope(requested: DataScope, allowed: DataScope) -> DataScope:
    if _SCOPE_WIDTH[requested] > _SCOPE_WIDTH[allowed]:
        raise ForbiddenError(f"Role does not permit '{requested.value}' data scope")
    return requested


def resolve_team_member_ids(
    db: Session,
    *,
    tenant_id: str,
    manager_id: str,
    max_depth: int | None = None,
) -> set[str]:
    """Manager plus everyone reporting to them, directly or transitively, within one tenant.

    Breadth-first over tenant_users.manager_id; a visited set stops cycles and
    ``max_depth`` bounds how many reporting levels are walked.
    """
    depth_limit = settings.TEAM_SCOPE_MAX_DEPTH if max_depth is None else max_depth
    seen = {manager_id}
    frontier = [manager_id]
    depth = 0
    while frontier and depth < depth_limit:
        reports = db.execute(
            select(TenantMembership.user_id).where(
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.manager_id.in_(frontier),
            )
        ).scalars().all()
        frontier = [uid for uid in reports if uid not in seen]
        seen.update(frontier)
        depth += 1
    return seen


def scope_filter(model, *, scope: DataScope, requester_id: str, team_ids: Iterable[str] | None = None):
    if scope is DataScope.ALL:
        return true()
    if scope is DataScope.TEAM:
        # assignee only
        return model.assigned_to_id.in_(sorted(set(team_ids or ()) | {requester_id}))
    return or_(model.assigned_to_id == requester_id, model.created_by_id == requester_id)


def apply_scope(
    stmt,
    model,
    *,
    scope: DataScope,
    tenant_id: str,
    requester_id: str,
    team_ids: Iterable[str] | None = None,
):
    """Narrow ``stmt`` to one tenant and to the rows ``scope`` lets the requester see."""
    return stmt.where(
        model.tenant_id == tenant_id,
        scope_filter(model, scope=scope, requester_id=requester_id, team_ids=team_ids),
    )
