from sqlalchemy.orm import Session

from tenantcrm.audit.models import EventLog
from tenantcrm.db.base import new_id


def record_event(
    db: Session,
    *,
    event_type: str,
    source_entity: str,
    description: str,
    user_id: str | None = None,
    tenant_id: str | None = None,
    source_entity_id: str | None = None,
    metadata: dict | None = None,
) -> EventLog:
    """Stage an audit row in the caller's transaction; committed with the operation it describes."""
    row = EventLog(
        id=new_id("ev"),
        tenant_id=tenant_id,
        user_id=user_id,
        event_type=event_type,
        source_entity=source_entity,
        source_entity_id=source_entity_id,
        description=description,
        metadata_json=metadata or {},
    )
    db.add(row)
    return row
