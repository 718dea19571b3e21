from datetime import datetime

from pydantic import BaseModel, ConfigDict

from tenantcrm.auth.scope import DataScope


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    status: str
    assigned_to_id: str | None = None
    created_by_id: str | None = None
    created_at: datetime


class LeadListResponse(BaseModel):
    scope: DataScope
    items: list[LeadOut]
