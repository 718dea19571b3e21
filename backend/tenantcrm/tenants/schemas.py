from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TenantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    subdomain: str


class TenantMembershipOut(BaseModel):
    id: str
    name: str
    subdomain: str
    role_id: str
    role: str
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "TenantMembershipOut":
        return cls(
            id=row.tenant.id,
            name=row.tenant.name,
            subdomain=row.tenant.subdomain,
            role_id=row.role.id,
            role=row.role.name,
            created_at=row.membership.created_at,
        )


class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class TenantSwitchRequest(BaseModel):
    tenant_id: str = Field(min_length=3, max_length=64)


class TenantAccessResponse(BaseModel):
    tenant: TenantOut
    access_token: str
    token_type: str = "bearer"


class TenantMemberOut(BaseModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    role_id: str
    manager_id: str | None = None


class TenantDetailOut(BaseModel):
    id: str
    name: str
    subdomain: str
    created_at: datetime
    members: list[TenantMemberOut]


class TenantInviteRequest(BaseModel):
    email: EmailStr
    role_id: str = Field(min_length=3, max_length=64)
    manager_id: str | None = Field(default=None, min_length=3, max_length=64)


class TenantInviteResponse(BaseModel):
    tenant_id: str
    user_id: str
    role_id: str
    message: str = "User added to tenant successfully"
