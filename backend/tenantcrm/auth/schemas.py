from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tenantcrm.tenants.schemas import TenantMembershipOut, TenantOut


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    # bcrypt hard limit = 72 bytes
    password: str = Field(min_length=6, max_length=72)
    first_name: str = Field(min_length=1, max_length=128)
    last_name: str = Field(min_length=1, max_length=128)
    phone: str | None = Field(default=None, max_length=32)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=20)


class LogoutRequest(BaseModel):
    refresh_token: str = Field(min_length=20)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None


class RegisterResponse(BaseModel):
    user: UserOut
    tenant: TenantOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    user: UserOut
    tenant_id: str | None
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshResponse(BaseModel):
    user: UserOut
    tenant: TenantOut | None = None
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user: UserOut
    current_tenant: TenantOut | None = None
    tenants: list[TenantMembershipOut]


class LogoutResponse(BaseModel):
    ok: bool = True
