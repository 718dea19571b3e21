from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tenantcrm.auth import service
from tenantcrm.auth.deps import AuthContext, get_active_auth_context
from tenantcrm.auth.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from tenantcrm.db.session import get_db
from tenantcrm.tenants.schemas import TenantMembershipOut, TenantOut

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    result = service.register_user(
        db,
        username=payload.username,
        email=str(payload.email),
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
    )
    return RegisterResponse(
        user=UserOut.model_validate(result.user),
        tenant=TenantOut.model_validate(result.tenant),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    result = service.login(db, email=str(payload.email), password=payload.password)
    return LoginResponse(
        user=UserOut.model_validate(result.user),
        tenant_id=result.tenant_id,
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    result = service.refresh_session(db, payload.refresh_token)
    return RefreshResponse(
        user=UserOut.model_validate(result.user),
        tenant=TenantOut.model_validate(result.tenant) if result.tenant else None,
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(payload: LogoutRequest, db: Session = Depends(get_db)):
    service.logout(db, payload.refresh_token)
    return LogoutResponse()


@router.get("/me", response_model=MeResponse)
def me(ctx: AuthContext = Depends(get_active_auth_context), db: Session = Depends(get_db)):
    session = service.current_session(db, ctx)
    return MeResponse(
        user=UserOut.model_validate(session.user),
        current_tenant=TenantOut.model_validate(session.current_tenant) if session.current_tenant else None,
        tenants=[TenantMembershipOut.from_row(row) for row in session.tenants],
    )
