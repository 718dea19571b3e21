import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func, select
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError

from tenantcrm.auth.models import Permission
from tenantcrm.auth.router import router as auth_router
from tenantcrm.core.config import settings
from tenantcrm.core.error_handling import register_exception_handlers
from tenantcrm.crm.router import router as leads_router
from tenantcrm.db.init_db import init_db
from tenantcrm.db.session import SessionLocal
from tenantcrm.tenants.router import router as tenants_router

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(title="Tenant CRM", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
register_exception_handlers(app)

for router, path, tag in (
    (auth_router, "/auth", "auth"),
    (tenants_router, "/tenants", "tenants"),
    (leads_router, "/leads", "leads"),
):
    app.include_router(router, prefix=f"{API_PREFIX}{path}", tags=[tag])


@app.on_event("startup")
def on_startup() -> None:
    logger.info(
        "Starting env=%s db=%s access_ttl_min=%s refresh_ttl_days=%s refresh_cap=%s team_depth=%s",
        settings.ENV,
        make_url(settings.DATABASE_URL).get_backend_name(),
        settings.JWT_ACCESS_EXP_MINUTES,
        settings.JWT_REFRESH_EXP_DAYS,
        settings.MAX_ACTIVE_REFRESH_TOKENS,
        settings.TEAM_SCOPE_MAX_DEPTH,
    )
    init_db()


@app.get("/health", tags=["system"])
def health():
    return {"status": "ok"}


@app.get("/ready", tags=["system"])
def readiness():
    """Ready once the database answers and the permission catalogue is seeded."""
    db = SessionLocal()
    try:
        permissions = db.scalar(select(func.count()).select_from(Permission))
    except SQLAlchemyError:
        logger.warning("Readiness check could not reach the database", exc_info=True)
        raise HTTPException(status_code=503, detail="Database not ready")
    finally:
        db.close()
    if not permissions:
        raise HTTPException(status_code=503, detail="Reference data not seeded")
    return {"status": "ready"}
