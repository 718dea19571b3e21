import os
from datetime import datetime

# Settings are read at import time, so the environment must be in place first.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only-do-not-use-in-production")
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import tenantcrm.db.models  # noqa: F401, E402
from tenantcrm.auth.models import Role, User  # noqa: E402
from tenantcrm.auth.security import create_access_token, hash_password  # noqa: E402
from tenantcrm.crm.models import Lead  # noqa: E402
from tenantcrm.db.base import Base, new_id  # noqa: E402
from tenantcrm.db.session import SessionLocal, engine  # noqa: E402
from tenantcrm.main import app  # noqa: E402
from tenantcrm.tenants.store import add_user_to_tenant, ensure_reference_data  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        ensure_reference_data(session)
        session.commit()
    finally:
        session.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(username: str, *, email: str | None = None, is_active: bool = True) -> User:
        user = User(
            id=new_id("u"),
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(PASSWORD),
            first_name=username.title(),
            last_name="Tester",
            is_active=is_active,
        )
        db.add(user)
        db.flush()
        return user

    return _make_user


@pytest.fixture
def global_role(db):
    def _global_role(name: str) -> Role:
        return db.query(Role).filter(Role.tenant_id.is_(None), Role.name == name).one()

    return _global_role


@pytest.fixture
def add_member(db):
    def _add_member(user: User, tenant_id: str, role: Role, manager: User | None = None):
        return add_user_to_tenant(
            db,
            user_id=user.id,
            tenant_id=tenant_id,
            role_id=role.id,
            manager_id=manager.id if manager else None,
        )

    return _add_member


@pytest.fixture
def make_lead(db):
    def _make_lead(tenant_id: str, owner: User, *, created_by: User | None = None) -> Lead:
        lead = Lead(
            id=new_id("ld"),
            tenant_id=tenant_id,
            first_name="Lead",
            last_name=owner.username,
            email=f"lead-{owner.username}@example.com",
            status="new",
            assigned_to_id=owner.id,
            created_by_id=(created_by or owner).id,
            created_at=datetime.utcnow(),
        )
        db.add(lead)
        return lead

    return _make_lead


def auth_headers(user: User, tenant_id: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, tenant_id)}"}


def register_payload(username: str = "alice", **overrides) -> dict:
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
        "first_name": username.title(),
        "last_name": "Tester",
    }
    payload.update(overrides)
    return payload
