from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from conftest import PASSWORD, register_payload
from tenantcrm.audit.models import EventLog
from tenantcrm.auth import service
from tenantcrm.auth.deps import AuthContext
from tenantcrm.auth.models import RefreshToken, User
from tenantcrm.auth.security import hash_token, verify_access_token
from tenantcrm.core.errors import ForbiddenError
from tenantcrm.tenants.models import Tenant, TenantMembership

API = "/api/v1/auth"


def _register(client, username="alice", **overrides):
    resp = client.post(f"{API}/register", json=register_payload(username, **overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


def _login(client, email="alice@example.com", password=PASSWORD):
    return client.post(f"{API}/login", json={"email": email, "password": password})


def test_register_provisions_workspace_and_returns_tokens(client, db):
    body = _register(client)

    assert body["user"]["username"] == "alice"
    assert body["tenant"]["name"] == "Alice Tester's Workspace"
    assert body["token_type"] == "bearer"

    payload = verify_access_token(body["access_token"])
    assert payload.user_id == body["user"]["id"]
    assert payload.tenant_id == body["tenant"]["id"]

    stored = db.execute(select(RefreshToken).where(RefreshToken.user_id == payload.user_id)).scalar_one()
    assert stored.token_hash == hash_token(body["refresh_token"])
    assert stored.token_hash != body["refresh_token"]
    assert db.get(User, payload.user_id).last_tenant_id == payload.tenant_id


def test_register_rejects_duplicate_email_without_side_effects(client, db):
    _register(client)
    tenants_before = db.scalar(select(func.count()).select_from(Tenant))

    resp = client.post(f"{API}/register", json=register_payload("alice2", email="ALICE@example.com"))

    assert resp.status_code == 409
    assert resp.json() == {"detail": "User already exists with this email", "code": "conflict"}
    assert db.scalar(select(func.count()).select_from(User)) == 1
    assert db.scalar(select(func.count()).select_from(Tenant)) == tenants_before


def test_register_rejects_duplicate_username(client):
    _register(client)

    resp = client.post(f"{API}/register", json=register_payload("alice", email="other@example.com"))

    assert resp.status_code == 409
    assert resp.json()["detail"] == "Username already taken"


def test_register_rejects_password_over_byte_limit(client):
    resp = client.post(f"{API}/register", json=register_payload(password="é" * 40))

    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


def test_login_uses_same_error_for_unknown_email_and_wrong_password(client):
    _register(client)

    wrong_password = _login(client, password="not-the-password")
    unknown_email = _login(client, email="nobody@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid credentials", "code": "unauthorized"}


def test_login_returns_last_used_tenant(client):
    registered = _register(client)

    resp = _login(client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["tenant_id"] == registered["tenant"]["id"]
    assert verify_access_token(body["access_token"]).tenant_id == registered["tenant"]["id"]


def test_login_bootstraps_tenant_for_user_without_memberships(client, db, make_user):
    user = make_user("bob")
    db.commit()

    resp = _login(client, email="bob@example.com")

    assert resp.status_code == 200
    tenant_id = resp.json()["tenant_id"]
    assert tenant_id
    assert db.get(Tenant, tenant_id).name == "Bob Tester's Workspace"
    membership = db.execute(select(TenantMembership).where(TenantMembership.user_id == user.id)).scalar_one()
    assert membership.tenant_id == tenant_id


def test_login_falls_back_when_last_tenant_membership_is_gone(client, db):
    _register(client)
    body = _login(client).json()
    second = client.post(
        "/api/v1/tenants",
        json={"name": "Second"},
        headers={"Authorization": f"Bearer {body['access_token']}"},
    ).json()["tenant"]

    db.expire_all()
    user = db.get(User, body["user"]["id"])
    db.query(TenantMembership).filter(
        TenantMembership.user_id == user.id, TenantMembership.tenant_id == second["id"]
    ).delete()
    db.commit()

    resp = _login(client)

    assert resp.json()["tenant_id"] == body["tenant_id"]
    db.expire_all()
    assert db.get(User, user.id).last_tenant_id == body["tenant_id"]


def test_login_rejects_inactive_account(client, db, make_user):
    make_user("carol", is_active=False)
    db.commit()

    resp = _login(client, email="carol@example.com")

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Account is inactive"


def test_refresh_rotates_and_old_token_cannot_be_reused(client, db):
    original = _register(client)["refresh_token"]

    first = client.post(f"{API}/refresh", json={"refresh_token": original})
    assert first.status_code == 200
    rotated = first.json()
    assert rotated["refresh_token"] != original
    assert rotated["tenant"]["id"] == verify_access_token(rotated["access_token"]).tenant_id

    replay = client.post(f"{API}/refresh", json={"refresh_token": original})
    assert replay.status_code == 401
    assert replay.json() == {"detail": "Invalid refresh token", "code": "unauthorized"}

    assert client.post(f"{API}/refresh", json={"refresh_token": rotated["refresh_token"]}).status_code == 200
    reuse_events = db.scalar(
        select(func.count()).select_from(EventLog).where(EventLog.event_type == "refresh_reuse_rejected")
    )
    assert reuse_events == 1


def test_unknown_and_expired_refresh_tokens_get_the_same_answer(client, db):
    body = _register(client)

    unknown = client.post(f"{API}/refresh", json={"refresh_token": "f" * 128})
    assert unknown.status_code == 401

    row = db.execute(select(RefreshToken).where(RefreshToken.token_hash == hash_token(body["refresh_token"]))).scalar_one()
    row.expires_at = datetime.utcnow() - timedelta(seconds=1)
    db.commit()

    expired = client.post(f"{API}/refresh", json={"refresh_token": body["refresh_token"]})
    assert expired.status_code == 401
    assert expired.json() == unknown.json() == {"detail": "Invalid refresh token", "code": "unauthorized"}


def test_refresh_rejects_inactive_user(client, db):
    body = _register(client)
    user = db.get(User, body["user"]["id"])
    user.is_active = False
    db.commit()

    resp = client.post(f"{API}/refresh", json={"refresh_token": body["refresh_token"]})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid refresh token"


def test_logout_revokes_and_is_idempotent(client):
    refresh_token = _register(client)["refresh_token"]

    for _ in range(2):
        resp = client.post(f"{API}/logout", json={"refresh_token": refresh_token})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

    assert client.post(f"{API}/refresh", json={"refresh_token": refresh_token}).status_code == 401
    assert client.post(f"{API}/logout", json={"refresh_token": "0" * 128}).json() == {"ok": True}


def test_me_lists_memberships_and_current_tenant(client):
    body = _register(client)

    resp = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"})

    assert resp.status_code == 200
    me = resp.json()
    assert me["user"]["email"] == "alice@example.com"
    assert me["current_tenant"]["id"] == body["tenant"]["id"]
    assert [(t["id"], t["role"]) for t in me["tenants"]] == [(body["tenant"]["id"], "Owner")]


def test_protected_routes_require_a_valid_token(client):
    missing = client.get(f"{API}/me")
    assert missing.status_code == 401
    assert missing.json()["detail"] == "Access token required"
    assert missing.headers["www-authenticate"] == "Bearer"

    invalid = client.get(f"{API}/me", headers={"Authorization": "Bearer not.a.token"})
    assert invalid.status_code == 401
    assert invalid.json()["detail"] == "Invalid or expired token"


def test_active_refresh_tokens_are_capped_per_user(client, db):
    body = _register(client)
    for _ in range(6):
        assert _login(client).status_code == 200

    live = db.scalar(
        select(func.count())
        .select_from(RefreshToken)
        .where(RefreshToken.user_id == body["user"]["id"], RefreshToken.revoked.is_(False))
    )
    assert live == 5
    assert client.post(f"{API}/refresh", json={"refresh_token": body["refresh_token"]}).status_code == 401


def test_deactivate_user_revokes_every_refresh_token(db, client):
    body = _register(client)
    _login(client)
    user = db.get(User, body["user"]["id"])

    revoked = service.deactivate_user(db, user)

    assert revoked == 2
    assert client.post(f"{API}/refresh", json={"refresh_token": body["refresh_token"]}).status_code == 401
    assert _login(client).status_code == 403


def test_deactivated_user_cannot_trade_access_token_for_a_new_one(db, client):
    body = _register(client)
    headers = {"Authorization": f"Bearer {body['access_token']}"}
    second = client.post("/api/v1/tenants", json={"name": "Second"}, headers=headers).json()["tenant"]
    service.deactivate_user(db, db.get(User, body["user"]["id"]))

    switched = client.post("/api/v1/tenants/switch", json={"tenant_id": second["id"]}, headers=headers)

    assert switched.status_code == 403
    assert switched.json()["detail"] == "Account is inactive"
    assert "access_token" not in switched.json()
    assert client.get("/api/v1/tenants", headers=headers).status_code == 403
    assert client.get(f"/api/v1/tenants/{body['tenant']['id']}", headers=headers).status_code == 403
    assert client.get(f"{API}/me", headers=headers).status_code == 403
    assert client.get("/api/v1/leads", headers=headers).status_code == 403
    invite = client.post(
        f"/api/v1/tenants/{body['tenant']['id']}/invite",
        json={"email": "someone@example.com", "role_id": "r_whatever"},
        headers=headers,
    )
    assert invite.status_code == 403


def test_switch_service_refuses_inactive_account(db, client):
    body = _register(client)
    user = db.get(User, body["user"]["id"])
    service.deactivate_user(db, user)
    ctx = AuthContext(user_id=user.id, email=user.email, tenant_id=body["tenant"]["id"])

    with pytest.raises(ForbiddenError):
        service.switch_tenant(db, ctx, body["tenant"]["id"])


def test_purge_deletes_only_expired_tokens(db, client):
    body = _register(client)
    _login(client)
    row = db.execute(select(RefreshToken).where(RefreshToken.token_hash == hash_token(body["refresh_token"]))).scalar_one()
    row.expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    assert service.purge_expired_refresh_tokens(db) == 1
    assert db.scalar(select(func.count()).select_from(RefreshToken)) == 1


def test_session_events_are_audited(client, db):
    body = _register(client)
    _login(client)
    client.post(f"{API}/logout", json={"refresh_token": body["refresh_token"]})

    events = db.execute(
        select(EventLog.event_type).where(EventLog.user_id == body["user"]["id"]).order_by(EventLog.created_at)
    ).scalars().all()
    assert events == ["user_registered", "login", "logout"]


def test_register_reports_retriable_failure_when_bootstrap_breaks(client, db, monkeypatch):
    from sqlalchemy.exc import SQLAlchemyError

    from tenantcrm.tenants import bootstrap

    def _boom(*args, **kwargs):
        raise SQLAlchemyError("pipeline insert failed")

    monkeypatch.setattr(bootstrap, "_create_pipeline", _boom)

    resp = client.post(f"{API}/register", json=register_payload())

    assert resp.status_code == 503
    assert resp.json()["code"] == "bootstrap_failed"
    assert db.scalar(select(func.count()).select_from(User)) == 0
    assert db.scalar(select(func.count()).select_from(Tenant)) == 0
