import pytest

from conftest import auth_headers
from tenantcrm.db.base import new_id
from tenantcrm.tenants.models import Tenant

API = "/api/v1/leads"


@pytest.fixture
def office(db, make_user, add_member, global_role, make_lead):
    """Tenant with an admin, a manager over one agent, and an unrelated agent; each owns one lead."""
    tenant = Tenant(id=new_id("t"), name="Office", subdomain="office-a1b2c3")
    other = Tenant(id=new_id("t"), name="Elsewhere", subdomain="elsewhere-d4e5f6")
    db.add_all([tenant, other])
    db.flush()

    people = {
        "admin": make_user("adam"),
        "manager": make_user("mona"),
        "agent": make_user("xavi"),
        "outsider": make_user("zara"),
    }
    add_member(people["admin"], tenant.id, global_role("Admin"))
    add_member(people["manager"], tenant.id, global_role("Manager"))
    add_member(people["agent"], tenant.id, global_role("Member"), manager=people["manager"])
    add_member(people["outsider"], tenant.id, global_role("Member"))
    add_member(people["manager"], other.id, global_role("Admin"))
    for user in people.values():
        make_lead(tenant.id, user)
    make_lead(other.id, people["manager"])
    db.commit()
    return tenant, other, people


def _owners(resp):
    assert resp.status_code == 200, resp.text
    return {item["assigned_to_id"] for item in resp.json()["items"]}


def test_admin_sees_every_lead_in_tenant(client, office):
    tenant, _, people = office

    resp = client.get(API, headers=auth_headers(people["admin"], tenant.id))

    assert resp.json()["scope"] == "all"
    assert _owners(resp) == {u.id for u in people.values()}


def test_manager_sees_own_and_reports(client, office):
    tenant, _, people = office

    resp = client.get(API, headers=auth_headers(people["manager"], tenant.id))

    assert resp.json()["scope"] == "team"
    assert _owners(resp) == {people["manager"].id, people["agent"].id}


def test_agent_sees_only_own(client, office):
    tenant, _, people = office

    resp = client.get(API, headers=auth_headers(people["outsider"], tenant.id))

    assert resp.json()["scope"] == "own"
    assert _owners(resp) == {people["outsider"].id}


def test_requested_scope_may_narrow_but_not_widen(client, office):
    tenant, _, people = office

    narrowed = client.get(API, params={"scope": "own"}, headers=auth_headers(people["manager"], tenant.id))
    widened = client.get(API, params={"scope": "all"}, headers=auth_headers(people["agent"], tenant.id))

    assert _owners(narrowed) == {people["manager"].id}
    assert widened.status_code == 403
    assert widened.json()["code"] == "forbidden"


def test_leads_never_cross_tenants(client, office):
    tenant, other, people = office

    resp = client.get(API, headers=auth_headers(people["manager"], other.id))

    items = resp.json()["items"]
    assert resp.json()["scope"] == "all"
    assert len(items) == 1
    assert _owners(resp) == {people["manager"].id}


def test_leads_require_tenant_context(client, office):
    _, _, people = office

    resp = client.get(API, headers=auth_headers(people["admin"], None))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Tenant context required"


def test_leads_reject_token_for_tenant_without_membership(client, office):
    _, other, people = office

    resp = client.get(API, headers=auth_headers(people["agent"], other.id))

    assert resp.status_code == 403


def test_manager_does_not_see_outsider_lead_created_by_a_report(client, db, office, make_lead):
    tenant, _, people = office
    make_lead(tenant.id, people["outsider"], created_by=people["agent"])
    db.commit()

    resp = client.get(API, headers=auth_headers(people["manager"], tenant.id))

    assert _owners(resp) == {people["manager"].id, people["agent"].id}
    assert len(resp.json()["items"]) == 2
