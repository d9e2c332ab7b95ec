import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def test_admin_user_management_flow(client, create_user, auth_headers, mailer):
    admin = await create_user("boss@x.com", first_name="Big", last_name="Boss")
    admin_headers = auth_headers(admin)

    create_resp = await client.post(
        "/api/v1/admin/users",
        headers=admin_headers,
        json={"email": "Member1@Example.com", "firstName": "Mia"},
    )
    assert create_resp.status_code == 201, create_resp.text
    member = create_resp.json()["data"]
    assert member["email"] == "member1@example.com"
    assert member["fullName"] == "Mia"
    user_id = member["id"]

    # Welcome mail went out
    assert mailer.sent[-1]["to"] == "member1@example.com"
    assert "Hello, Mia!" in mailer.sent[-1]["html"]

    dup = await client.post("/api/v1/admin/users", headers=admin_headers, json={"email": "member1@example.com"})
    assert dup.status_code == 409
    assert dup.json()["detail"]["code"] == "EMAIL_EXISTS"

    list_resp = await client.get("/api/v1/admin/users", headers=admin_headers, params={"q": "mia"})
    assert list_resp.status_code == 200
    assert [u["id"] for u in list_resp.json()["data"]["items"]] == [user_id]

    detail_resp = await client.get(f"/api/v1/admin/users/{user_id}", headers=admin_headers)
    assert detail_resp.status_code == 200
    assert detail_resp.json()["data"]["email"] == "member1@example.com"

    update_resp = await client.patch(
        f"/api/v1/admin/users/{user_id}",
        headers=admin_headers,
        json={"lastName": "Stone"},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["fullName"] == "Mia Stone"

    deactivate_resp = await client.delete(f"/api/v1/admin/users/{user_id}", headers=admin_headers)
    assert deactivate_resp.status_code == 200
    assert deactivate_resp.json()["data"]["isActive"] is False

    # Gone from the default listing, still reachable by id and with includeInactive
    listed = await client.get("/api/v1/admin/users", headers=admin_headers)
    assert user_id not in [u["id"] for u in listed.json()["data"]["items"]]
    listed = await client.get("/api/v1/admin/users", headers=admin_headers, params={"includeInactive": True})
    assert user_id in [u["id"] for u in listed.json()["data"]["items"]]
    assert (await client.get(f"/api/v1/admin/users/{user_id}", headers=admin_headers)).status_code == 200

    reactivate = await client.patch(
        f"/api/v1/admin/users/{user_id}", headers=admin_headers, json={"isActive": True}
    )
    assert reactivate.json()["data"]["isActive"] is True


async def test_deactivated_user_cannot_log_in(client, create_user, auth_headers, mailer):
    admin = await create_user("boss@x.com")
    member = await create_user("member@x.com")
    await client.delete(f"/api/v1/admin/users/{member.id}", headers=auth_headers(admin))

    resp = await client.post("/api/v1/auth/request-token", json={"email": "member@x.com"})
    assert resp.status_code == 200
    assert "member@x.com" not in mailer.codes


async def test_admin_cannot_deactivate_self(client, create_user, auth_headers):
    admin = await create_user("boss@x.com")
    resp = await client.delete(f"/api/v1/admin/users/{admin.id}", headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "CANNOT_DEACTIVATE_SELF"


async def test_unknown_user(client, create_user, auth_headers):
    admin = await create_user("boss@x.com")
    resp = await client.get(f"/api/v1/admin/users/{uuid.uuid4()}", headers=auth_headers(admin))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "USER_NOT_FOUND"

    assert (await client.get("/api/v1/admin/users/not-a-uuid", headers=auth_headers(admin))).status_code == 422


async def test_notification_mail(client, create_user, auth_headers, mailer):
    admin = await create_user("boss@x.com")
    member = await create_user("member@x.com")

    resp = await client.post(
        f"/api/v1/admin/users/{member.id}/notify",
        headers=auth_headers(admin),
        json={"subject": "New videos", "content": "<p>Two new videos were shared with you.</p>"},
    )
    assert resp.status_code == 200
    assert mailer.sent[-1]["to"] == "member@x.com"
    assert mailer.sent[-1]["subject"] == "VidVault - New videos"

    # Delivery problems are not reported to the caller
    mailer.fail = True
    resp = await client.post(
        f"/api/v1/admin/users/{member.id}/notify",
        headers=auth_headers(admin),
        json={"subject": "Again", "content": "Hello"},
    )
    assert resp.status_code == 200


async def test_activity_summary(client, create_user, auth_headers, login):
    admin = await create_user("boss@x.com")
    await create_user("idle@x.com")
    await login("active@x.com")

    resp = await client.get("/api/v1/admin/users/activity", headers=auth_headers(admin), params={"days": 7})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["activeUsers"] == 3
    assert [u["email"] for u in data["recentlyActive"]] == ["active@x.com"]


async def test_admin_list_enforced_when_configured(client, create_user, auth_headers, monkeypatch):
    from vidvault.config import settings

    monkeypatch.setattr(settings, "admin_emails", ["boss@x.com"])
    member = await create_user("member@x.com")

    resp = await client.get("/api/v1/admin/users", headers=auth_headers(member))
    assert resp.status_code == 403
    stats = await client.get("/api/v1/auth/stats", headers=auth_headers(member))
    assert stats.status_code == 403
