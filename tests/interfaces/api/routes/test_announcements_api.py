"""End-to-end tests for the announcement, notice and batch endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app

PASSWORD = "StrongPass123"


@pytest.fixture()
def client():
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


def _auth_headers(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(
        "/auth/token",
        data={"username": email, "password": PASSWORD},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client, admin_id):
    return _auth_headers(client, "admin@example.com")


@pytest.fixture()
def member_headers(client, members):
    return _auth_headers(client, "member0@example.com")


def _create(client, headers, **overrides):
    payload = {
        "title": "Maintenance 1/15",
        "content": "The service will be down from 2am.",
        "priority": "HIGH",
        "targetUserTypes": ["HOSPITAL"],
        "images": [],
    }
    payload.update(overrides)
    response = client.post("/announcements", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_admin_endpoints_require_admin(client, member_headers):
    assert client.get("/announcements").status_code == 401
    response = client.get("/announcements", headers=member_headers)
    assert response.status_code == 403
    assert response.json()["success"] is False


def test_create_list_and_edit_announcement(client, admin_headers):
    created = _create(client, admin_headers)

    assert created["status"] == "DRAFT"
    assert created["sentCount"] == 0
    assert created["totalRecipients"] == 0
    assert created["readCount"] == 0
    assert created["authorName"] == "Kim Admin"
    assert created["targetUserTypes"] == ["HOSPITAL"]

    listing = client.get("/announcements", headers=admin_headers).json()
    assert listing["success"] is True
    assert [item["id"] for item in listing["data"]] == [created["id"]]

    response = client.put(
        f"/announcements/{created['id']}",
        json={"title": "Maintenance moved", "priority": "LOW"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Maintenance moved"
    assert response.json()["data"]["priority"] == "LOW"


def test_create_rejects_invalid_payload(client, admin_headers):
    response = client.post(
        "/announcements",
        json={"title": "", "content": "body"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["success"] is False

    response = client.post("/announcements", json={"content": "no title"}, headers=admin_headers)
    assert response.status_code == 400


def test_unknown_announcement_is_404(client, admin_headers):
    response = client.get("/announcements/999", headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Announcement not found"}

    response = client.post(
        "/announcements/999", json={"action": "send"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_send_and_wait_returns_counts(client, admin_headers, members):
    created = _create(client, admin_headers)

    response = client.post(
        f"/announcements/{created['id']}?wait=true",
        json={"action": "send"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "COMPLETED"
    assert (data["sentCount"], data["totalRecipients"]) == (9, 9)

    detail = client.get(f"/announcements/{created['id']}", headers=admin_headers).json()["data"]
    assert detail["status"] == "SENT"
    assert detail["sentAt"] is not None


def test_send_in_background_then_poll_batch(client, admin_headers, members):
    created = _create(client, admin_headers)

    response = client.post(
        f"/announcements/{created['id']}",
        json={"action": "send"},
        headers=admin_headers,
    )

    assert response.status_code == 202
    accepted = response.json()["data"]
    assert accepted["status"] == "PENDING"
    assert accepted["totalRecipients"] == 9

    batch = client.get(f"/batches/{accepted['batchId']}", headers=admin_headers).json()["data"]
    assert batch["status"] == "COMPLETED"
    assert batch["sentCount"] == 9

    batches = client.get(
        f"/announcements/{created['id']}/batches", headers=admin_headers
    ).json()["data"]
    assert [item["id"] for item in batches] == [accepted["batchId"]]


def test_publish_is_acknowledged_without_sending(client, admin_headers, members):
    created = _create(client, admin_headers)

    response = client.post(
        f"/announcements/{created['id']}",
        json={"action": "publish"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    detail = client.get(f"/announcements/{created['id']}", headers=admin_headers).json()["data"]
    assert detail["status"] == "DRAFT"


def test_unknown_action_and_idle_cancel(client, admin_headers):
    created = _create(client, admin_headers)

    response = client.post(
        f"/announcements/{created['id']}",
        json={"action": "archive"},
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = client.post(
        f"/announcements/{created['id']}",
        json={"action": "cancel"},
        headers=admin_headers,
    )
    assert response.status_code == 404

    response = client.post(
        f"/announcements/{created['id']}?wait=true",
        json={"action": "retry"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_notice_board_and_read_flow(client, admin_headers, member_headers, members):
    draft = _create(client, admin_headers, title="Draft only")
    sent = _create(client, admin_headers, images=["https://cdn.example.com/a.png"])
    client.post(
        f"/announcements/{sent['id']}?wait=true",
        json={"action": "send"},
        headers=admin_headers,
    )

    notices = client.get("/notices").json()["data"]
    assert [notice["id"] for notice in notices] == [sent["notificationId"]]
    assert notices[0]["isRead"] is False
    assert notices[0]["images"] == ["https://cdn.example.com/a.png"]
    assert notices[0]["authorName"] == "Kim Admin"
    assert notices[0]["authorNickname"] is None

    assert client.get(f"/notices/{draft['notificationId']}").status_code == 404
    assert client.patch(f"/notices/{sent['notificationId']}/read").status_code == 401

    response = client.patch(f"/notices/{sent['notificationId']}/read", headers=member_headers)
    assert response.status_code == 200
    response = client.patch(f"/notices/{sent['notificationId']}/read", headers=member_headers)
    assert response.status_code == 200

    detail = client.get(f"/notices/{sent['notificationId']}", headers=member_headers).json()["data"]
    assert detail["isRead"] is True

    feed = client.get("/notifications", headers=member_headers).json()["data"]
    assert len(feed) == 1
    assert feed[0]["isRead"] is True
    assert feed[0]["announcementId"] == sent["id"]

    listing = client.get(f"/announcements/{sent['id']}", headers=admin_headers).json()["data"]
    assert listing["readCount"] == 1


def test_mark_notification_read_endpoint(client, admin_headers, member_headers, members):
    sent = _create(client, admin_headers)
    client.post(
        f"/announcements/{sent['id']}?wait=true",
        json={"action": "send"},
        headers=admin_headers,
    )
    notification_id = client.get("/notifications", headers=member_headers).json()["data"][0]["id"]

    response = client.patch(f"/notifications/{notification_id}/read", headers=member_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Notification marked as read"}

    response = client.patch(f"/notifications/{notification_id}/read", headers=admin_headers)
    assert response.status_code == 404


def test_delete_announcement(client, admin_headers, members):
    created = _create(client, admin_headers)
    client.post(
        f"/announcements/{created['id']}?wait=true",
        json={"action": "send"},
        headers=admin_headers,
    )

    response = client.delete(f"/announcements/{created['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get(f"/announcements/{created['id']}", headers=admin_headers).status_code == 404
    assert client.get("/notices").json()["data"] == []
    assert client.delete(f"/announcements/{created['id']}", headers=admin_headers).status_code == 404
