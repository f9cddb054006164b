from __future__ import annotations

from reviewhub.storage.models import Notification


USER = "user@example.com"


def _create(client, title: str = "Heads up"):
    return client.post(
        "/api/notifications",
        json={"userEmail": USER, "type": "info", "title": title, "message": "Something happened"},
    )


def test_notifications_round_trip(client) -> None:
    created = _create(client)
    assert created.status_code == 201
    notification_id = created.json()["id"]
    _create(client, "Second")

    assert client.get("/api/notifications", params={"userEmail": USER, "countOnly": "true"}).json() == {"count": 2}

    marked = client.patch("/api/notifications", json={"userEmail": USER, "notificationId": notification_id})
    assert marked.status_code == 200
    assert marked.json()["notification"]["read"] is True

    all_marked = client.patch("/api/notifications", json={"userEmail": USER, "markAll": True})
    assert all_marked.json() == {"success": True, "message": "Marked 1 notifications as read"}
    assert client.get("/api/notifications", params={"userEmail": USER, "countOnly": "true"}).json() == {"count": 0}

    deleted = client.delete("/api/notifications", params={"userEmail": USER, "notificationId": notification_id})
    assert deleted.json() == {"success": True}

    cleared = client.delete("/api/notifications", params={"userEmail": USER, "deleteAll": "true"})
    assert cleared.json()["message"] == "Deleted 1 notifications"
    assert client.get("/api/notifications", params={"userEmail": USER}).json() == []


def test_notification_validation_and_ownership(client) -> None:
    assert client.get("/api/notifications").status_code == 400

    created = _create(client).json()
    other = "other@example.com"

    missing_id = client.patch("/api/notifications", json={"userEmail": USER})
    assert missing_id.status_code == 400

    foreign = client.patch("/api/notifications", json={"userEmail": other, "notificationId": created["id"]})
    assert foreign.status_code == 404
    assert foreign.json() == {"error": "Notification not found or access denied"}

    foreign_delete = client.delete("/api/notifications", params={"userEmail": other, "notificationId": created["id"]})
    assert foreign_delete.status_code == 404


def test_missing_table_returns_503(client, engine) -> None:
    Notification.__table__.drop(engine)

    response = client.get("/api/notifications", params={"userEmail": USER})
    assert response.status_code == 503
    assert "Notifications feature not available" in response.json()["details"]
