from __future__ import annotations


REVIEWER = "reviewer@example.com"


def _submission(client, submission_id: str) -> None:
    response = client.post(
        "/api/submissions",
        json={
            "id": submission_id,
            "userEmail": "owner@example.com",
            "fileName": f"{submission_id}.mp3",
            "fileType": "audio",
            "fileSize": 10,
        },
    )
    assert response.status_code == 201


def test_queue_add_list_and_remove(client) -> None:
    _submission(client, "s1")
    _submission(client, "s2")
    _submission(client, "s3")

    single = client.post("/api/validation-queue", json={"adminEmail": REVIEWER, "submissionId": "s1"})
    assert single.status_code == 200
    assert single.json()["item"]["status"] == "pending"

    bulk = client.post("/api/validation-queue", json={"adminEmail": REVIEWER, "submissionIds": ["s2", "s3"]})
    assert bulk.json()["count"] == 2

    queue = client.get("/api/validation-queue", params={"adminEmail": REVIEWER}).json()
    assert [item["submission_id"] for item in queue] == ["s1", "s2", "s3"]

    removed = client.delete("/api/validation-queue", params={"adminEmail": REVIEWER, "submissionId": "s1"})
    assert removed.json() == {"success": True}

    bulk_removed = client.request(
        "DELETE",
        "/api/validation-queue",
        params={"adminEmail": REVIEWER},
        json={"submissionIds": ["s2", "s3"]},
    )
    assert bulk_removed.json() == {"success": True, "count": 2}
    assert client.get("/api/validation-queue", params={"adminEmail": REVIEWER}).json() == []


def test_queue_rejects_unknown_submission(client) -> None:
    _submission(client, "s1")

    response = client.post(
        "/api/validation-queue",
        json={"adminEmail": REVIEWER, "submissionIds": ["s1", "ghost"]},
    )
    assert response.status_code == 404
    assert "ghost" in response.json()["error"]
    assert client.get("/api/validation-queue", params={"adminEmail": REVIEWER}).json() == []


def test_queue_requires_admin_email_and_target(client) -> None:
    assert client.get("/api/validation-queue").status_code == 400
    assert client.delete("/api/validation-queue", params={"adminEmail": REVIEWER}).status_code == 400
    response = client.post("/api/validation-queue", json={"adminEmail": REVIEWER})
    assert response.status_code == 400
    assert response.json() == {"error": "submissionId or submissionIds is required"}
