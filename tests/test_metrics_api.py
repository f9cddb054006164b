from fastapi.testclient import TestClient

import reviewhub.api.main as api_main
from reviewhub.core.metrics import (
    record_queue_operation,
    record_status_conflict,
    record_status_transition,
    render_prometheus_metrics,
    reset_metrics_for_tests,
)


def test_metrics_endpoint_returns_prometheus_payload(monkeypatch) -> None:
    reset_metrics_for_tests()
    monkeypatch.setattr(api_main.settings, "metrics_enabled", True)

    client = TestClient(api_main.app)
    version_response = client.get("/version")
    assert version_response.status_code == 200

    metrics_response = client.get("/metrics")
    assert metrics_response.status_code == 200
    assert metrics_response.headers["content-type"].startswith("text/plain")
    body = metrics_response.text
    assert "reviewhub_build_info" in body
    assert 'reviewhub_http_requests_total{method="GET",path="/version",status="200"}' in body
    assert "reviewhub_http_request_duration_seconds_sum" in body


def test_metrics_endpoint_disabled_returns_404(monkeypatch) -> None:
    monkeypatch.setattr(api_main.settings, "metrics_enabled", False)
    client = TestClient(api_main.app)
    response = client.get("/metrics")
    assert response.status_code == 404


def test_workflow_counters_are_rendered() -> None:
    reset_metrics_for_tests()
    record_status_transition(from_status="pending", to_status="validated")
    record_status_conflict(to_status="rejected")
    record_queue_operation(operation="enqueue", count=3)
    record_queue_operation(operation="dequeue", count=0)

    body = render_prometheus_metrics(app_name="reviewhub", app_version="0.1.0", env="test")

    assert 'reviewhub_submission_status_transitions_total{from_status="pending",to_status="validated"} 1' in body
    assert 'reviewhub_submission_status_conflicts_total{to_status="rejected"} 1' in body
    assert 'reviewhub_validation_queue_operations_total{operation="enqueue"} 3' in body
    assert 'operation="dequeue"' not in body
    reset_metrics_for_tests()


def test_http_metrics_are_labelled_by_route_template(client, monkeypatch) -> None:
    monkeypatch.setattr(api_main.settings, "metrics_enabled", True)

    client.get("/api/submissions/first-id")
    client.get("/api/submissions/second-id")
    client.get("/no/such/route")

    body = client.get("/metrics").text
    assert 'path="/api/submissions/{submission_id}",status="404"} 2' in body
    assert 'path="unmatched",status="404"} 1' in body
    assert "first-id" not in body
    assert "second-id" not in body
