"""In-process metrics collector with Prometheus text exposition."""

from __future__ import annotations

from collections import defaultdict
from threading import Lock
import time
from typing import Dict, Tuple


_lock = Lock()
_started_at = time.time()

_http_requests_total: Dict[Tuple[str, str, str], int] = defaultdict(int)
_http_request_duration_sum: Dict[Tuple[str, str], float] = defaultdict(float)
_http_request_duration_count: Dict[Tuple[str, str], int] = defaultdict(int)
_submissions_created_total: Dict[str, int] = defaultdict(int)
_submission_status_transitions_total: Dict[Tuple[str, str], int] = defaultdict(int)
_submission_status_conflicts_total: Dict[str, int] = defaultdict(int)
_validation_queue_ops_total: Dict[str, int] = defaultdict(int)
_db_connect_retries_total: Dict[str, int] = defaultdict(int)


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _normalize_label(value: str, *, fallback: str = "unknown") -> str:
    normalized = (value or "").strip()
    return normalized or fallback


def record_http_request(*, method: str, path: str, status_code: int, duration_seconds: float) -> None:
    status = str(status_code)
    method_label = method.upper()
    path_label = path or "unknown"
    duration = max(duration_seconds, 0.0)

    with _lock:
        _http_requests_total[(method_label, path_label, status)] += 1
        _http_request_duration_sum[(method_label, path_label)] += duration
        _http_request_duration_count[(method_label, path_label)] += 1


def record_submission_created(*, file_type: str) -> None:
    with _lock:
        _submissions_created_total[_normalize_label(file_type)] += 1


def record_status_transition(*, from_status: str, to_status: str) -> None:
    with _lock:
        key = (_normalize_label(from_status), _normalize_label(to_status))
        _submission_status_transitions_total[key] += 1


def record_status_conflict(*, to_status: str) -> None:
    with _lock:
        _submission_status_conflicts_total[_normalize_label(to_status)] += 1


def record_queue_operation(*, operation: str, count: int = 1) -> None:
    if count <= 0:
        return
    with _lock:
        _validation_queue_ops_total[_normalize_label(operation)] += int(count)


def record_db_connect_retry(*, outcome: str) -> None:
    with _lock:
        _db_connect_retries_total[_normalize_label(outcome)] += 1


def _render_counter(
    lines: list[str],
    *,
    name: str,
    help_text: str,
    label_names: Tuple[str, ...],
    values: dict,
) -> None:
    lines.extend([f"# HELP {name} {help_text}", f"# TYPE {name} counter"])
    for key, value in sorted(values.items()):
        label_values = key if isinstance(key, tuple) else (key,)
        labels = ",".join(
            f'{label}="{_escape_label(label_value)}"' for label, label_value in zip(label_names, label_values)
        )
        lines.append(f"{name}{{{labels}}} {value}")


def render_prometheus_metrics(*, app_name: str, app_version: str, env: str) -> str:
    uptime = max(time.time() - _started_at, 0.0)

    with _lock:
        http_total = dict(_http_requests_total)
        duration_sum = dict(_http_request_duration_sum)
        duration_count = dict(_http_request_duration_count)
        created_total = dict(_submissions_created_total)
        transitions_total = dict(_submission_status_transitions_total)
        conflicts_total = dict(_submission_status_conflicts_total)
        queue_ops_total = dict(_validation_queue_ops_total)
        connect_retries_total = dict(_db_connect_retries_total)

    lines = [
        "# HELP reviewhub_build_info Build metadata.",
        "# TYPE reviewhub_build_info gauge",
        (
            f'reviewhub_build_info{{app_name="{_escape_label(app_name)}",'
            f'version="{_escape_label(app_version)}",env="{_escape_label(env)}"}} 1'
        ),
        "# HELP reviewhub_process_uptime_seconds Process uptime in seconds.",
        "# TYPE reviewhub_process_uptime_seconds gauge",
        f"reviewhub_process_uptime_seconds {uptime:.6f}",
    ]

    _render_counter(
        lines,
        name="reviewhub_http_requests_total",
        help_text="Total HTTP requests.",
        label_names=("method", "path", "status"),
        values=http_total,
    )

    lines.extend(
        [
            "# HELP reviewhub_http_request_duration_seconds Request duration summary.",
            "# TYPE reviewhub_http_request_duration_seconds summary",
        ]
    )
    for (method, path), value in sorted(duration_sum.items()):
        lines.append(
            (
                f'reviewhub_http_request_duration_seconds_sum{{method="{_escape_label(method)}",'
                f'path="{_escape_label(path)}"}} {value:.6f}'
            )
        )
    for (method, path), value in sorted(duration_count.items()):
        lines.append(
            (
                f'reviewhub_http_request_duration_seconds_count{{method="{_escape_label(method)}",'
                f'path="{_escape_label(path)}"}} {value}'
            )
        )

    _render_counter(
        lines,
        name="reviewhub_submissions_created_total",
        help_text="Submissions created by file type.",
        label_names=("file_type",),
        values=created_total,
    )
    _render_counter(
        lines,
        name="reviewhub_submission_status_transitions_total",
        help_text="Applied submission status transitions.",
        label_names=("from_status", "to_status"),
        values=transitions_total,
    )
    _render_counter(
        lines,
        name="reviewhub_submission_status_conflicts_total",
        help_text="Status updates refused by the transition table.",
        label_names=("to_status",),
        values=conflicts_total,
    )
    _render_counter(
        lines,
        name="reviewhub_validation_queue_operations_total",
        help_text="Validation queue operations.",
        label_names=("operation",),
        values=queue_ops_total,
    )
    _render_counter(
        lines,
        name="reviewhub_db_connect_retries_total",
        help_text="Database connection acquisition retries by outcome.",
        label_names=("outcome",),
        values=connect_retries_total,
    )

    lines.append("")
    return "\n".join(lines)


def reset_metrics_for_tests() -> None:
    global _started_at
    with _lock:
        _http_requests_total.clear()
        _http_request_duration_sum.clear()
        _http_request_duration_count.clear()
        _submissions_created_total.clear()
        _submission_status_transitions_total.clear()
        _submission_status_conflicts_total.clear()
        _validation_queue_ops_total.clear()
        _db_connect_retries_total.clear()
    _started_at = time.time()
