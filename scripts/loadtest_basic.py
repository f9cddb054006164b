"""Async read-path load test for the reviewhub listing endpoints."""

from __future__ import annotations

import argparse
import asyncio
import time
from collections import defaultdict
from itertools import cycle
from typing import Iterable

import httpx


def _targets(base_url: str, user_email: str) -> list[str]:
    base = base_url.rstrip("/")
    return [
        f"{base}/health",
        f"{base}/api/submissions/pending",
        f"{base}/api/submissions?userEmail={user_email}",
        f"{base}/api/submissions/stats?userEmail={user_email}",
    ]


def _percentile(values: list[float], percentile: float) -> float:
    if not values:
        return 0.0
    sorted_values = sorted(values)
    index = int((len(sorted_values) - 1) * percentile)
    return sorted_values[index]


async def run_load_test(
    *,
    base_url: str,
    user_email: str,
    total_requests: int,
    concurrency: int,
    timeout_seconds: float,
) -> dict[str, dict[str, float]]:
    semaphore = asyncio.Semaphore(concurrency)
    urls = cycle(_targets(base_url, user_email))
    durations: dict[str, list[float]] = defaultdict(list)
    failures: dict[str, int] = defaultdict(int)

    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        async def worker(url: str) -> None:
            path = httpx.URL(url).path
            async with semaphore:
                started_at = time.perf_counter()
                try:
                    response = await client.get(url)
                    failed = response.status_code >= 500
                except httpx.HTTPError:
                    failed = True
                durations[path].append(time.perf_counter() - started_at)
                if failed:
                    failures[path] += 1

        await asyncio.gather(*(worker(next(urls)) for _ in range(total_requests)))

    report: dict[str, dict[str, float]] = {}
    for path, samples in sorted(durations.items()):
        report[path] = {
            "requests": float(len(samples)),
            "errors": float(failures[path]),
            "latency_avg_ms": (sum(samples) / len(samples)) * 1000,
            "latency_p95_ms": _percentile(samples, 0.95) * 1000,
            "latency_p99_ms": _percentile(samples, 0.99) * 1000,
        }
    return report


def _format_report(report: dict[str, dict[str, float]]) -> Iterable[str]:
    for path, row in report.items():
        yield (
            f"{path} requests={int(row['requests'])} errors={int(row['errors'])} "
            f"avg_ms={row['latency_avg_ms']:.2f} p95_ms={row['latency_p95_ms']:.2f} "
            f"p99_ms={row['latency_p99_ms']:.2f}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Load the reviewhub listing endpoints.")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--user-email", default="loadtest@example.com")
    parser.add_argument("--requests", type=int, default=200)
    parser.add_argument("--concurrency", type=int, default=20)
    parser.add_argument("--timeout", type=float, default=5.0)
    args = parser.parse_args()

    if args.requests <= 0:
        raise ValueError("--requests must be positive")
    if args.concurrency <= 0:
        raise ValueError("--concurrency must be positive")

    report = asyncio.run(
        run_load_test(
            base_url=args.base_url,
            user_email=args.user_email,
            total_requests=args.requests,
            concurrency=args.concurrency,
            timeout_seconds=args.timeout,
        )
    )
    for line in _format_report(report):
        print(line)


if __name__ == "__main__":
    main()
