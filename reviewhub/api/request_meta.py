"""Client metadata extracted from incoming requests."""

from __future__ import annotations

from fastapi import Request


def resolve_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def resolve_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"
