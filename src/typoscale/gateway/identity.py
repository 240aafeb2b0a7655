"""Caller identity for admission control."""

from starlette.requests import Request

UNKNOWN_IDENTITY = "unknown"


def get_client_ip(request: Request) -> str | None:
    """Best-effort public address of the caller, considering proxies."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return None


def client_identity(request: Request) -> str:
    """Rate limit bucket for the caller.

    Callers without any resolvable address share the ``ip:unknown`` bucket.
    """
    return f"ip:{get_client_ip(request) or UNKNOWN_IDENTITY}"
