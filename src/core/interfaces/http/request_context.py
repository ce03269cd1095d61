"""Request context extraction."""

from fastapi import Request

from src.core.config import settings
from src.core.domain.request_context import RequestContext


def get_request_ip(request: Request) -> str | None:
    if settings.TRUST_PROXY_HEADERS:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip
    if not request.client:
        return None
    return request.client.host


def get_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")


def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency building the caller context."""
    return RequestContext(
        ip_address=get_request_ip(request),
        user_agent=get_user_agent(request),
    )
