"""Caller context attached to every client API request."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Network facts about the caller, captured at the HTTP edge."""

    ip_address: str | None = None
    user_agent: str | None = None
