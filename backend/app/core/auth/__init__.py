"""
Magic-link authentication: signed, time-bounded results access tokens.

Note: the FastAPI dependency (get_magic_link_service) lives in
app.core.auth.dependencies so that app.core.config can import parse_ttl
from this package without a circular import.
"""
from .magic_link import (
    MagicLinkPayload,
    MagicLinkTokenService,
    looks_like_token,
    parse_ttl,
)

__all__ = [
    "MagicLinkPayload",
    "MagicLinkTokenService",
    "looks_like_token",
    "parse_ttl",
]
