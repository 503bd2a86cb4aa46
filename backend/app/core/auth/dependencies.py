"""
FastAPI dependencies for magic-link authentication.
"""
from functools import lru_cache

from app.core.config import settings
from .magic_link import MagicLinkTokenService


@lru_cache(maxsize=1)
def get_magic_link_service() -> MagicLinkTokenService:
    """
    Build the process-wide token service from settings.

    The secret is read once at first use and never changes afterwards.
    Tests override this dependency with a service using their own secret.
    """
    return MagicLinkTokenService(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        default_ttl=settings.MAGIC_LINK_EXPIRES_IN,
    )
