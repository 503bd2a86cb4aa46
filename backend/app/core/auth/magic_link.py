"""
Magic-link tokens for passwordless access to stored survey results.

A magic-link token is a signed JWT binding a respondent's email to an opaque
results handle for a limited time. Validity is determined purely by the
signature and the ``exp`` claim: there is no server-side registry, so a token
cannot be revoked before it expires.

The signing secret is injected into MagicLinkTokenService rather than read
from the environment, so the service can be exercised with any secret.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from jose import JOSEError, jwt

from app.core.datetime_utils import utc_now
from app.core.exceptions import TokenSigningError

# Value of the "purpose" claim; keeps magic-link tokens from being accepted
# where another kind of token signed with the same secret is expected.
MAGIC_LINK_PURPOSE = "magic_link"

DEFAULT_TTL = "7d"

# Three non-empty base64url segments separated by dots
_TOKEN_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([a-z]*)\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}

TTLValue = Union[str, int, timedelta]


@dataclass(frozen=True)
class MagicLinkPayload:
    """Verified contents of a magic-link token."""

    email: str
    results_token: str
    issued_at: datetime
    expires_at: datetime


def parse_ttl(ttl: TTLValue) -> timedelta:
    """
    Convert a token lifetime into a timedelta.

    Args:
        ttl: A duration string such as "7d", "12h", "30m", "45s" or "2 weeks",
            a number of seconds, or a timedelta

    Returns:
        The lifetime as a timedelta

    Raises:
        ValueError: If the value cannot be parsed or is not positive
    """
    if isinstance(ttl, timedelta):
        delta = ttl
    elif isinstance(ttl, bool):
        raise ValueError(f"Invalid token lifetime: {ttl!r}")
    elif isinstance(ttl, int):
        delta = timedelta(seconds=ttl)
    elif isinstance(ttl, str):
        match = _DURATION_PATTERN.match(ttl)
        if not match or match.group(2).lower() not in _UNIT_SECONDS:
            raise ValueError(f"Invalid token lifetime: {ttl!r}")
        amount, unit = match.groups()
        delta = timedelta(seconds=int(amount) * _UNIT_SECONDS[unit.lower()])
    else:
        raise ValueError(f"Invalid token lifetime: {ttl!r}")

    if delta <= timedelta(0):
        raise ValueError(f"Token lifetime must be positive, got {ttl!r}")
    return delta


def looks_like_token(value: str) -> bool:
    """
    Check whether a string has the shape of a signed token.

    This is a structural check only (three dot-separated base64url segments).
    It lets code paths that accept several identifier formats tell a token
    apart from, e.g., a UUID results handle. It is not a security check: a
    forged or expired token still passes. Use MagicLinkTokenService.verify
    to decide whether a token grants access.

    Args:
        value: Arbitrary input

    Returns:
        True if the value is shaped like a JWT, False otherwise
    """
    if not isinstance(value, str):
        return False
    return _TOKEN_SHAPE.match(value) is not None


class MagicLinkTokenService:
    """
    Creates and verifies magic-link tokens with an injected signing secret.

    Instances hold only immutable configuration and are safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        default_ttl: TTLValue = DEFAULT_TTL,
    ):
        """
        Initialize the token service.

        Args:
            secret_key: Server-side signing secret, never sent to clients
            algorithm: JWT signing algorithm
            default_ttl: Lifetime used when create() is called without one

        Raises:
            ValueError: If the secret is empty or default_ttl is invalid
        """
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._default_ttl = parse_ttl(default_ttl)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def default_ttl(self) -> timedelta:
        return self._default_ttl

    def create(
        self,
        email: str,
        results_token: str,
        ttl: Optional[TTLValue] = None,
    ) -> str:
        """
        Create a signed magic-link token.

        The signature covers every claim, so altering the email, the results
        handle or either timestamp invalidates the token.

        Args:
            email: Respondent email address (format is validated by callers)
            results_token: Opaque handle of the stored result set
            ttl: Optional lifetime; defaults to the service's default_ttl

        Returns:
            Encoded JWT string

        Raises:
            ValueError: If ttl is invalid
            TokenSigningError: If the signing library fails
        """
        lifetime = self._default_ttl if ttl is None else parse_ttl(ttl)
        now = utc_now()
        claims: Dict[str, Any] = {
            "email": email,
            "results_token": results_token,
            "purpose": MAGIC_LINK_PURPOSE,
            "iat": now,
            "exp": now + lifetime,
        }
        try:
            return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        except JOSEError as e:
            raise TokenSigningError("sign magic-link token", e) from e

    def verify(self, token: str) -> Optional[MagicLinkPayload]:
        """
        Verify a magic-link token.

        Signature and expiry are checked together by the JWT library. Every
        failure (malformed input, bad signature, expiry, wrong purpose,
        missing claims) yields the same None result so callers cannot learn
        which check failed.

        Args:
            token: Arbitrary input, possibly not a token at all

        Returns:
            The verified payload, or None if the token is invalid
        """
        if not isinstance(token, str) or not token:
            return None

        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JOSEError:
            return None

        email = claims.get("email")
        results_token = claims.get("results_token")
        issued_at = claims.get("iat")
        expires_at = claims.get("exp")
        if claims.get("purpose") != MAGIC_LINK_PURPOSE:
            return None
        if not isinstance(email, str) or not isinstance(results_token, str):
            return None
        if not isinstance(issued_at, (int, float)) or not isinstance(
            expires_at, (int, float)
        ):
            return None

        return MagicLinkPayload(
            email=email,
            results_token=results_token,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
