"""
Bearer Token Authentication.

Signs and verifies the JWTs that gate the append and listing operations.
Every failure surfaces as AuthenticationError; the reason is logged but
never returned to the caller.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Optional

import jwt

from leave_portal.core.exceptions import AuthenticationError, ConfigurationError

if TYPE_CHECKING:
    from leave_portal.core.config import LeaveSettings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""

    subject: str
    claims: dict[str, Any] = field(default_factory=dict)


class Authenticator:
    """
    HMAC-signed JWT verifier.

    Requires ``exp`` and ``sub`` claims. Issuer and audience are checked
    only when configured.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "",
        audience: str = "",
        expire_minutes: int = 60,
    ) -> None:
        if not secret:
            raise ConfigurationError("JWT signing secret is not configured")
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer or None
        self._audience = audience or None
        self._expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: "LeaveSettings") -> "Authenticator":
        return cls(
            secret=settings.jwt_secret_key.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expire_minutes=settings.token_expire_minutes,
        )

    def issue_token(
        self,
        subject: str,
        expires_minutes: Optional[int] = None,
        **extra_claims: Any,
    ) -> str:
        """
        Create a signed token for ``subject``.

        Args:
            subject: Operator identifier placed in ``sub``.
            expires_minutes: Lifetime; defaults to the configured value.
            **extra_claims: Additional claims to embed.

        Returns:
            str: Signed JWT token string.
        """
        now = datetime.now(timezone.utc)
        lifetime = expires_minutes if expires_minutes is not None else self._expire_minutes
        payload: dict[str, Any] = {
            **extra_claims,
            "jti": str(uuid.uuid4()),
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=lifetime)).timestamp()),
        }
        if self._issuer:
            payload["iss"] = self._issuer
        if self._audience:
            payload["aud"] = self._audience
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def authenticate(self, authorization: Optional[str]) -> Identity:
        """
        Verify an ``Authorization: Bearer <token>`` header value.

        Raises:
            AuthenticationError: If the header is missing or malformed, or
                                 the token fails signature, expiry or claim checks.
        """
        if not authorization:
            raise AuthenticationError("missing Authorization header")
        if authorization[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
            raise AuthenticationError("Authorization scheme is not Bearer")
        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            raise AuthenticationError("empty bearer token")

        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                audience=self._audience,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("Bearer token expired")
            raise AuthenticationError("token expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid bearer token: {type(e).__name__}")
            raise AuthenticationError(f"invalid token: {e}") from e

        return Identity(subject=str(claims["sub"]), claims=claims)
