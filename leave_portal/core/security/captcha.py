"""
Bot Verification (reCAPTCHA).

Verification is opt-in: with no secret configured every request passes.
Once a secret is configured the check fails closed - a missing token is a
failure, and an unreachable or misbehaving verification service raises
UpstreamError instead of letting the request through.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx

from leave_portal.core.config import DEFAULT_RECAPTCHA_VERIFY_URL
from leave_portal.core.exceptions import UpstreamError
from leave_portal.core.http_client import HttpClientProtocol

if TYPE_CHECKING:
    from leave_portal.core.config import LeaveSettings

logger = logging.getLogger(__name__)


class CaptchaVerifier:
    """
    Verifies client tokens against the reCAPTCHA siteverify endpoint.

    Args:
        secret: Server-side secret. Empty disables verification.
        http_client: Shared async HTTP client (injected from app state).
        verify_url: Siteverify endpoint.
        min_score: Lowest acceptable score for score-based (v3) responses.
        timeout: Per-call timeout in seconds.
    """

    def __init__(
        self,
        secret: str = "",
        http_client: Optional[HttpClientProtocol] = None,
        verify_url: str = DEFAULT_RECAPTCHA_VERIFY_URL,
        min_score: float = 0.5,
        timeout: float = 5.0,
    ) -> None:
        self._secret = secret
        self._http_client = http_client
        self._verify_url = verify_url
        self._min_score = min_score
        self._timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: "LeaveSettings",
        http_client: Optional[HttpClientProtocol] = None,
    ) -> "CaptchaVerifier":
        return cls(
            secret=settings.recaptcha_secret_key.get_secret_value(),
            http_client=http_client,
            verify_url=settings.recaptcha_verify_url,
            min_score=settings.recaptcha_min_score,
            timeout=settings.recaptcha_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    async def verify(self, token: Optional[str], caller_address: Optional[str] = None) -> bool:
        """
        Check a client token.

        Returns:
            True if verification is disabled or the service accepts the token;
            False if the token is missing, rejected, or scored too low.

        Raises:
            UpstreamError: If the verification service cannot be reached or
                           returns an unusable response.
        """
        if not self.enabled:
            return True

        if not token or not token.strip():
            logger.warning(f"Verification token missing (IP: {caller_address})")
            return False

        if self._http_client is None:
            raise UpstreamError("No HTTP client available for verification")

        form = {"secret": self._secret, "response": token}
        if caller_address:
            form["remoteip"] = caller_address

        try:
            response = await self._http_client.post(
                self._verify_url,
                data=form,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Verification service unreachable: {type(e).__name__}")
            raise UpstreamError(f"verification request failed: {type(e).__name__}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Verification service returned HTTP {response.status_code}")
            raise UpstreamError(f"verification service status {response.status_code}")

        try:
            data: Any = response.json()
        except ValueError as e:
            logger.error("Verification service returned a non-JSON body")
            raise UpstreamError("malformed verification response") from e
        if not isinstance(data, dict):
            logger.error("Verification service returned a non-object body")
            raise UpstreamError("malformed verification response")

        if data.get("success") is not True:
            logger.warning(
                f"Verification rejected (IP: {caller_address}, "
                f"errors: {data.get('error-codes', [])})"
            )
            return False

        score = data.get("score")
        if score is not None:
            try:
                score_value = float(score)
            except (TypeError, ValueError) as e:
                raise UpstreamError("malformed verification score") from e
            if score_value < self._min_score:
                logger.warning(f"Verification score too low: {score_value} (IP: {caller_address})")
                return False

        return True
