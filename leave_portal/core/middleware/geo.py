"""
Origin and region filtering.

Region codes come from the edge proxy (Cloudflare's ``CF-IPCountry``
header). They are only believed when proxy headers are trusted; otherwise
the region is treated as unresolved.
"""

import logging
from collections.abc import Iterable

from fastapi import Request

from leave_portal.core.exceptions import AccessDeniedError
from leave_portal.leave.models import RequestContext

logger = logging.getLogger(__name__)

REGION_HEADER = "CF-IPCountry"

# Cloudflare placeholders: XX = unknown, T1 = Tor exit node
UNRESOLVED_REGIONS = frozenset({"XX", "T1"})


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Get the caller address used as rate-limit identity.

    When proxy headers are trusted, priority is:
    1. CF-Connecting-IP (Cloudflare)
    2. X-Forwarded-For (first IP)
    3. X-Real-IP
    4. Direct client host
    """
    if trust_proxy_headers:
        cf_ip = request.headers.get("CF-Connecting-IP")
        if cf_ip:
            return cf_ip.strip()

        xff = request.headers.get("X-Forwarded-For")
        if xff:
            return xff.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    return request.client.host if request.client else "unknown"


def resolve_region(request: Request, trust_proxy_headers: bool = False) -> str | None:
    """Return the caller's ISO country code, or None when unknown."""
    if not trust_proxy_headers:
        return None
    code = (request.headers.get(REGION_HEADER) or "").strip().upper()
    if not code or code in UNRESOLVED_REGIONS:
        return None
    return code


class OriginRegionFilter:
    """
    Allow-list filter on the declared origin and the resolved region.

    An empty allow-list disables that check. Requests without an ``Origin``
    header pass the origin check (same-site and non-browser callers).
    Requests whose region is unresolved pass only if ``allow_unresolved``.
    """

    def __init__(
        self,
        allowed_origins: Iterable[str] = (),
        allowed_regions: Iterable[str] = (),
        allow_unresolved: bool = False,
    ) -> None:
        self.allowed_origins = frozenset(o.rstrip("/") for o in allowed_origins)
        self.allowed_regions = frozenset(r.upper() for r in allowed_regions)
        self.allow_unresolved = allow_unresolved

    @property
    def enabled(self) -> bool:
        return bool(self.allowed_origins or self.allowed_regions)

    def check(self, ctx: RequestContext) -> None:
        """
        Raises:
            AccessDeniedError: If the origin or region is not allowed.
        """
        if self.allowed_origins and ctx.origin:
            if ctx.origin.rstrip("/") not in self.allowed_origins:
                logger.warning(f"Origin blocked: {ctx.origin} (IP: {ctx.client_address})")
                raise AccessDeniedError(f"origin {ctx.origin} not allowed")

        if self.allowed_regions:
            if ctx.region is None:
                if not self.allow_unresolved:
                    logger.warning(f"Unresolved region blocked (IP: {ctx.client_address})")
                    raise AccessDeniedError("region unresolved")
            elif ctx.region not in self.allowed_regions:
                logger.warning(f"Region blocked: {ctx.region} (IP: {ctx.client_address})")
                raise AccessDeniedError(f"region {ctx.region} not allowed")
