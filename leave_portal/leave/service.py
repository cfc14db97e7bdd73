"""
Leave Service.

Orchestrates the gating pipeline for the three leave operations. Each stage
either returns the (possibly enriched) request context or raises a
LeaveError that short-circuits the rest of the pipeline.

    query:  gate -> validate_query -> captcha -> find
    append: gate -> authenticate -> validate_append -> append
    list:   authenticate -> list

The store is touched only after the last await of each pipeline, so a
store read or write never straddles a suspension point.
"""

import dataclasses
import logging

from leave_portal.core.exceptions import AccessDeniedError, NotFoundError
from leave_portal.core.middleware.gate import Admission, RequestGate
from leave_portal.core.security.captcha import CaptchaVerifier
from leave_portal.core.security.tokens import Authenticator
from leave_portal.leave.models import LeaveRecord, RequestContext
from leave_portal.leave.schemas import AppendPayload, QueryPayload, validate_append, validate_query
from leave_portal.leave.store import RecordStore

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Outcome:
    """Result of an admitted and completed operation."""

    admission: Admission
    record: LeaveRecord | None = None
    records: list[LeaveRecord] = dataclasses.field(default_factory=list)


class LeaveService:
    """
    Service for the leave query, append and list use cases.

    All collaborators are injected so tests can swap any of them.
    """

    def __init__(
        self,
        store: RecordStore,
        gate: RequestGate,
        authenticator: Authenticator,
        captcha: CaptchaVerifier,
    ) -> None:
        self._store = store
        self._gate = gate
        self._authenticator = authenticator
        self._captcha = captcha

    # =========================================================================
    # Stages
    # =========================================================================

    def _authenticate(self, ctx: RequestContext) -> RequestContext:
        identity = self._authenticator.authenticate(ctx.authorization)
        return dataclasses.replace(ctx, identity=identity)

    async def _verify_captcha(self, ctx: RequestContext) -> RequestContext:
        payload: QueryPayload = ctx.payload
        if not (self._captcha.enabled or payload.captcha_token):
            return ctx
        passed = await self._captcha.verify(payload.captcha_token, ctx.client_address)
        if not passed:
            raise AccessDeniedError("bot verification failed")
        return ctx

    # =========================================================================
    # Use cases
    # =========================================================================

    async def query_leave(self, ctx: RequestContext) -> Outcome:
        """
        Look up a record by claim code and national identifier.

        Raises:
            AccessDeniedError: Origin/region blocked or bot verification failed.
            RateLimitedError: Caller exceeded the query quota.
            ValidationError: Malformed payload.
            UpstreamError: Verification service unavailable.
            NotFoundError: No record matches the pair.
        """
        admission = await self._gate.admit(ctx)
        ctx = dataclasses.replace(ctx, payload=validate_query(ctx.body))
        ctx = await self._verify_captcha(ctx)

        payload: QueryPayload = ctx.payload
        record = self._store.find(payload.claim_code, payload.national_id)
        if record is None:
            raise NotFoundError("no record for the supplied pair")
        return Outcome(admission=admission, record=record)

    async def append_leave(self, ctx: RequestContext) -> Outcome:
        """
        Append a record on behalf of an authenticated operator.

        Raises:
            AccessDeniedError: Origin/region blocked.
            AuthenticationError: Missing or invalid bearer token.
            RateLimitedError: Caller exceeded the append quota.
            ValidationError: Malformed payload.
        """
        admission = await self._gate.admit(ctx)
        ctx = self._authenticate(ctx)
        ctx = dataclasses.replace(ctx, payload=validate_append(ctx.body))

        payload: AppendPayload = ctx.payload
        record = self._store.append(payload.model_dump())
        logger.info(
            f"Leave record {record.claim_code} added by {ctx.identity.subject} "
            f"({record.inclusive_day_count} day(s))"
        )
        return Outcome(admission=admission, record=record)

    async def list_leaves(self, ctx: RequestContext) -> Outcome:
        """
        Return every stored record.

        Raises:
            AuthenticationError: Missing or invalid bearer token.
        """
        self._authenticate(ctx)
        return Outcome(admission=Admission(), records=self._store.list())
