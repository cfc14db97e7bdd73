"""
Leave API Router.

Endpoints for leave record lookup, append and listing. Handlers only build
the request context and render the outcome; every decision is made by
LeaveService.
"""

import logging

from fastapi import APIRouter, Request, Response

from leave_portal.core.config import LeaveSettings
from leave_portal.core.dependencies import LeaveServiceDep, SettingsDep
from leave_portal.core.exceptions import PayloadTooLargeError
from leave_portal.core.middleware.gate import ROUTE_APPEND, ROUTE_LIST, ROUTE_QUERY
from leave_portal.core.middleware.geo import get_client_ip, resolve_region
from leave_portal.leave.models import RequestContext
from leave_portal.leave.schemas import (
    MAX_BODY_BYTES,
    AppendResponse,
    ErrorResponse,
    LeaveListResponse,
    LeaveResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Leave"])

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
}


async def read_body_capped(request: Request, limit: int = MAX_BODY_BYTES) -> bytes:
    """
    Read at most ``limit + 1`` bytes of the request body.

    A body that comes back longer than ``limit`` is rejected later by
    validation; reading stops as soon as the cap is passed.

    Raises:
        PayloadTooLargeError: If ``Content-Length`` already exceeds ``limit``.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(f"Declared body of {declared} bytes exceeds {limit}")

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        chunks.append(chunk)
        received += len(chunk)
        if received > limit:
            break
    return b"".join(chunks)[: limit + 1]


async def build_context(
    request: Request,
    route: str,
    settings: LeaveSettings,
    read_body: bool = True,
) -> RequestContext:
    """Capture what the pipeline needs from the raw request. No parsing here."""
    trust = settings.trust_proxy_headers
    return RequestContext(
        route=route,
        client_address=get_client_ip(request, trust),
        origin=request.headers.get("origin"),
        region=resolve_region(request, trust),
        body=await read_body_capped(request) if read_body else b"",
        authorization=request.headers.get("authorization"),
    )


@router.post(
    "/leave",
    response_model=LeaveResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def query_leave(
    request: Request,
    response: Response,
    service: LeaveServiceDep,
    settings: SettingsDep,
) -> LeaveResponse:
    """Look up a leave record by claim code and national identifier."""
    ctx = await build_context(request, ROUTE_QUERY, settings)
    outcome = await service.query_leave(ctx)
    response.headers.update(outcome.admission.headers())
    return LeaveResponse(record=outcome.record)


@router.post(
    "/add-leave",
    response_model=AppendResponse,
    responses={**_ERRORS, 401: {"model": ErrorResponse}},
)
async def add_leave(
    request: Request,
    response: Response,
    service: LeaveServiceDep,
    settings: SettingsDep,
) -> AppendResponse:
    """Append a leave record. Requires a bearer token."""
    ctx = await build_context(request, ROUTE_APPEND, settings)
    outcome = await service.append_leave(ctx)
    response.headers.update(outcome.admission.headers())
    return AppendResponse(record=outcome.record)


@router.get(
    "/leaves",
    response_model=LeaveListResponse,
    responses={401: {"model": ErrorResponse}},
)
async def list_leaves(
    request: Request,
    service: LeaveServiceDep,
    settings: SettingsDep,
) -> LeaveListResponse:
    """List every stored record. Requires a bearer token."""
    ctx = await build_context(request, ROUTE_LIST, settings, read_body=False)
    outcome = await service.list_leaves(ctx)
    return LeaveListResponse(leaves=outcome.records)
