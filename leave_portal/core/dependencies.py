"""
FastAPI Dependencies - Dependency Injection for API Routers.

Components are built once by the app factory and kept on ``app.state``;
these helpers expose them through ``Annotated[..., Depends(...)]`` aliases
so tests can replace any of them with ``app.dependency_overrides``.

Usage:
    from leave_portal.core.dependencies import LeaveServiceDep, SettingsDep

    @router.get("/items")
    async def get_items(service: LeaveServiceDep, settings: SettingsDep):
        ...
"""

from typing import Annotated

from fastapi import Depends, Request

from leave_portal.core.config import LeaveSettings
from leave_portal.core.http_client import get_http_client_from_app
from leave_portal.core.middleware.gate import RequestGate
from leave_portal.core.security.captcha import CaptchaVerifier
from leave_portal.core.security.tokens import Authenticator
from leave_portal.leave.service import LeaveService
from leave_portal.leave.store import RecordStore


def get_app_settings(request: Request) -> LeaveSettings:
    """Settings the application was built with."""
    return request.app.state.settings


SettingsDep = Annotated[LeaveSettings, Depends(get_app_settings)]


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.store


RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]


def get_request_gate(request: Request) -> RequestGate:
    return request.app.state.gate


RequestGateDep = Annotated[RequestGate, Depends(get_request_gate)]


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


AuthenticatorDep = Annotated[Authenticator, Depends(get_authenticator)]


def get_captcha_verifier(request: Request, settings: SettingsDep) -> CaptchaVerifier:
    """
    Bot verifier bound to the shared HTTP client.

    The client is only looked up when verification is enabled, so a
    deployment without a verification secret never needs it.
    """
    http_client = None
    if settings.captcha_enabled:
        http_client = get_http_client_from_app(request.app)
    return CaptchaVerifier.from_settings(settings, http_client=http_client)


CaptchaVerifierDep = Annotated[CaptchaVerifier, Depends(get_captcha_verifier)]


def get_leave_service(
    store: RecordStoreDep,
    gate: RequestGateDep,
    authenticator: AuthenticatorDep,
    captcha: CaptchaVerifierDep,
) -> LeaveService:
    return LeaveService(
        store=store,
        gate=gate,
        authenticator=authenticator,
        captcha=captcha,
    )


LeaveServiceDep = Annotated[LeaveService, Depends(get_leave_service)]
