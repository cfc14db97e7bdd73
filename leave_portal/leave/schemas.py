"""
Leave API Schemas.

Pydantic models for inbound payloads and outbound responses, plus the
validation entry points used by the service. Payloads are parsed once here
and handed downward as typed values.
"""

import logging
from typing import Annotated, Optional

from pydantic import Field, StringConstraints, field_validator
from pydantic import ValidationError as PydanticValidationError

from leave_portal.core.exceptions import PayloadTooLargeError, ValidationError
from leave_portal.leave.models import CamelModel, LeaveRecord

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 10 * 1024
MAX_TEXT_LENGTH = 200

ClaimCode = Annotated[str, StringConstraints(pattern=r"^[A-Za-z0-9]{8,20}$")]
NationalId = Annotated[str, StringConstraints(pattern=r"^[0-9]{10}$")]
Text = Annotated[str, StringConstraints(min_length=1, max_length=MAX_TEXT_LENGTH)]


class QueryPayload(CamelModel):
    """Body of POST /api/leave."""

    claim_code: ClaimCode
    national_id: NationalId
    captcha_token: Optional[str] = Field(None, max_length=4096)


class AppendPayload(CamelModel):
    """Body of POST /api/add-leave. The day count is never accepted."""

    claim_code: ClaimCode
    national_id: NationalId
    holder_name: Text
    report_date: Text
    start_date: Text
    end_date: Text
    issuing_physician: Text
    job_title: Text

    @field_validator(
        "holder_name",
        "report_date",
        "start_date",
        "end_date",
        "issuing_physician",
        "job_title",
    )
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class LeaveResponse(CamelModel):
    """Successful lookup response."""

    success: bool = True
    record: LeaveRecord


class AppendResponse(CamelModel):
    """Successful append response; echoes the stored record."""

    success: bool = True
    message: str = "Leave record added."
    record: LeaveRecord


class LeaveListResponse(CamelModel):
    """Full snapshot of the store."""

    success: bool = True
    leaves: list[LeaveRecord] = Field(default_factory=list)


class ErrorResponse(CamelModel):
    """Standard error envelope."""

    success: bool = False
    message: str
    code: str


def _validate(model: type[CamelModel], raw: bytes | str) -> CamelModel:
    if len(raw) > MAX_BODY_BYTES:
        raise PayloadTooLargeError(f"Body of {len(raw)} bytes exceeds {MAX_BODY_BYTES}")
    try:
        return model.model_validate_json(raw or b"{}")
    except PydanticValidationError as e:
        # First failure wins; nothing else from the payload is kept.
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "body"
        logger.info(f"Rejected {model.__name__}: {location}: {first['type']}")
        raise ValidationError(f"{location}: {first['msg']}", field=location) from e


def validate_query(raw: bytes | str) -> QueryPayload:
    """
    Validate a query body.

    Raises:
        PayloadTooLargeError: If the body exceeds MAX_BODY_BYTES.
        ValidationError: If the body is not a JSON object or a field is invalid.
    """
    return _validate(QueryPayload, raw)


def validate_append(raw: bytes | str) -> AppendPayload:
    """
    Validate an append body.

    Dates are only required to be non-blank strings; unparseable dates are
    stored and yield a zero day count.

    Raises:
        PayloadTooLargeError: If the body exceeds MAX_BODY_BYTES.
        ValidationError: If the body is not a JSON object or a field is invalid.
    """
    return _validate(AppendPayload, raw)
