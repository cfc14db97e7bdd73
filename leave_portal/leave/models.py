"""
Leave domain models.

``LeaveRecord`` is the stored value object; ``RequestContext`` carries one
request through the gating pipeline.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LeaveRecord(CamelModel):
    """A previously issued leave record."""

    model_config = ConfigDict(frozen=True)

    claim_code: str = Field(..., description="Claim code (8-20 alphanumerics)")
    national_id: str = Field(..., description="National identifier (10 digits)")
    holder_name: str
    report_date: str
    start_date: str
    end_date: str
    issuing_physician: str
    job_title: str
    inclusive_day_count: int = Field(
        0, description="Derived from start_date/end_date, both inclusive"
    )

    @property
    def key(self) -> tuple[str, str]:
        """Lookup key: (claim_code, national_id)."""
        return (self.claim_code, self.national_id)


@dataclass(frozen=True)
class RequestContext:
    """
    Per-request state handed from stage to stage.

    Stages never mutate a context; they return a copy via
    ``dataclasses.replace`` with the fields they derived.

    Attributes:
        route: Route name used for rate-limit budgets ("query", "append", "list").
        client_address: Caller network address (rate-limit identity).
        origin: Declared ``Origin`` header, if any.
        region: ISO country code resolved at the edge, if any.
        body: Raw request body; parsed only after admission.
        authorization: Raw ``Authorization`` header, if any.
        payload: Validated payload, set by the validation stage.
        identity: Authenticated identity, set by the authentication stage.
    """

    route: str
    client_address: str
    origin: Optional[str] = None
    region: Optional[str] = None
    body: bytes = b""
    authorization: Optional[str] = None
    payload: Any = None
    identity: Any = None
