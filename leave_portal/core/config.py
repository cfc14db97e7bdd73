"""
Leave Portal Configuration.

Settings are read from environment variables (prefix ``LEAVE_``) and an
optional ``.env`` file in the working directory. The JWT signing secret is
mandatory: without it the application refuses to start.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from leave_portal.core.exceptions import ConfigurationError

MIN_JWT_SECRET_LENGTH = 32
DEFAULT_RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class LeaveSettings(BaseSettings):
    """
    Leave Portal settings loaded from environment variables.

    Sensitive values use SecretStr so they never show up in reprs or logs.
    List-valued settings are comma separated strings exposed through
    properties.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # === Server ===
    host: Annotated[
        str,
        Field(default="127.0.0.1", validation_alias="LEAVE_HOST"),
    ] = "127.0.0.1"

    port: Annotated[
        int,
        Field(
            default=3000,
            description="Listening port",
            validation_alias=AliasChoices("LEAVE_PORT", "PORT"),
        ),
    ] = 3000

    debug: Annotated[
        bool,
        Field(default=False, validation_alias="LEAVE_DEBUG"),
    ] = False

    log_level: Annotated[
        str,
        Field(default="INFO", validation_alias="LEAVE_LOG_LEVEL"),
    ] = "INFO"

    log_dir: Annotated[
        str,
        Field(
            default="",
            description="Directory for the rotating log file (empty: console only)",
            validation_alias="LEAVE_LOG_DIR",
        ),
    ] = ""

    # === Authentication ===
    jwt_secret_key: Annotated[
        SecretStr,
        Field(
            description="HMAC secret used to sign and verify bearer tokens",
            validation_alias="LEAVE_JWT_SECRET_KEY",
        ),
    ]

    jwt_algorithm: Annotated[
        str,
        Field(default="HS256", validation_alias="LEAVE_JWT_ALGORITHM"),
    ] = "HS256"

    jwt_issuer: Annotated[
        str,
        Field(default="", validation_alias="LEAVE_JWT_ISSUER"),
    ] = ""

    jwt_audience: Annotated[
        str,
        Field(default="", validation_alias="LEAVE_JWT_AUDIENCE"),
    ] = ""

    token_expire_minutes: Annotated[
        int,
        Field(default=60, gt=0, validation_alias="LEAVE_TOKEN_EXPIRE_MINUTES"),
    ] = 60

    # === Bot verification (opt-in) ===
    recaptcha_secret_key: Annotated[
        SecretStr,
        Field(
            default=SecretStr(""),
            description="reCAPTCHA secret; empty disables verification",
            validation_alias="LEAVE_RECAPTCHA_SECRET_KEY",
        ),
    ] = SecretStr("")

    recaptcha_verify_url: Annotated[
        str,
        Field(
            default=DEFAULT_RECAPTCHA_VERIFY_URL,
            validation_alias="LEAVE_RECAPTCHA_VERIFY_URL",
        ),
    ] = DEFAULT_RECAPTCHA_VERIFY_URL

    recaptcha_min_score: Annotated[
        float,
        Field(default=0.5, ge=0.0, le=1.0, validation_alias="LEAVE_RECAPTCHA_MIN_SCORE"),
    ] = 0.5

    recaptcha_timeout_seconds: Annotated[
        float,
        Field(default=5.0, gt=0, validation_alias="LEAVE_RECAPTCHA_TIMEOUT_SECONDS"),
    ] = 5.0

    # === Origin / region filter ===
    allowed_origins_csv: Annotated[
        str,
        Field(default="", validation_alias="LEAVE_ALLOWED_ORIGINS"),
    ] = ""

    allowed_regions_csv: Annotated[
        str,
        Field(default="", validation_alias="LEAVE_ALLOWED_REGIONS"),
    ] = ""

    geo_allow_unresolved: Annotated[
        bool,
        Field(
            default=False,
            description="Admit callers whose region cannot be resolved",
            validation_alias="LEAVE_GEO_ALLOW_UNRESOLVED",
        ),
    ] = False

    trust_proxy_headers: Annotated[
        bool,
        Field(
            default=False,
            description="Take the caller address from CF-Connecting-IP / X-Forwarded-For",
            validation_alias="LEAVE_TRUST_PROXY_HEADERS",
        ),
    ] = False

    # === Rate limiting ===
    query_rate_limit: Annotated[
        int,
        Field(default=50, gt=0, validation_alias="LEAVE_QUERY_RATE_LIMIT"),
    ] = 50

    query_rate_window_seconds: Annotated[
        float,
        Field(default=600.0, gt=0, validation_alias="LEAVE_QUERY_RATE_WINDOW_SECONDS"),
    ] = 600.0

    append_rate_limit: Annotated[
        int,
        Field(default=10, gt=0, validation_alias="LEAVE_APPEND_RATE_LIMIT"),
    ] = 10

    append_rate_window_seconds: Annotated[
        float,
        Field(default=600.0, gt=0, validation_alias="LEAVE_APPEND_RATE_WINDOW_SECONDS"),
    ] = 600.0

    slowdown_window_seconds: Annotated[
        float,
        Field(default=60.0, gt=0, validation_alias="LEAVE_SLOWDOWN_WINDOW_SECONDS"),
    ] = 60.0

    slowdown_delay_after: Annotated[
        int,
        Field(default=10, ge=0, validation_alias="LEAVE_SLOWDOWN_DELAY_AFTER"),
    ] = 10

    slowdown_delay_step_seconds: Annotated[
        float,
        Field(default=0.5, ge=0, validation_alias="LEAVE_SLOWDOWN_DELAY_STEP_SECONDS"),
    ] = 0.5

    slowdown_max_delay_seconds: Annotated[
        float,
        Field(default=5.0, ge=0, validation_alias="LEAVE_SLOWDOWN_MAX_DELAY_SECONDS"),
    ] = 5.0

    # === Data ===
    seed_file: Annotated[
        str,
        Field(
            default="",
            description="JSON file with seed records (empty: built-in examples)",
            validation_alias="LEAVE_SEED_FILE",
        ),
    ] = ""

    @field_validator("jwt_secret_key")
    @classmethod
    def _check_secret_length(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value().strip()) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"must be at least {MIN_JWT_SECRET_LENGTH} characters"
            )
        return value

    @property
    def allowed_origins(self) -> list[str]:
        """Origins accepted in the ``Origin`` header (empty: any)."""
        return _split_csv(self.allowed_origins_csv)

    @property
    def allowed_regions(self) -> list[str]:
        """Upper-cased ISO country codes (empty: region filter disabled)."""
        return [code.upper() for code in _split_csv(self.allowed_regions_csv)]

    @property
    def captcha_enabled(self) -> bool:
        return bool(self.recaptcha_secret_key.get_secret_value())


def load_settings(**overrides) -> LeaveSettings:
    """
    Build settings, turning validation failures into ConfigurationError.

    Raises:
        ConfigurationError: If a required variable is missing or invalid.
    """
    try:
        return LeaveSettings(**overrides)
    except PydanticValidationError as e:
        problems = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "settings"
            problems.append(f"{location}: {error['msg']}")
        raise ConfigurationError(
            "Invalid Leave Portal configuration: " + "; ".join(problems)
        ) from e


@lru_cache
def get_settings() -> LeaveSettings:
    """
    Get cached settings.

    Uses LRU cache to ensure settings are loaded only once.
    """
    return load_settings()
