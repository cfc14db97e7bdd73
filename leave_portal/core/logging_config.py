"""
Logging Configuration Module.

Provides centralized logging setup with an optional rotating file handler.
Includes automatic masking of sensitive data (tokens, secrets, national IDs).
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


# --- Constants ---
LOG_FILENAME = "leave_portal.log"
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# --- Sensitive Data Patterns ---
SENSITIVE_PATTERNS = [
    # Bearer tokens in headers (including full JWT with dots)
    (
        re.compile(r"(Bearer\s+)([A-Za-z0-9\-_\.]+)", re.IGNORECASE),
        r"\1***"
    ),
    # Key-value pairs with sensitive keys (secret=xxx, token: xxx, etc.)
    (
        re.compile(
            r"(password|secret|token|captcha_token|captchaToken|api_key|apikey|"
            r"authorization|cookie|credential|private_key|jwt_secret_key)"
            r"\s*[:=]\s*['\"]?([^'\"\s&,]+)['\"]?",
            re.IGNORECASE
        ),
        r"\1=***"
    ),
    # JWT tokens standalone (eyJ...)
    (
        re.compile(r"\b(eyJ[A-Za-z0-9\-_]+\.eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+)\b"),
        r"[JWT:***]"
    ),
    # URL query parameters with sensitive names
    (
        re.compile(
            r"([?&])(token|key|secret|response|api_key)=([^&\s]+)",
            re.IGNORECASE
        ),
        r"\1\2=***"
    ),
    # National identifiers next to their key - keep the last 2 digits
    (
        re.compile(
            r"(national_?id)(\s*[:=]\s*['\"]?)\d{8}(\d{2})(?!\d)",
            re.IGNORECASE
        ),
        r"\1\2********\3"
    ),
]


class SensitiveDataFormatter(logging.Formatter):
    """
    Custom log formatter that masks sensitive data.

    Automatically detects and masks:
    - Secrets, tokens, captcha responses
    - Authorization headers (Bearer tokens) and bare JWTs
    - Sensitive URL query parameters
    - National identifiers (partial masking)
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, masking any sensitive data."""
        masked_msg = super().format(record)
        for pattern, replacement in SENSITIVE_PATTERNS:
            masked_msg = pattern.sub(replacement, masked_msg)
        return masked_msg


def get_log_path(log_dir: str | Path) -> Path:
    """Return the log file path, creating the directory if needed."""
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir / LOG_FILENAME


def setup_logging(log_level: int | str = logging.INFO, log_dir: str | Path | None = None) -> None:
    """
    Configure application logging.

    Args:
        log_level: The logging level (default: logging.INFO).
        log_dir: Directory for the rotating log file. Console only when empty.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = SensitiveDataFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        log_file_path = get_log_path(log_dir)
        file_handler = RotatingFileHandler(
            filename=str(log_file_path),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Logging initialized. Log file: {log_file_path}")
    else:
        root_logger.info("Logging initialized (console only)")

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
