"""
Leave Portal - Entry Point.

ASGI application for uvicorn execution.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 3000

Or run directly:
    python main.py
"""

import logging
import sys

import uvicorn

from leave_portal.core.config import get_settings
from leave_portal.core.exceptions import ConfigurationError
from leave_portal.core.logging_config import setup_logging
from leave_portal.core.server import create_app

# -----------------------------------------------------------------------------
# Module-level Application Instance
# -----------------------------------------------------------------------------

try:
    _settings = get_settings()
    setup_logging(_settings.log_level, _settings.log_dir or None)
    # Export for uvicorn
    app = create_app(_settings)
except ConfigurationError as e:
    # Refuse to start rather than serve unauthenticated or unseeded.
    if not logging.getLogger().handlers:
        setup_logging()
    logging.getLogger(__name__).critical(str(e))
    sys.exit(1)


# -----------------------------------------------------------------------------
# Direct Execution
# -----------------------------------------------------------------------------


def main() -> None:
    """Run the application directly with uvicorn."""
    uvicorn_config = {
        "host": _settings.host,
        "port": _settings.port,
        "reload": _settings.debug,
        "log_level": "warning",
        "access_log": False,
    }

    if _settings.debug:
        uvicorn_config["reload_excludes"] = [
            "logs/*",
            "**/__pycache__/*",
            "**/*.pyc",
            ".venv/*",
            "*.log",
        ]

    uvicorn.run("main:app", **uvicorn_config)


if __name__ == "__main__":
    main()
