#!/usr/bin/env python3
"""
Create Bearer Token Script.

CLI tool for issuing the bearer tokens required by the append and listing
endpoints. Uses the same signing secret as the server (LEAVE_JWT_SECRET_KEY).

Usage: python scripts/create_token.py <subject> [--minutes N]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from leave_portal.core.config import load_settings
from leave_portal.core.exceptions import ConfigurationError
from leave_portal.core.security.tokens import Authenticator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue a Leave Portal bearer token.")
    parser.add_argument("subject", help="Operator identifier stored in the 'sub' claim")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (default: LEAVE_TOKEN_EXPIRE_MINUTES)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.minutes is not None and args.minutes <= 0:
        print("❌ --minutes must be positive", file=sys.stderr)
        return 1

    authenticator = Authenticator.from_settings(settings)
    print(authenticator.issue_token(args.subject, expires_minutes=args.minutes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
