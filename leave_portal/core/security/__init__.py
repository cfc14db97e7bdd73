"""
Security package.

Bearer-token authentication and bot verification.
"""

from leave_portal.core.security.captcha import CaptchaVerifier
from leave_portal.core.security.tokens import Authenticator, Identity

__all__ = [
    "Authenticator",
    "CaptchaVerifier",
    "Identity",
]
