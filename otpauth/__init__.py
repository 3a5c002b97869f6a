"""
otpauth package
===============

Issue and verify TOTP codes (RFC 4226 & RFC 6238) for second-factor login,
with at-most-once acceptance of each code.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP:  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^6
- TOTP:  HOTP with counter = floor(epoch_ms / 30000)
- Dynamic truncation: 4 bytes of the HMAC at offset (last byte & 0x0F),
  top bit cleared.

──────────────────────────────────────────────
Usage
──────────────────────────────────────────────
Enrollment:
    >>> from otpauth import create_secret, get_otp_auth_url
    >>> secret = create_secret()
    >>> uri = get_otp_auth_url("alice@example.com", secret)
    # show `uri` as a QR code (see otpauth.qr_code), store `secret` yourself

Login (keep ONE Validator for the whole process, it owns the replay guard):
    >>> from otpauth import Validator, ValidationOutcome
    >>> validator = Validator(max_cache_size=500)
    >>> validator.validate_code(secret, "123456")
    <ValidationOutcome.FAILED: 'Failed'>
"""

from otpauth.errors import InvalidSecretError, OtpAlgorithmError, OtpAuthError
from otpauth.otp_core import (
    CODE_DIGITS,
    KEY_MODULUS,
    SECRET_SIZE,
    TIME_STEP_SIZE,
    calculate_code,
    create_secret,
    decode_secret,
    format_code,
    totp,
)
from otpauth.otpauth_uri import get_otp_auth_url, get_otp_qr_code_url
from otpauth.replay_guard import DEFAULT_MAX_CACHE_SIZE, ReplayGuard
from otpauth.validator import ValidationOutcome, Validator

__all__ = [
    "CODE_DIGITS",
    "DEFAULT_MAX_CACHE_SIZE",
    "KEY_MODULUS",
    "SECRET_SIZE",
    "TIME_STEP_SIZE",
    "InvalidSecretError",
    "OtpAlgorithmError",
    "OtpAuthError",
    "ReplayGuard",
    "ValidationOutcome",
    "Validator",
    "calculate_code",
    "create_secret",
    "decode_secret",
    "format_code",
    "get_otp_auth_url",
    "get_otp_qr_code_url",
    "totp",
]
