"""Default Flask settings for the OTP backend.

Every value can be overridden through create_app(test_config) or through a
FLASK_-prefixed environment variable, e.g. FLASK_OTPAUTH_MAX_CACHE_SIZE=1000.
"""

from otpauth.qr_code import DEFAULT_HEIGHT, DEFAULT_WIDTH
from otpauth.replay_guard import DEFAULT_MAX_CACHE_SIZE

DEFAULTS = {
    "OTPAUTH_ISSUER": "otpauth",
    "OTPAUTH_MAX_CACHE_SIZE": DEFAULT_MAX_CACHE_SIZE,
    "OTPAUTH_QR_WIDTH": DEFAULT_WIDTH,
    "OTPAUTH_QR_HEIGHT": DEFAULT_HEIGHT,
}
