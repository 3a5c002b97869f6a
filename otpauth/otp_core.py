"""
otp_core.py — Core HOTP / TOTP primitives (RFC4226 / RFC6238).

Contains only pure helpers, no state and no I/O:
- create_secret(): random 160-bit secret, base-32 text for authenticator apps
- decode_secret(): base-32 text -> raw key bytes
- calculate_code(): HMAC-SHA1 + dynamic truncation -> 6-digit code
- time_window(): epoch milliseconds -> TOTP counter

Security notes:
- Secrets are opaque. Never print or log them outside enrollment.
- HMAC-SHA1, 30 s step and 6 digits are fixed (Google Authenticator defaults).
"""

import base64
import binascii
import hmac
import logging
import secrets
import struct
import time

from otpauth.errors import InvalidSecretError, OtpAlgorithmError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
SECRET_SIZE = 20            # 160-bit secret, matches the SHA-1 block output
HASH_ALGORITHM = "sha1"     # HMAC digest, fixed
TIME_STEP_SIZE = 30000      # TOTP step in milliseconds
CODE_DIGITS = 6
KEY_MODULUS = 10 ** CODE_DIGITS
MAX_COUNTER = 2 ** 64       # 8-byte counter


# --- Secret handling -------------------------------------------------------
def create_secret() -> str:
    """
    Generate a new shared secret.

    - SECRET_SIZE bytes from the OS CSPRNG (secrets.token_bytes).
    - Base-32 encoded, upper case. 20 bytes encode to 32 characters, so the
      result never carries '=' padding.

    If the OS randomness source fails the error propagates; there is no safe
    fallback.

    Returns:
        str: base-32 secret, e.g. "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
    """
    raw = secrets.token_bytes(SECRET_SIZE)
    return base64.b32encode(raw).decode("ascii")


def decode_secret(secret: str, expected_size: int = SECRET_SIZE) -> bytes:
    """
    Decode a base-32 secret into raw key bytes.

    Lower case, embedded spaces and missing '=' padding are accepted, since
    users often copy secrets by hand.

    Arguments:
        secret: base-32 text
        expected_size: required key length in bytes, or None to accept any
            non-empty key

    Raises:
        InvalidSecretError: empty, not base-32, or wrong decoded length
    """
    if not secret or not isinstance(secret, str):
        raise InvalidSecretError("secret is empty")

    text = "".join(secret.split()).rstrip("=").upper()
    if not text:
        raise InvalidSecretError("secret is empty")
    text += "=" * (-len(text) % 8)

    try:
        key = base64.b32decode(text)
    except (binascii.Error, ValueError) as e:
        raise InvalidSecretError("secret is not valid base-32") from e

    if not key:
        raise InvalidSecretError("secret is empty")
    if expected_size is not None and len(key) != expected_size:
        raise InvalidSecretError(
            f"secret decodes to {len(key)} bytes, expected {expected_size}"
        )
    return key


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """8-byte big-endian counter (RFC4226 5.2)."""
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC4226 5.3 dynamic truncation.

    offset = low 4 bits of the last byte; take 4 bytes at offset, clear the top
    bit of the first one, read them as a big-endian unsigned 31-bit integer.
    """
    offset = hmac_digest[-1] & 0x0F
    return struct.unpack(">I", hmac_digest[offset:offset + 4])[0] & 0x7FFFFFFF


def calculate_code(key: bytes, time_window: int) -> int:
    """
    Compute the HOTP value of ``key`` for counter ``time_window``.

    Steps:
    1. Counter -> 8-byte big-endian message
    2. HMAC-SHA1(key, message)
    3. Dynamic truncation
    4. modulo 10^6

    Arguments:
        key: raw key bytes (already base-32 decoded)
        time_window: HOTP counter, 0 <= time_window < 2^64

    Returns:
        int: code in [0, 1_000_000)

    Raises:
        ValueError: counter not an integer or out of range
        OtpAlgorithmError: HMAC-SHA1 unavailable or key unusable
    """
    if isinstance(time_window, bool) or not isinstance(time_window, int):
        raise ValueError(f"time window must be an integer: {time_window!r}")
    if not 0 <= time_window < MAX_COUNTER:
        raise ValueError(f"time window out of range: {time_window}")

    msg = int_to_bytes(time_window)
    try:
        digest = hmac.new(key, msg, HASH_ALGORITHM).digest()
    except (TypeError, ValueError) as e:
        logger.error("HMAC-%s operation failed: %s", HASH_ALGORITHM.upper(), type(e).__name__)
        raise OtpAlgorithmError(f"HMAC-{HASH_ALGORITHM.upper()} unavailable or key invalid") from e

    return dynamic_truncate(digest) % KEY_MODULUS


def ensure_algorithm_available() -> None:
    """
    Fail fast if HMAC-SHA1 cannot be used in this interpreter (e.g. a FIPS
    build that disables SHA-1). Raises OtpAlgorithmError.
    """
    calculate_code(b"\x00" * SECRET_SIZE, 0)


# --- Time helpers ----------------------------------------------------------
def current_millis() -> int:
    return time.time_ns() // 1_000_000


def is_valid_timestamp(timestamp_ms) -> bool:
    """True for an integer epoch-ms value whose window fits the 8-byte counter."""
    if isinstance(timestamp_ms, bool) or not isinstance(timestamp_ms, int):
        return False
    return 0 <= timestamp_ms // TIME_STEP_SIZE < MAX_COUNTER


def time_window(timestamp_ms: int, step: int = TIME_STEP_SIZE) -> int:
    """floor(timestamp_ms / step)"""
    return timestamp_ms // step


def remaining_seconds(timestamp_ms: int, step: int = TIME_STEP_SIZE) -> int:
    """Whole seconds left before the window containing ``timestamp_ms`` ends."""
    return -(-(step - timestamp_ms % step) // 1000)


def format_code(code: int) -> str:
    """Zero-pad a code to CODE_DIGITS for display, e.g. 81804 -> '081804'."""
    return str(code).zfill(CODE_DIGITS)


def totp(secret: str, timestamp: int = None):
    """
    Current TOTP code for a base-32 secret.

    Arguments:
        secret: base-32 secret
        timestamp: epoch milliseconds (None -> now)

    Returns:
        (code, remaining_seconds)
        - code: zero-padded 6-digit string
        - remaining_seconds: time left in the current window

    Raises:
        InvalidSecretError: secret cannot be decoded
        ValueError: timestamp is not an integer in the counter range
    """
    if timestamp is None:
        timestamp = current_millis()
    if not is_valid_timestamp(timestamp):
        raise ValueError(f"timestamp out of range: {timestamp!r}")
    key = decode_secret(secret)
    code = calculate_code(key, time_window(timestamp))
    return format_code(code), remaining_seconds(timestamp)
