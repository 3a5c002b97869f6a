"""
validator.py — Verify submitted TOTP codes with replay protection.

Flow for one call:
    decode secret -> time window -> expected code -> compare -> replay guard

A wrong credential is an expected, frequent case, so bad secrets and bad codes
come back as ValidationOutcome.FAILED rather than as exceptions. Only an
unusable HMAC primitive (OtpAlgorithmError) escapes, and the constructor
checks for that up front.
"""

import enum
import hashlib
import hmac
import logging
from typing import Callable, Iterable, Optional, Union

from otpauth.errors import InvalidSecretError
from otpauth.otp_core import (
    KEY_MODULUS,
    TIME_STEP_SIZE,
    calculate_code,
    current_millis,
    decode_secret,
    ensure_algorithm_available,
    format_code,
    is_valid_timestamp,
)
from otpauth.replay_guard import DEFAULT_MAX_CACHE_SIZE, ReplayGuard

logger = logging.getLogger(__name__)


class ValidationOutcome(enum.Enum):
    """Result of validate_code.

    DUPLICATE means the code itself was correct but was already accepted for
    this window; callers must not treat it like FAILED.
    """

    SUCCESS = "Success"
    FAILED = "Failed"
    DUPLICATE = "Duplicate"


def _parse_code(code: Union[int, str]) -> Optional[int]:
    """Submitted code -> int in [1, KEY_MODULUS), or None."""
    if isinstance(code, bool):
        return None
    if isinstance(code, str):
        code = code.strip()
        if not code.isdigit() or not code.isascii():
            return None
        code = int(code)
    if not isinstance(code, int):
        return None
    if code <= 0 or code >= KEY_MODULUS:
        return None
    return code


def secret_fingerprint(key: bytes) -> str:
    """Replay-guard key for a secret; the guard never sees the key itself."""
    return hashlib.sha256(key).hexdigest()


class Validator:
    """Validate TOTP codes against a shared ReplayGuard.

    One instance is meant to live as long as the process (or the service that
    owns it); every request must go through the same guard for replay
    protection to hold.

    Arguments:
        guard: replay guard to use; a new one with ``max_cache_size`` is
            created when omitted
        max_cache_size: capacity of the created guard
        calculator: (key bytes, window) -> code; HMAC-SHA1 by default
        clock: () -> epoch milliseconds, used when no timestamp is given

    Raises:
        OtpAlgorithmError: the default calculator cannot run here
    """

    def __init__(
        self,
        guard: Optional[ReplayGuard] = None,
        max_cache_size: int = DEFAULT_MAX_CACHE_SIZE,
        calculator: Callable[[bytes, int], int] = calculate_code,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        if calculator is calculate_code:
            ensure_algorithm_available()
        self.guard = guard if guard is not None else ReplayGuard(max_cache_size)
        self._calculate = calculator
        self._clock = clock

    def set_max_cache_size(self, size: int) -> None:
        self.guard.set_capacity(size)

    def candidate_windows(self, window: int) -> Iterable[int]:
        """Windows a code may belong to. Only the current one; override to
        accept neighbouring windows for clock skew."""
        return (window,)

    def validate_code(
        self,
        secret: str,
        code: Union[int, str],
        timestamp: Optional[int] = None,
    ) -> ValidationOutcome:
        """
        Check ``code`` for ``secret`` at ``timestamp`` (epoch ms, default now).

        Returns:
            ValidationOutcome.SUCCESS   -> correct and first use in this window
            ValidationOutcome.DUPLICATE -> correct but already accepted
            ValidationOutcome.FAILED    -> bad secret, bad code or wrong code
        """
        if not secret:
            logger.warning("Rejected validation: empty secret")
            return ValidationOutcome.FAILED

        submitted = _parse_code(code)
        if submitted is None:
            logger.debug("Rejected validation: code out of range")
            return ValidationOutcome.FAILED

        try:
            key = decode_secret(secret)
        except InvalidSecretError as e:
            logger.warning("Rejected validation: %s", e)
            return ValidationOutcome.FAILED

        if timestamp is None:
            timestamp = self._clock()
        if not is_valid_timestamp(timestamp):
            logger.debug("Rejected validation: timestamp out of range")
            return ValidationOutcome.FAILED
        current = timestamp // TIME_STEP_SIZE

        matched = None
        for window in self.candidate_windows(current):
            expected = self._calculate(key, window)
            if hmac.compare_digest(format_code(expected), format_code(submitted)):
                matched = window
                break

        if matched is None:
            logger.debug("Validation failed for window %d", current)
            return ValidationOutcome.FAILED

        if not self.guard.check_and_record(secret_fingerprint(key), matched):
            logger.info("Replayed code rejected for window %d", matched)
            return ValidationOutcome.DUPLICATE

        logger.debug("Validation succeeded for window %d", matched)
        return ValidationOutcome.SUCCESS
