"""Exception types raised by the otpauth package."""


class OtpAuthError(Exception):
    """Base class for otpauth errors."""


class InvalidSecretError(OtpAuthError, ValueError):
    """The shared secret is empty, not base-32, or has the wrong length."""


class OtpAlgorithmError(OtpAuthError, RuntimeError):
    """The keyed-hash primitive is unavailable or rejected the key material.

    Raised instead of returning a placeholder code, so a failure can never
    compare equal to a code submitted by a user.
    """
