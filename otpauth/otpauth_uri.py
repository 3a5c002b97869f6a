"""
otpauth_uri.py — Enrollment URIs for authenticator apps.

- get_otp_auth_url():    otpauth://totp/<name>?secret=<secret>
- get_otp_qr_code_url(): hosted QR image of that URI (api.qrserver.com)

The URI contains the secret, so it must only be shown to the enrolling user.
"""

from urllib.parse import quote, urlencode

OTP_AUTH_URL = "otpauth://totp/{name}?secret={secret}"
QR_SERVER_URL = "https://api.qrserver.com/v1/create-qr-code/"
QR_SERVER_PARAMS = {"size": "200x200", "ecc": "M", "margin": "0"}


def get_otp_auth_url(name: str, secret: str) -> str:
    """
    Build the otpauth:// URI for ``name`` and ``secret``.

    The label is percent-encoded, keeping ':' and '@' so labels like
    "Issuer:alice@example.com" stay readable in the app.

    Raises:
        ValueError: empty name or secret
    """
    if not name:
        raise ValueError("name can't be empty")
    if not secret:
        raise ValueError("secret can't be empty")
    return OTP_AUTH_URL.format(name=quote(name, safe=":@"), secret=quote(secret, safe=""))


def get_otp_qr_code_url(name: str, secret: str) -> str:
    """URL of a hosted QR image encoding the otpauth URI."""
    params = {"data": get_otp_auth_url(name, secret)}
    params.update(QR_SERVER_PARAMS)
    return QR_SERVER_URL + "?" + urlencode(params)
