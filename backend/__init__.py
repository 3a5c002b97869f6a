"""
Backend package: Flask HTTP API over the otpauth core.
"""

from .app import create_app

__all__ = ["create_app"]
