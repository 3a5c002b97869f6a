import pytest

from backend.app import create_app
from otpauth.validator import Validator

# RFC 4226 / RFC 6238 test key "12345678901234567890"
RFC_KEY = b"12345678901234567890"
RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def rfc_secret():
    return RFC_SECRET


@pytest.fixture
def validator():
    return Validator(max_cache_size=10)


@pytest.fixture
def app():
    return create_app({"TESTING": True, "OTPAUTH_MAX_CACHE_SIZE": 10})


@pytest.fixture
def client(app):
    return app.test_client()
