"""
OTP BACKEND API ROUTES - FLASK BLUEPRINT
========================================

Endpoints (all JSON, prefix /api):
- POST /api/secret       {name?}                    -> new secret + otpauth URI
- POST /api/otpauth_uri  {name, secret}             -> otpauth URI + hosted QR URL
- POST /api/qr_code      {name, secret}             -> PNG QR code as data: URL
- POST /api/validate     {secret, code, timestamp?} -> Success / Failed / Duplicate

Secrets are not persisted here; the caller stores them.

Example:
curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d '{"name": "alice@example.com"}'
"""

from flask import Blueprint, current_app, jsonify, request

from otpauth.errors import InvalidSecretError
from otpauth.otp_core import create_secret, decode_secret, is_valid_timestamp
from otpauth.otpauth_uri import get_otp_auth_url, get_otp_qr_code_url
from otpauth.qr_code import qr_code_data_url

otp_bp = Blueprint("otp", __name__, url_prefix="/api")


def _label(name: str) -> str:
    """'alice' -> 'Issuer:alice' using OTPAUTH_ISSUER."""
    issuer = current_app.config.get("OTPAUTH_ISSUER")
    return f"{issuer}:{name}" if issuer else name


def _require(data, *fields):
    """Return the missing field names of a JSON body."""
    if not isinstance(data, dict):
        return list(fields)
    return [f for f in fields if data.get(f) in (None, "")]


@otp_bp.errorhandler(InvalidSecretError)
def invalid_secret(e):
    return jsonify({"error": str(e)}), 400


@otp_bp.route("/secret", methods=["POST"])
def new_secret():
    """
    CREATE A SECRET

      curl -X POST http://localhost:5000/api/secret -H "Content-Type: application/json" -d '{"name": "alice"}'
    """
    data = request.get_json(silent=True) or {}
    name = data.get("name") or "user"

    secret = create_secret()
    current_app.logger.info("Created secret for a new enrollment")
    return jsonify({
        "secret": secret,
        "otp_uri": get_otp_auth_url(_label(name), secret),
    }), 201


@otp_bp.route("/otpauth_uri", methods=["POST"])
def otpauth_uri():
    data = request.get_json(silent=True)
    missing = _require(data, "name", "secret")
    if missing:
        return jsonify({"error": f"Missing field(s): {', '.join(missing)}"}), 400

    decode_secret(data["secret"])
    label = _label(data["name"])
    return jsonify({
        "otp_uri": get_otp_auth_url(label, data["secret"]),
        "qr_code_url": get_otp_qr_code_url(label, data["secret"]),
    })


@otp_bp.route("/qr_code", methods=["POST"])
def qr_code():
    """
    QR CODE IMAGE (base64 PNG)

    Body: {"name": "alice", "secret": "GEZDGNBV..."}
    """
    data = request.get_json(silent=True)
    missing = _require(data, "name", "secret")
    if missing:
        return jsonify({"error": f"Missing field(s): {', '.join(missing)}"}), 400

    decode_secret(data["secret"])
    uri = get_otp_auth_url(_label(data["name"]), data["secret"])
    return jsonify({
        "qr_code": qr_code_data_url(
            uri,
            current_app.config["OTPAUTH_QR_WIDTH"],
            current_app.config["OTPAUTH_QR_HEIGHT"],
        ),
    })


@otp_bp.route("/validate", methods=["POST"])
def validate():
    """
    VALIDATE A CODE

    Body: {"secret": "GEZDGNBV...", "code": "287082", "timestamp": 59000}
    timestamp (epoch ms) is optional and defaults to now.

    A malformed secret is a 400; a wrong code is a normal 200 with "Failed".
    """
    data = request.get_json(silent=True)
    missing = _require(data, "secret", "code")
    if missing:
        return jsonify({"error": f"Missing field(s): {', '.join(missing)}"}), 400

    timestamp = data.get("timestamp")
    if timestamp is not None and not is_valid_timestamp(timestamp):
        return jsonify({"error": "timestamp must be a non-negative integer (epoch ms) in range"}), 400

    decode_secret(data["secret"])
    validator = current_app.extensions["otpauth"]
    result = validator.validate_code(data["secret"], data["code"], timestamp)
    return jsonify({"result": result.value})
