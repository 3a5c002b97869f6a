"""
FLASK APP ENTRY POINT - OTP BACKEND SERVER
==========================================

Builds the Flask app, enables CORS and registers the OTP API blueprint.

One Validator is created per app and kept in app.extensions["otpauth"]; all
requests share it, so its replay guard sees every accepted code.

Run locally:
    flask --app backend.app run
"""

from flask import Flask
from flask_cors import CORS

from backend.config import DEFAULTS
from backend.routes import otp_bp
from otpauth.validator import Validator


def create_app(test_config=None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(DEFAULTS)
    app.config.from_prefixed_env()
    if test_config:
        app.config.from_mapping(test_config)

    # Frontend may be served from another origin
    CORS(app)

    app.extensions["otpauth"] = Validator(max_cache_size=int(app.config["OTPAUTH_MAX_CACHE_SIZE"]))
    app.register_blueprint(otp_bp)

    app.logger.info(
        "OTP backend ready (replay cache size %s)", app.config["OTPAUTH_MAX_CACHE_SIZE"]
    )
    return app


if __name__ == "__main__":
    create_app().run(debug=True, host="127.0.0.1", port=5000)
