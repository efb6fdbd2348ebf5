"""
FLASK APP ENTRY POINT - KEYOTP HTTP API
=======================================

Builds the Flask app that exposes the secret store and code generation
over HTTP, with CORS enabled so a browser front end on another port can
call it.

The store and the clock are injected through `create_app`; routes read
them from `app.config`.
"""
import logging
import time
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from ..core.errors import (
    BackendUnavailable,
    DuplicateName,
    InvalidName,
    InvalidSecret,
    NotFound,
    OtpError,
    UnsupportedParameters,
)
from ..database import SecretStore, open_store

logger = logging.getLogger(__name__)

# error kind -> HTTP status
ERROR_STATUS = {
    InvalidSecret: 400,
    InvalidName: 400,
    UnsupportedParameters: 400,
    NotFound: 404,
    DuplicateName: 409,
    BackendUnavailable: 503,
}


def _handle_otp_error(error: OtpError):
    status = next((code for kind, code in ERROR_STATUS.items() if isinstance(error, kind)), 500)
    if status >= 500:
        logger.error("Request failed: %s", error)
    body = {"error": str(error)}
    if error.name is not None:
        body["name"] = error.name
    return jsonify(body), status


def create_app(store: Optional[SecretStore] = None, clock=time.time) -> Flask:
    """
    Build the Flask app.

    Arguments:
        store: secret store to serve; defaults to open_store() from the environment
        clock: callable returning the current unix time
    """
    app = Flask(__name__)
    app.config["KEYOTP_STORE"] = store if store is not None else open_store()
    app.config["KEYOTP_CLOCK"] = clock
    CORS(app)

    from .routes import otp_bp
    app.register_blueprint(otp_bp)
    app.register_error_handler(OtpError, _handle_otp_error)

    @app.route('/', methods=['GET'])
    def index():
        return jsonify({"service": "keyotp", "api": otp_bp.url_prefix})

    return app
