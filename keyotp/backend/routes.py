"""
KEYOTP API ROUTES - FLASK BLUEPRINT

All endpoints live under /api/v1. Secrets are write-only over HTTP: no
endpoint ever returns the Base32 text once it is stored.

EXAMPLES:
curl -X POST http://localhost:5000/api/v1/secrets -H "Content-Type: application/json" \
     -d '{"name": "github", "secret": "JBSWY3DPEHPK3PXP"}'
curl http://localhost:5000/api/v1/codes
"""

import base64
import io
import logging

from flask import Blueprint, current_app, jsonify, request

from .. import config
from ..core import otp_core
from ..core.generation import GenerationOrchestrator, GenerationResult

logger = logging.getLogger(__name__)

otp_bp = Blueprint('otp', __name__, url_prefix='/api/v1')


def _store():
    return current_app.config["KEYOTP_STORE"]


def _clock():
    return current_app.config["KEYOTP_CLOCK"]


def _result_json(result: GenerationResult) -> dict:
    return {
        "name": result.name,
        "code": result.code,
        "remaining": result.seconds_remaining,
        "error": None if result.ok else str(result.error),
    }


@otp_bp.route('/secrets', methods=['POST'])
def add_secret():
    """
    REGISTER A SECRET

    Body: {"name": "github", "secret": "JBSWY3DPEHPK3PXP", "digits": 6, "period": 30}
    digits and period are optional.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "name" not in data or "secret" not in data:
        return jsonify({"error": "name and secret are required"}), 400

    entry = _store().add(
        data["name"],
        data["secret"],
        digits=data.get("digits", config.DEFAULT_DIGITS),
        period=data.get("period", config.DEFAULT_TIME_STEP),
    )
    return jsonify(entry.metadata()), 201


@otp_bp.route('/secrets', methods=['GET'])
def list_secrets():
    return jsonify([entry.metadata() for entry in _store().list()])


@otp_bp.route('/secrets/<string:name>', methods=['GET'])
def get_secret(name):
    return jsonify(_store().get(name).metadata())


@otp_bp.route('/secrets/<string:name>', methods=['DELETE'])
def delete_secret(name):
    _store().remove(name)
    return '', 204


@otp_bp.route('/codes', methods=['GET'])
def get_codes():
    """
    CURRENT CODES FOR EVERY SECRET

    Entries whose secret cannot be decoded come back with "code": null and
    an "error" message; the others are unaffected.
    """
    results = GenerationOrchestrator(_store()).generate_all(clock=_clock())
    return jsonify([_result_json(r) for r in results])


@otp_bp.route('/codes/<string:name>', methods=['GET'])
def get_code(name):
    result = GenerationOrchestrator(_store()).generate_one(name, clock=_clock())
    if not result.ok:
        raise result.error
    return jsonify(_result_json(result))


@otp_bp.route('/secrets/<string:name>/uri', methods=['GET'])
def get_otpauth_uri(name):
    """
    otpauth URI for authenticator apps.

      curl "http://localhost:5000/api/v1/secrets/github/uri?issuer=GitHub"
    """
    issuer = request.args.get('issuer')
    uri = otp_core.format_otpauth_uri(_store().get(name), issuer=issuer)
    return jsonify({"name": name, "uri": uri})


@otp_bp.route('/secrets/<string:name>/qr', methods=['GET'])
def get_qr_code(name):
    """QR code image (PNG data URI) of the otpauth URI."""
    import qrcode

    issuer = request.args.get('issuer')
    uri = otp_core.format_otpauth_uri(_store().get(name), issuer=issuer)

    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    img_str = base64.b64encode(buffer.getvalue()).decode()
    return jsonify({"name": name, "qr_code": f"data:image/png;base64,{img_str}"})
