"""
HOTP BACKEND API ROUTES - FLASK BLUEPRINT

Đây là file chứa các API endpoints cho HOTP (RFC 4226).
Server không lưu secret: mỗi request tự gửi secret + counter, server chỉ tính toán.

VÍ DỤ:
curl -X POST http://localhost:5000/api/hotp -H "Content-Type: application/json" \
     -d '{"secret": "12345678901234567890", "counter": 0}'
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from hotp_core import (
    DEFAULT_DIGITS,
    DEFAULT_LOOK_AHEAD,
    DEFAULT_TRUNCATION_OFFSET,
    CollaboratorFailure,
    InvalidArgument,
    format_otp,
    generate_hotp,
    get_engine,
    verify_hotp,
)

logger = logging.getLogger(__name__)

hotp_bp = Blueprint('hotp', __name__, url_prefix='/api')


def _secret_from(data: dict) -> bytes:
    """Lấy secret từ JSON body: "secret" (text UTF-8) hoặc "secret_hex"."""
    if "secret_hex" in data:
        try:
            return bytes.fromhex(data["secret_hex"])
        except (TypeError, ValueError) as e:
            raise InvalidArgument("Invalid hex secret") from e
    secret = data["secret"]
    if not isinstance(secret, str):
        raise InvalidArgument("secret must be a string")
    return secret.encode("utf-8")


def _checksum_from(data: dict) -> bool:
    """Giá trị "checksum" phải là JSON boolean (chuỗi "false" bị từ chối)."""
    checksum = data.get('checksum', False)
    if not isinstance(checksum, bool):
        raise InvalidArgument("checksum must be a JSON boolean")
    return checksum


def _engine():
    return get_engine(current_app.config.get("HMAC_BACKEND"))


@hotp_bp.errorhandler(InvalidArgument)
def handle_invalid_argument(e):
    return jsonify({"error": str(e), "success": False}), 400


@hotp_bp.errorhandler(CollaboratorFailure)
def handle_collaborator_failure(e):
    logger.exception("HMAC collaborator failed")
    return jsonify({"error": str(e), "success": False}), 500


@hotp_bp.route('/hotp', methods=['POST'])
def generate_hotp_route():
    """
    SINH MÃ HOTP (HMAC-based OTP)

      curl -X POST http://localhost:5000/api/hotp -H "Content-Type: application/json" \
           -d '{"secret": "12345678901234567890", "counter": 1, "digits": 6}'

    Input (JSON body):
      {
        "secret": "...",            # BẮT BUỘC (hoặc "secret_hex")
        "counter": 1,               # BẮT BUỘC - moving factor
        "digits": 6,                # Số chữ số (0..8)
        "checksum": false,          # Nối checksum digit
        "truncation_offset": -1     # 0..15 cố định, khác -> dynamic
      }

    Output:
      {"otp": 287082, "code": "287082", "success": true}
    """
    data = request.get_json(silent=True)
    if (not isinstance(data, dict) or "counter" not in data
            or not ("secret" in data or "secret_hex" in data)):
        return jsonify({"error": "Secret and counter are required", "success": False}), 400

    secret = _secret_from(data)
    digits = data.get('digits', DEFAULT_DIGITS)
    checksum = _checksum_from(data)
    offset = data.get('truncation_offset', DEFAULT_TRUNCATION_OFFSET)

    otp = generate_hotp(secret, data["counter"], digits, checksum, offset, engine=_engine())
    logger.info("generated HOTP for counter=%s digits=%s", data["counter"], digits)
    return jsonify({
        "otp": otp,
        "code": format_otp(otp, digits, checksum),
        "success": True,
    })


@hotp_bp.route('/verify_hotp', methods=['POST'])
def verify_hotp_route():
    """
    XÁC MINH MÃ HOTP

      curl -X POST http://localhost:5000/api/verify_hotp -H "Content-Type: application/json" \
           -d '{"secret": "12345678901234567890", "code": "287082", "counter": 0}'

    Input :
      {
        "secret": "...",      # BẮT BUỘC (hoặc "secret_hex")
        "code": "287082",     # BẮT BUỘC - mã OTP cần xác minh
        "counter": 0,         # BẮT BUỘC - counter hiện tại
        "digits": 6,
        "checksum": false,
        "truncation_offset": -1,
        "look_ahead": 1       # Cho phép counter vượt trước
      }

    Output:
      {"valid": true, "new_counter": 2}   # Nếu thành công
      {"valid": false, "new_counter": 0}  # Nếu thất bại

    new_counter là counter tiếp theo nên dùng — caller tự lưu lại.
    """
    data = request.get_json(silent=True)
    if (not isinstance(data, dict) or "code" not in data or "counter" not in data
            or not ("secret" in data or "secret_hex" in data)):
        return jsonify({"error": "Secret, code and counter are required", "success": False}), 400

    secret = _secret_from(data)
    valid, new_counter = verify_hotp(
        secret,
        str(data["code"]),
        data["counter"],
        code_digits=data.get('digits', DEFAULT_DIGITS),
        add_checksum=_checksum_from(data),
        truncation_offset=data.get('truncation_offset', DEFAULT_TRUNCATION_OFFSET),
        look_ahead=data.get('look_ahead', DEFAULT_LOOK_AHEAD),
        engine=_engine(),
    )
    logger.info("HOTP verify counter=%s valid=%s", data["counter"], valid)
    return jsonify({"valid": valid, "new_counter": new_counter})
