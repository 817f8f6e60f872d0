"""
FLASK APP MAIN ENTRY POINT - HOTP BACKEND SERVER
==================================================

File này thiết lập Flask app, cấu hình CORS, và đăng ký API routes HOTP.

CÁC TÍNH NĂNG CHÍNH
- Flask web server, cấu hình qua biến môi trường
- CORS enabled cho frontend integration
- Trang chủ trả về danh sách API endpoints

BIẾN MÔI TRƯỜNG
- HOTP_HMAC_BACKEND : hashlib (mặc định) | cryptography
- HOTP_API_HOST     : mặc định 127.0.0.1
- HOTP_API_PORT     : mặc định 5000
- HOTP_API_DEBUG    : 1/true/yes để bật debug mode
"""
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from hotp_api.routes import hotp_bp

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


def load_config() -> dict:
    """Đọc cấu hình server từ biến môi trường."""
    return {
        "HMAC_BACKEND": os.environ.get("HOTP_HMAC_BACKEND", "hashlib"),
        "HOST": os.environ.get("HOTP_API_HOST", "127.0.0.1"),
        "PORT": int(os.environ.get("HOTP_API_PORT", "5000")),
        "DEBUG": os.environ.get("HOTP_API_DEBUG", "").strip().lower() in _TRUE,
    }


def create_app(config: dict = None) -> Flask:
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    # Cho phép frontend (domain/port khác) gọi API
    CORS(app)
    app.register_blueprint(hotp_bp)

    @app.route('/', methods=['GET'])
    def index():
        """TRANG CHỦ - DANH SÁCH API ENDPOINTS"""
        return jsonify({
            "service": "hotp-rfc4226",
            "hmac_backend": app.config["HMAC_BACKEND"],
            "endpoints": {
                "POST /api/hotp": "Generate a HOTP value for a secret and counter",
                "POST /api/verify_hotp": "Verify a HOTP code with look-ahead",
            },
        })

    return app


# KHỞI CHẠY SERVER
# App chỉ được tạo khi chạy server, không tạo lúc import
def main():
    app = create_app()
    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("starting HOTP API on %s:%s", app.config["HOST"], app.config["PORT"])
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"])


if __name__ == '__main__':
    main()
