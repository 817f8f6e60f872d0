"""
hmac_engine.py — HMAC-SHA1 collaborator cho pipeline HOTP.

Module này KHÔNG tự cài đặt HMAC-SHA1; nó chỉ bọc các primitive có sẵn:
- "hashlib"      : hmac + hashlib.sha1 của thư viện chuẩn (mặc định)
- "cryptography" : cryptography.hazmat.primitives.hmac.HMAC

Mỗi lần gọi đều tạo một HMAC context mới và bỏ đi ngay sau đó, nên một engine
có thể dùng chung giữa nhiều thread mà không cần khóa.

Chọn backend bằng biến môi trường HOTP_HMAC_BACKEND, hoặc truyền tên vào
get_engine().
"""

import hashlib
import hmac
import logging
import os
from typing import Optional, Protocol

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.hmac import HMAC

from .errors import CollaboratorFailure

logger = logging.getLogger(__name__)

SHA1_DIGEST_LEN = 20        # RFC 4226: HMAC-SHA1 -> 160 bit
BACKEND_ENV = "HOTP_HMAC_BACKEND"
DEFAULT_BACKEND = "hashlib"


class HmacEngine(Protocol):
    """Anything that turns (secret, message) into a 20-byte HMAC-SHA1 tag."""

    def hmac_sha1(self, secret: bytes, message: bytes) -> bytes:
        ...


class HashlibHmacEngine:
    """HMAC-SHA1 via the standard library."""

    name = "hashlib"

    def hmac_sha1(self, secret: bytes, message: bytes) -> bytes:
        return hmac.new(secret, message, hashlib.sha1).digest()


class CryptographyHmacEngine:
    """HMAC-SHA1 via the `cryptography` package."""

    name = "cryptography"

    def hmac_sha1(self, secret: bytes, message: bytes) -> bytes:
        h = HMAC(secret, hashes.SHA1())
        h.update(message)
        return h.finalize()


ENGINES = {
    HashlibHmacEngine.name: HashlibHmacEngine,
    CryptographyHmacEngine.name: CryptographyHmacEngine,
}


def get_engine(name: Optional[str] = None) -> HmacEngine:
    """
    Trả về một HMAC engine mới theo tên backend.

    Arguments:
        name: "hashlib" hoặc "cryptography". None -> đọc HOTP_HMAC_BACKEND,
              mặc định "hashlib".

    Raises:
        CollaboratorFailure: nếu backend không được hỗ trợ
    """
    if name is None:
        name = os.environ.get(BACKEND_ENV, DEFAULT_BACKEND)
    name = name.strip().lower()
    try:
        engine_cls = ENGINES[name]
    except KeyError:
        raise CollaboratorFailure("unsupported HMAC backend %r" % name) from None
    logger.debug("using HMAC backend %r", name)
    return engine_cls()


def compute_digest(engine: HmacEngine, secret: bytes, message: bytes) -> bytes:
    """
    Gọi engine và kiểm tra hợp đồng: digest phải đúng 20 byte.

    Mọi exception từ engine được bọc thành CollaboratorFailure (giữ nguyên
    nguyên nhân qua __cause__). Không retry — retry là việc của caller.
    """
    try:
        digest = engine.hmac_sha1(secret, message)
    except Exception as e:
        raise CollaboratorFailure("HMAC-SHA1 collaborator failed: %s" % e) from e

    if not isinstance(digest, (bytes, bytearray)):
        raise CollaboratorFailure(
            "HMAC-SHA1 collaborator returned %s, expected bytes" % type(digest).__name__)
    if len(digest) != SHA1_DIGEST_LEN:
        raise CollaboratorFailure(
            "HMAC-SHA1 digest must be %d bytes, got %d" % (SHA1_DIGEST_LEN, len(digest)))
    return bytes(digest)
