"""
hotp_core package
=================

Sinh và xác minh HOTP theo chuẩn RFC 4226, kèm checksum digit kiểu Luhn.

──────────────────────────────────────────────
Giải thuật cốt lõi
──────────────────────────────────────────────
- Moving factor: counter 64-bit -> 8 byte big-endian.
- HMAC-SHA1(key=secret, msg=counter) -> digest 20 byte
  (engine: hashlib hoặc cryptography, chọn qua HOTP_HMAC_BACKEND).
- Dynamic Truncation: offset = last byte & 0x0F (hoặc truncation_offset 0..15),
  lấy 4 byte, clear bit cao nhất -> số 31-bit.
- otp = số đó mod 10^digits (digits 0..8), + checksum digit nếu cần.

──────────────────────────────────────────────
Ví dụ sử dụng nhanh
──────────────────────────────────────────────
>>> from hotp_core import generate_hotp, format_otp
>>> generate_hotp(b"12345678901234567890", 0)
755224
>>> format_otp(generate_hotp(b"12345678901234567890", 0, add_checksum=True), add_checksum=True)
'7552243'
"""

from .errors import CollaboratorFailure, HOTPError, InvalidArgument
from .hmac_engine import (
    CryptographyHmacEngine,
    HashlibHmacEngine,
    HmacEngine,
    get_engine,
)
from .hotp import (
    DEFAULT_DIGITS,
    DEFAULT_LOOK_AHEAD,
    DEFAULT_TRUNCATION_OFFSET,
    MAX_LOOK_AHEAD,
    calc_checksum,
    decode_moving_factor,
    dynamic_truncate,
    encode_moving_factor,
    format_otp,
    generate_hotp,
    luhn_valid,
    reduce_otp,
    verify_hotp,
)

__all__ = [
    "CollaboratorFailure",
    "CryptographyHmacEngine",
    "DEFAULT_DIGITS",
    "DEFAULT_LOOK_AHEAD",
    "DEFAULT_TRUNCATION_OFFSET",
    "HOTPError",
    "HashlibHmacEngine",
    "HmacEngine",
    "InvalidArgument",
    "MAX_LOOK_AHEAD",
    "calc_checksum",
    "decode_moving_factor",
    "dynamic_truncate",
    "encode_moving_factor",
    "format_otp",
    "generate_hotp",
    "get_engine",
    "luhn_valid",
    "reduce_otp",
    "verify_hotp",
]
