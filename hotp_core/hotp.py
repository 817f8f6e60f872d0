#!/usr/bin/env python3
"""
hotp.py — Core library cho HOTP (RFC 4226), có checksum digit kiểu Luhn.

Pipeline (mỗi lần sinh mã):
    counter --encode--> 8 byte big-endian
            --HMAC-SHA1(secret)--> digest 20 byte
            --dynamic truncate--> số 31-bit
            --mod 10^digits (+ checksum)--> OTP

Mục tiêu:
- Chỉ chứa hàm thuần, không giữ state giữa các lần gọi.
- HMAC engine được truyền vào (hoặc tạo mới mỗi lần gọi), không có context
  crypto dùng chung toàn cục -> an toàn khi gọi song song.
- Không chứa argparse / Flask — xem hotp_cli.py và package hotp_api.

Lưu ý bảo mật:
- Secret KHÔNG bao giờ được ghi ra log.
- Mỗi counter chỉ nên dùng một lần cho mỗi secret; việc này do caller quản lý.
"""

from typing import Optional, Tuple, Union
import hmac
import logging
import struct

from .errors import InvalidArgument
from .hmac_engine import HmacEngine, compute_digest, get_engine

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6              # chuẩn: 6 chữ số
DEFAULT_TRUNCATION_OFFSET = -1  # ngoài 0..15 -> dynamic truncation
DEFAULT_LOOK_AHEAD = 1          # cửa sổ resync khi verify
MAX_LOOK_AHEAD = 100            # giới hạn số HMAC cho mỗi lần verify
MOVING_FACTOR_BYTES = 8
MAX_MOVING_FACTOR = 2 ** 64 - 1

#               0  1   2    3     4      5       6        7         8
DIGITS_POWER = (1, 10, 100, 1000, 10000, 100000, 1000000, 10000000, 100000000)
MAX_CODE_DIGITS = len(DIGITS_POWER) - 1

# digit -> 2*digit, trừ 9 nếu > 9
DOUBLE_DIGITS = (0, 2, 4, 6, 8, 1, 3, 5, 7, 9)

SecretType = Union[bytes, bytearray, str]


# --- Validation ------------------------------------------------------------
def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_code_digits(code_digits: int) -> None:
    if not _is_int(code_digits) or not 0 <= code_digits <= MAX_CODE_DIGITS:
        raise InvalidArgument(
            "code_digits must be an integer in 0..%d, got %r" % (MAX_CODE_DIGITS, code_digits))


def _check_moving_factor(counter: int) -> None:
    if not _is_int(counter) or not 0 <= counter <= MAX_MOVING_FACTOR:
        raise InvalidArgument(
            "moving factor must be an unsigned 64-bit integer, got %r" % (counter,))


def _secret_bytes(secret: SecretType) -> bytes:
    """str được encode UTF-8; bytes/bytearray giữ nguyên."""
    if isinstance(secret, str):
        return secret.encode("utf-8")
    if isinstance(secret, (bytes, bytearray)):
        return bytes(secret)
    raise InvalidArgument("secret must be bytes or str, got %s" % type(secret).__name__)


# --- RFC helpers -----------------------------------------------------------
def encode_moving_factor(counter: int) -> bytes:
    """
    Chuyển counter (moving factor) sang 8-byte big-endian như RFC4226 yêu cầu.

    Ví dụ: encode_moving_factor(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        InvalidArgument: nếu counter không phải số nguyên không âm 64-bit
    """
    _check_moving_factor(counter)
    return struct.pack(">Q", counter)


def decode_moving_factor(data: bytes) -> int:
    """Inverse of encode_moving_factor."""
    if not isinstance(data, (bytes, bytearray)) or len(data) != MOVING_FACTOR_BYTES:
        raise InvalidArgument("encoded moving factor must be exactly 8 bytes")
    return struct.unpack(">Q", bytes(data))[0]


def dynamic_truncate(digest: bytes, truncation_offset: int = DEFAULT_TRUNCATION_OFFSET) -> int:
    """
    Áp dụng dynamic truncation theo RFC4226 §5.3.

    - Mặc định offset = last_byte & 0x0F
    - Nếu 0 <= truncation_offset < len(digest) - 4 thì dùng truncation_offset
    - Lấy 4 bytes từ offset, clear MSB (0x7F) cho byte đầu
    - Trả về integer 31-bit (0..0x7FFFFFFF)

    Arguments:
        digest: digest của HMAC (SHA1 -> 20 bytes)
        truncation_offset: offset cố định; ngoài khoảng hợp lệ -> dynamic
    """
    offset = digest[-1] & 0x0F
    if 0 <= truncation_offset < len(digest) - 4:
        offset = truncation_offset
    # compose 31-bit integer theo RFC (clear sign bit)
    code = (
        ((digest[offset] & 0x7F) << 24)
        | ((digest[offset + 1] & 0xFF) << 16)
        | ((digest[offset + 2] & 0xFF) << 8)
        | (digest[offset + 3] & 0xFF)
    )
    return code


# --- Reduction / checksum --------------------------------------------------
def calc_checksum(num: int, digits: int) -> int:
    """
    Tính checksum digit theo thuật toán thẻ tín dụng (Luhn).

    Duyệt `digits` chữ số của num từ hàng đơn vị trở lên; chữ số ở vị trí
    "double" được thay qua bảng DOUBLE_DIGITS, rồi cộng dồn.

    Trả về:
        int 0..9 — chữ số cần nối vào sau num để num*10+checksum qua Luhn
    """
    double_digit = True
    total = 0
    for _ in range(digits):
        digit = num % 10
        num //= 10
        if double_digit:
            digit = DOUBLE_DIGITS[digit]
        total += digit
        double_digit = not double_digit
    result = total % 10
    if result > 0:
        result = 10 - result
    return result


def luhn_valid(number: int) -> bool:
    """Standard Luhn check; the rightmost digit is the check digit."""
    if not _is_int(number) or number < 0:
        return False
    total = 0
    double_digit = False
    while True:
        digit = number % 10
        number //= 10
        total += DOUBLE_DIGITS[digit] if double_digit else digit
        double_digit = not double_digit
        if number == 0:
            break
    return total % 10 == 0


def reduce_otp(truncated: int, code_digits: int, add_checksum: bool = False) -> int:
    """
    otp = truncated mod 10^code_digits, nối thêm checksum digit nếu cần.

    Raises:
        InvalidArgument: nếu code_digits ngoài 0..8
    """
    _check_code_digits(code_digits)
    otp = truncated % DIGITS_POWER[code_digits]
    if add_checksum:
        return otp * 10 + calc_checksum(otp, code_digits)
    return otp


def format_otp(value: int, code_digits: int = DEFAULT_DIGITS, add_checksum: bool = False) -> str:
    """
    Zero-pad OTP để hiển thị: code_digits chữ số (+1 nếu có checksum).

    Ví dụ: format_otp(5, 6) -> "000005"
    """
    _check_code_digits(code_digits)
    width = code_digits + 1 if add_checksum else code_digits
    return str(value).zfill(width)


# --- Pipeline --------------------------------------------------------------
def generate_hotp(
    secret: SecretType,
    moving_factor: int,
    code_digits: int = DEFAULT_DIGITS,
    add_checksum: bool = False,
    truncation_offset: int = DEFAULT_TRUNCATION_OFFSET,
    engine: Optional[HmacEngine] = None,
) -> int:
    """
    Sinh giá trị HOTP theo RFC4226.

    Steps:
    1. Kiểm tra tham số (trước khi gọi HMAC)
    2. Message = 8-byte counter (big-endian)
    3. HMAC-SHA1(secret, message) qua engine
    4. Dynamic truncate -> số 31-bit
    5. otp = số đó % 10^code_digits, + checksum digit nếu add_checksum

    Arguments:
        secret: shared secret (bytes, hoặc str -> UTF-8)
        moving_factor: counter 0..2^64-1
        code_digits: số chữ số OTP, không tính checksum (0..8)
        add_checksum: nối checksum digit vào cuối
        truncation_offset: 0..15 -> offset cố định; khác -> dynamic truncation
        engine: HMAC collaborator; None -> get_engine() mới cho lần gọi này

    Trả về:
        int: giá trị HOTP (caller tự zero-pad, xem format_otp)

    Raises:
        InvalidArgument: tham số sai
        CollaboratorFailure: HMAC engine lỗi
    """
    _check_code_digits(code_digits)
    if not _is_int(truncation_offset):
        raise InvalidArgument("truncation_offset must be an integer, got %r" % (truncation_offset,))
    key = _secret_bytes(secret)
    counter = encode_moving_factor(moving_factor)
    logger.debug("HOTP: counter=%d encoded=%s", moving_factor, counter.hex())

    if engine is None:
        engine = get_engine()
    digest = compute_digest(engine, key, counter)
    logger.debug("HOTP: HMAC-SHA1 digest=%s", digest.hex())

    snum = dynamic_truncate(digest, truncation_offset)
    hotp = reduce_otp(snum, code_digits, add_checksum)
    logger.debug("HOTP: truncated=%d -> hotp=%d", snum, hotp)
    return hotp


# --- OTP verification helpers ---------------------------------------------
def verify_hotp(
    secret: SecretType,
    code: str,
    counter: int,
    code_digits: int = DEFAULT_DIGITS,
    add_checksum: bool = False,
    truncation_offset: int = DEFAULT_TRUNCATION_OFFSET,
    look_ahead: int = DEFAULT_LOOK_AHEAD,
    engine: Optional[HmacEngine] = None,
) -> Tuple[bool, int]:
    """
    Xác minh mã HOTP do user nhập, với cửa sổ look-ahead (RFC4226 §7.4).

    Thử lần lượt counter .. counter+look_ahead. Không lưu lại mã đã dùng;
    caller phải lưu counter mới trả về để chặn replay.

    Trả về:
        (True, counter_khớp + 1) nếu hợp lệ, ngược lại (False, counter)
    """
    if not _is_int(look_ahead) or not 0 <= look_ahead <= MAX_LOOK_AHEAD:
        raise InvalidArgument(
            "look_ahead must be an integer in 0..%d, got %r" % (MAX_LOOK_AHEAD, look_ahead))
    _check_moving_factor(counter)
    if engine is None:
        engine = get_engine()

    code = str(code).strip()
    last = min(counter + look_ahead, MAX_MOVING_FACTOR)
    for candidate in range(counter, last + 1):
        value = generate_hotp(secret, candidate, code_digits, add_checksum,
                              truncation_offset, engine=engine)
        expected = format_otp(value, code_digits, add_checksum)
        if hmac.compare_digest(expected.encode("ascii"), code.encode("utf-8")):
            logger.debug("HOTP verify: matched at counter=%d", candidate)
            return True, candidate + 1
    logger.debug("HOTP verify: no match in counter window %d..%d", counter, last)
    return False, counter
