"""
errors.py — Phân loại lỗi cho pipeline HOTP.

- InvalidArgument    : tham số sai (digits, counter, secret...) — bị từ chối
                       TRƯỚC khi gọi HMAC.
- CollaboratorFailure: HMAC engine lỗi hoặc trả digest sai độ dài — fatal,
                       không retry.
"""


class HOTPError(Exception):
    """Base class for every error raised by hotp_core."""


class InvalidArgument(HOTPError, ValueError):
    """A caller-supplied argument is outside its domain."""


class CollaboratorFailure(HOTPError, RuntimeError):
    """The HMAC-SHA1 collaborator failed or broke its contract."""
