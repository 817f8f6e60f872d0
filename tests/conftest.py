import pytest

from hotp_core import HashlibHmacEngine

RFC4226_SECRET = b"12345678901234567890"

# RFC 4226 Appendix D: (truncated decimal, 6-digit HOTP) for counters 0..9
RFC4226_VECTORS = [
    (1284755224, 755224),
    (1094287082, 287082),
    (137359152, 359152),
    (1726969429, 969429),
    (1640338314, 338314),
    (868254676, 254676),
    (1918287922, 287922),
    (82162583, 162583),
    (673399871, 399871),
    (645520489, 520489),
]


class RecordingEngine(HashlibHmacEngine):
    """Delegates to hashlib and remembers every call."""

    def __init__(self):
        self.calls = []

    def hmac_sha1(self, secret, message):
        self.calls.append((secret, message))
        return super().hmac_sha1(secret, message)


@pytest.fixture
def rfc_vectors():
    return list(RFC4226_VECTORS)


@pytest.fixture
def rfc_secret():
    return RFC4226_SECRET


@pytest.fixture
def recording_engine():
    return RecordingEngine()
