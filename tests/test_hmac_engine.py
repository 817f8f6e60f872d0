import pytest

from hotp_core import (
    CollaboratorFailure,
    CryptographyHmacEngine,
    HashlibHmacEngine,
    encode_moving_factor,
    get_engine,
)
from hotp_core.hmac_engine import compute_digest

RFC_DIGEST_0 = bytes.fromhex("cc93cf18508d94934c64b65d8ba7667fb7cde4b0")


@pytest.mark.parametrize("engine", [HashlibHmacEngine(), CryptographyHmacEngine()])
def test_engines_produce_rfc_digest(engine, rfc_secret):
    assert engine.hmac_sha1(rfc_secret, encode_moving_factor(0)) == RFC_DIGEST_0


def test_get_engine_by_name():
    assert isinstance(get_engine("hashlib"), HashlibHmacEngine)
    assert isinstance(get_engine(" Cryptography "), CryptographyHmacEngine)


def test_get_engine_from_environment(monkeypatch):
    monkeypatch.setenv("HOTP_HMAC_BACKEND", "cryptography")
    assert isinstance(get_engine(), CryptographyHmacEngine)
    monkeypatch.delenv("HOTP_HMAC_BACKEND")
    assert isinstance(get_engine(), HashlibHmacEngine)


def test_get_engine_unknown_backend():
    with pytest.raises(CollaboratorFailure):
        get_engine("md5")


def test_get_engine_returns_fresh_instance():
    assert get_engine("hashlib") is not get_engine("hashlib")


class _Broken:
    def hmac_sha1(self, secret, message):
        raise ValueError("boom")


class _Short:
    def hmac_sha1(self, secret, message):
        return b"\x00" * 19


class _NotBytes:
    def hmac_sha1(self, secret, message):
        return "x" * 20


def test_compute_digest_wraps_engine_errors():
    with pytest.raises(CollaboratorFailure) as excinfo:
        compute_digest(_Broken(), b"k", b"\x00" * 8)
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.parametrize("engine", [_Short(), _NotBytes()])
def test_compute_digest_checks_contract(engine):
    with pytest.raises(CollaboratorFailure):
        compute_digest(engine, b"k", b"\x00" * 8)
