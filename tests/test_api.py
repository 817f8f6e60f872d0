import importlib

import pytest

from hotp_api import create_app

SECRET = "12345678901234567890"


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "HMAC_BACKEND": "hashlib"})
    return app.test_client()


def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "POST /api/hotp" in resp.get_json()["endpoints"]


def test_generate(client):
    resp = client.post("/api/hotp", json={"secret": SECRET, "counter": 1})
    assert resp.status_code == 200
    assert resp.get_json() == {"otp": 287082, "code": "287082", "success": True}


def test_generate_hex_secret_with_checksum(client):
    resp = client.post("/api/hotp", json={
        "secret_hex": SECRET.encode().hex(),
        "counter": 0,
        "checksum": True,
    })
    assert resp.get_json()["code"] == "7552243"


def test_generate_fixed_offset_and_digits(client):
    resp = client.post("/api/hotp", json={
        "secret": SECRET, "counter": 0, "digits": 8, "truncation_offset": 1,
    })
    assert resp.get_json()["otp"] == 0x13CF1850 % 10 ** 8


@pytest.mark.parametrize("body", [
    {},
    {"secret": SECRET},
    {"counter": 1},
    ["counter", "secret"],
    "counter secret",
    42,
])
def test_generate_missing_fields(client, body):
    resp = client.post("/api/hotp", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


@pytest.mark.parametrize("body", [
    {"secret": SECRET, "counter": 0, "digits": 9},
    {"secret": SECRET, "counter": -5},
    {"secret": SECRET, "counter": "1"},
    {"secret": 42, "counter": 0},
    {"secret_hex": "xyz", "counter": 0},
])
def test_generate_invalid_arguments(client, body):
    resp = client.post("/api/hotp", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_generate_unknown_backend():
    client = create_app({"TESTING": True, "HMAC_BACKEND": "md5"}).test_client()
    resp = client.post("/api/hotp", json={"secret": SECRET, "counter": 0})
    assert resp.status_code == 500
    assert resp.get_json()["success"] is False


def test_generate_cryptography_backend():
    client = create_app({"TESTING": True, "HMAC_BACKEND": "cryptography"}).test_client()
    resp = client.post("/api/hotp", json={"secret": SECRET, "counter": 9})
    assert resp.get_json()["otp"] == 520489


def test_verify(client):
    resp = client.post("/api/verify_hotp", json={"secret": SECRET, "code": "287082", "counter": 0})
    assert resp.get_json() == {"valid": True, "new_counter": 2}


def test_verify_invalid(client):
    resp = client.post("/api/verify_hotp", json={
        "secret": SECRET, "code": "287082", "counter": 0, "look_ahead": 0,
    })
    assert resp.get_json() == {"valid": False, "new_counter": 0}


@pytest.mark.parametrize("body", [
    {"secret": SECRET, "counter": 0},
    ["code", "counter", "secret"],
    "code counter secret",
])
def test_verify_missing_code(client, body):
    resp = client.post("/api/verify_hotp", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_load_config_from_environment(monkeypatch):
    monkeypatch.setenv("HOTP_API_PORT", "8080")
    monkeypatch.setenv("HOTP_API_DEBUG", "yes")
    monkeypatch.setenv("HOTP_HMAC_BACKEND", "cryptography")
    app = create_app()
    assert app.config["PORT"] == 8080
    assert app.config["DEBUG"] is True
    assert app.config["HMAC_BACKEND"] == "cryptography"


@pytest.mark.parametrize("checksum", ["false", "true", 0, 1, None])
def test_generate_checksum_must_be_boolean(client, checksum):
    resp = client.post("/api/hotp", json={"secret": SECRET, "counter": 0, "checksum": checksum})
    assert resp.status_code == 400
    assert "checksum" in resp.get_json()["error"]


def test_generate_checksum_false(client):
    resp = client.post("/api/hotp", json={"secret": SECRET, "counter": 0, "checksum": False})
    assert resp.get_json()["code"] == "755224"


def test_verify_checksum_must_be_boolean(client):
    resp = client.post("/api/verify_hotp", json={
        "secret": SECRET, "code": "755224", "counter": 0, "checksum": "false",
    })
    assert resp.status_code == 400


def test_verify_look_ahead_too_large(client):
    resp = client.post("/api/verify_hotp", json={
        "secret": SECRET, "code": "000000", "counter": 0, "look_ahead": 10 ** 12,
    })
    assert resp.status_code == 400
    assert "look_ahead" in resp.get_json()["error"]


def test_import_does_not_read_environment(monkeypatch):
    import hotp_api.app

    monkeypatch.setenv("HOTP_API_PORT", "not-a-port")
    importlib.reload(hotp_api.app)
    assert not hasattr(hotp_api.app, "app")
    with pytest.raises(ValueError):
        hotp_api.app.create_app()
