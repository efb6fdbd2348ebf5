from keyotp.core.models import SecretEntry

from conftest import HELLO_B32, RFC_SECRET_B32


def test_index(client):
    assert client.get("/").get_json()["api"] == "/api/v1"


def test_add_secret(client):
    resp = client.post("/api/v1/secrets", json={"name": "rfc", "secret": RFC_SECRET_B32, "digits": 8})
    assert resp.status_code == 201
    assert resp.get_json() == {"name": "rfc", "algorithm": "SHA1", "digits": 8, "period": 30}


def test_add_requires_fields(client):
    assert client.post("/api/v1/secrets", json={"name": "a"}).status_code == 400
    assert client.post("/api/v1/secrets", json=["a"]).status_code == 400


def test_add_invalid_secret(client):
    resp = client.post("/api/v1/secrets", json={"name": "a", "secret": "??"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]


def test_add_unsupported_digits(client):
    resp = client.post("/api/v1/secrets", json={"name": "a", "secret": HELLO_B32, "digits": 12})
    assert resp.status_code == 400


def test_add_duplicate(client):
    client.post("/api/v1/secrets", json={"name": "a", "secret": HELLO_B32})
    resp = client.post("/api/v1/secrets", json={"name": "a", "secret": RFC_SECRET_B32})
    assert resp.status_code == 409
    assert resp.get_json()["name"] == "a"


def test_list_and_get_never_return_secret(client):
    client.post("/api/v1/secrets", json={"name": "a", "secret": HELLO_B32})
    listing = client.get("/api/v1/secrets")
    assert listing.get_json() == [{"name": "a", "algorithm": "SHA1", "digits": 6, "period": 30}]
    assert HELLO_B32 not in listing.get_data(as_text=True)
    assert client.get("/api/v1/secrets/a").get_json()["name"] == "a"


def test_get_missing(client):
    resp = client.get("/api/v1/secrets/missing")
    assert resp.status_code == 404
    assert resp.get_json()["name"] == "missing"


def test_delete(client):
    client.post("/api/v1/secrets", json={"name": "a", "secret": HELLO_B32})
    assert client.delete("/api/v1/secrets/a").status_code == 204
    assert client.delete("/api/v1/secrets/a").status_code == 404


def test_codes(client, memory_store):
    memory_store.add("rfc", RFC_SECRET_B32, digits=8)
    memory_store._entries["bad"] = SecretEntry("bad", "!!")
    data = client.get("/api/v1/codes").get_json()
    assert data[0] == {"name": "rfc", "code": "94287082", "remaining": 1, "error": None}
    assert data[1]["name"] == "bad"
    assert data[1]["code"] is None
    assert data[1]["error"]


def test_single_code(client, memory_store):
    memory_store.add("rfc", RFC_SECRET_B32, digits=8)
    assert client.get("/api/v1/codes/rfc").get_json()["code"] == "94287082"
    assert client.get("/api/v1/codes/missing").status_code == 404


def test_single_code_of_corrupt_entry(client, memory_store):
    memory_store._entries["bad"] = SecretEntry("bad", "!!")
    resp = client.get("/api/v1/codes/bad")
    assert resp.status_code == 400
    assert resp.get_json()["name"] == "bad"


def test_backend_unavailable(keyring_store, fake_keyring):
    from keyotp.backend import create_app

    fake_keyring.unavailable = True
    client = create_app(keyring_store, clock=lambda: 59).test_client()
    resp = client.get("/api/v1/codes")
    assert resp.status_code == 503


def test_uri(client, memory_store):
    memory_store.add("a", HELLO_B32)
    data = client.get("/api/v1/secrets/a/uri?issuer=Example").get_json()
    assert data["uri"].startswith("otpauth://totp/Example:a?secret=" + HELLO_B32)


def test_qr_code(client, memory_store):
    memory_store.add("a", HELLO_B32)
    data = client.get("/api/v1/secrets/a/qr").get_json()
    assert data["qr_code"].startswith("data:image/png;base64,")


def test_uri_and_qr_of_unsupported_entry(client, memory_store):
    memory_store._entries["x"] = SecretEntry("x", HELLO_B32, digits=12)
    for path in ("/api/v1/secrets/x/uri", "/api/v1/secrets/x/qr"):
        resp = client.get(path)
        assert resp.status_code == 400
        assert resp.get_json()["name"] == "x"
