from kinote.domain.entities import User
from kinote.presentation.dependencies import get_email_port
from tests.fakes import CODE, LINK_TOKEN, FakeEmailFailing


def _register(client, email="a@x.com", password="s3cret", name="A"):
    return client.post(
        "/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )


def test_register_returns_pending(client, deps):
    r = _register(client)

    assert r.status_code == 202, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["email"] == "a@x.com"
    assert body["expires_at"].startswith("2025-10-19T09:10:00")

    assert deps.stores.codes.get("a@x.com").secret == CODE
    assert deps.stores.registrations.get("a@x.com").secret == LINK_TOKEN
    assert len(deps.email.calls) == 1
    assert "http://app.test/verify?email=a%40x.com" in deps.email.calls[0]["body"]


def test_register_existing_email_conflicts(client, deps):
    deps.uow.db_users.seed(User(id="u1", email="a@x.com"), "hash")

    r = _register(client)

    assert r.status_code == 409
    assert r.json()["detail"] == "email already registered"


def test_register_succeeds_when_mail_relay_fails(client, deps):
    deps.app.dependency_overrides[get_email_port] = lambda: FakeEmailFailing()

    r = _register(client)

    assert r.status_code == 202
    assert deps.stores.registrations.get("a@x.com") is not None


def test_register_validates_payload(client):
    r = client.post("/v1/auth/register", json={"email": "not-an-email", "password": "x"})
    assert r.status_code == 422


def test_code_confirmation_scenario(client, deps):
    assert _register(client).status_code == 202

    wrong = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": "000000"})
    assert wrong.status_code == 401

    ok = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})
    assert ok.status_code == 200, ok.text
    body = ok.json()
    assert body["user"]["email"] == "a@x.com"
    assert body["user"]["name"] == "A"
    assert body["token"]

    retry = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})
    assert retry.status_code == 404

    assert len(deps.uow.db_users.create_calls) == 1
    assert deps.stores.registrations.get("a@x.com") is None
    assert deps.stores.codes.get("a@x.com") is None

    me = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "a@x.com"


def test_verify_email_after_deadline_is_gone(client, deps, clock):
    _register(client)
    clock.advance(601)

    r = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})

    assert r.status_code == 410
    assert deps.stores.registrations.get("a@x.com") is None


def test_verify_email_unknown(client):
    r = client.post("/v1/auth/verify-email", json={"email": "b@x.com", "code": CODE})
    assert r.status_code == 404


def test_link_confirmation(client, deps):
    _register(client)

    r = client.get("/v1/auth/verify", params={"email": "a@x.com", "token": LINK_TOKEN})

    assert r.status_code == 200, r.text
    assert r.json()["user"]["email"] == "a@x.com"
    assert deps.stores.codes.get("a@x.com") is None

    again = client.get("/v1/auth/verify", params={"email": "a@x.com", "token": LINK_TOKEN})
    assert again.status_code == 404


def test_link_confirmation_wrong_token(client):
    _register(client)
    r = client.get("/v1/auth/verify", params={"email": "a@x.com", "token": "nope"})
    assert r.status_code == 401


def test_store_registration_then_link(client, deps):
    token = "client-token-0123456789abcdef"
    r = client.post(
        "/v1/auth/store-registration",
        json={"email": "c@x.com", "name": "C", "password": "s3cret", "token": token},
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Registration data stored"}
    assert deps.email.calls == []

    v = client.get("/v1/auth/verify", params={"email": "c@x.com", "token": token})
    assert v.status_code == 200
    assert deps.uow.db_users.create_calls[0]["password_hash"] == "hashed-s3cret"


def test_resend_verification(client, deps, monkeypatch):
    from kinote.domain import services as domain_services

    _register(client)
    monkeypatch.setattr(domain_services, "generate_6digit_code", lambda: "222222")

    r = client.post("/v1/auth/resend-verification", json={"email": "a@x.com"})
    assert r.status_code == 200
    assert r.json()["status"] == "pending"
    assert len(deps.email.calls) == 2

    old = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})
    assert old.status_code == 401
    new = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": "222222"})
    assert new.status_code == 200


def test_resend_without_pending_registration(client):
    r = client.post("/v1/auth/resend-verification", json={"email": "a@x.com"})
    assert r.status_code == 404


def test_cancel_registration(client, deps):
    _register(client)

    assert client.post("/v1/auth/cancel-registration", json={"email": "a@x.com"}).status_code == 204
    assert client.post("/v1/auth/cancel-registration", json={"email": "a@x.com"}).status_code == 204
    assert deps.stores.registrations.get("a@x.com") is None

    r = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})
    assert r.status_code == 404


def test_verify_email_accepts_verification_code_field(client, deps):
    _register(client)

    r = client.post(
        "/v1/auth/verify-email", json={"email": "a@x.com", "verificationCode": CODE}
    )
    assert r.status_code == 200, r.text
    assert deps.stores.registrations.get("a@x.com") is None


def test_code_from_replaced_registration_is_gone(client, deps):
    _register(client)
    client.post(
        "/v1/auth/store-registration",
        json={"email": "a@x.com", "name": "B", "password": "others", "token": "t" * 32},
    )

    r = client.post("/v1/auth/verify-email", json={"email": "a@x.com", "code": CODE})
    assert r.status_code == 410
    assert deps.uow.db_users.create_calls == []
