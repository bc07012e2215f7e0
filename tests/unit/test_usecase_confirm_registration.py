import pytest

from kinote.application.confirm_registration import confirm_with_code, confirm_with_token
from kinote.application.register_user import begin_registration, store_registration
from kinote.domain.entities import PendingRegistration
from kinote.domain.errors import (
    PendingRegistrationNotFound,
    VerificationExpired,
    VerificationMismatch,
)
from kinote.domain.expiring import ExpiringEntry
from kinote.infrastructure.memory.registry import RegistrationStores
from tests.fakes import CODE, LINK_TOKEN


@pytest.fixture()
async def registered(uow, stores, email_ok, hash_password_stub):
    await begin_registration(
        uow=uow,
        stores=stores,
        email_port=email_ok,
        name="A",
        email="a@x.com",
        password="s3cret",
        hash_password=hash_password_stub,
        frontend_url="http://localhost:3000",
    )
    return stores


@pytest.mark.asyncio
async def test_confirm_with_code_creates_user_once(uow, registered):
    user = await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)

    assert user.email == "a@x.com"
    assert user.is_verified
    assert uow.committed is True
    assert uow.db_users.create_calls == [
        {"name": "A", "email": "a@x.com", "password_hash": "hashed-s3cret"}
    ]
    assert registered.registrations.get("a@x.com") is None
    assert registered.codes.get("a@x.com") is None

    with pytest.raises(PendingRegistrationNotFound):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)
    assert len(uow.db_users.create_calls) == 1


@pytest.mark.asyncio
async def test_wrong_code_keeps_everything_for_retry(uow, registered):
    with pytest.raises(VerificationMismatch):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code="000000")

    assert registered.registrations.get("a@x.com") is not None
    assert registered.codes.get("a@x.com") is not None

    user = await confirm_with_code(uow=uow, stores=registered, email="A@X.COM", code=CODE)
    assert user.email == "a@x.com"


@pytest.mark.asyncio
async def test_unknown_email_is_not_found(uow, stores):
    with pytest.raises(PendingRegistrationNotFound):
        await confirm_with_code(uow=uow, stores=stores, email="b@x.com", code=CODE)


@pytest.mark.asyncio
async def test_expired_registration_is_removed(uow, registered, clock):
    clock.advance(601)

    with pytest.raises(VerificationExpired):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)

    assert registered.registrations.get("a@x.com") is None
    assert uow.db_users.create_calls == []


@pytest.mark.asyncio
async def test_expired_code_with_live_registration(uow, clock, email_ok, hash_password_stub):
    stores = RegistrationStores.create(
        clock=clock, code_ttl_seconds=60, auto_start_cleanup=False
    )
    await begin_registration(
        uow=uow,
        stores=stores,
        email_port=email_ok,
        name="A",
        email="a@x.com",
        password="s3cret",
        hash_password=hash_password_stub,
        frontend_url="http://localhost:3000",
    )
    clock.advance(61)

    with pytest.raises(VerificationExpired):
        await confirm_with_code(uow=uow, stores=stores, email="a@x.com", code=CODE)

    assert stores.registrations.get("a@x.com") is not None
    assert stores.codes.get("a@x.com") is None


@pytest.mark.asyncio
async def test_missing_code_with_live_registration_is_expired(uow, registered):
    registered.codes.remove("a@x.com")

    with pytest.raises(VerificationExpired):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)


@pytest.mark.asyncio
async def test_failed_account_creation_restores_entry(uow, registered):
    uow.db_users.fail_create = RuntimeError("db down")

    with pytest.raises(RuntimeError, match="db down"):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)

    assert uow.rolled_back is True
    assert registered.registrations.get("a@x.com") is not None
    assert registered.codes.get("a@x.com") is not None

    uow.db_users.fail_create = None
    user = await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)
    assert user.email == "a@x.com"


@pytest.mark.asyncio
async def test_confirm_with_token(uow, registered):
    user = await confirm_with_token(
        uow=uow, stores=registered, email="a@x.com", token=LINK_TOKEN
    )

    assert user.email == "a@x.com"
    assert registered.registrations.get("a@x.com") is None
    assert registered.codes.get("a@x.com") is None


@pytest.mark.asyncio
async def test_confirm_with_wrong_token(uow, registered):
    with pytest.raises(VerificationMismatch):
        await confirm_with_token(uow=uow, stores=registered, email="a@x.com", token="nope")
    assert registered.registrations.get("a@x.com") is not None


@pytest.mark.asyncio
async def test_confirm_with_token_after_deadline(uow, registered, clock):
    clock.advance(600)

    with pytest.raises(VerificationExpired):
        await confirm_with_token(
            uow=uow, stores=registered, email="a@x.com", token=LINK_TOKEN
        )
    assert registered.registrations.get("a@x.com") is None


@pytest.mark.asyncio
async def test_claim_lost_to_a_replacement_is_not_found(uow, registered, monkeypatch):
    from kinote.application import confirm_registration as module

    real_verify = module.verify_secret

    def verify_then_replace(store, key, candidate, *, now):
        result = real_verify(store, key, candidate, now=now)
        # a concurrent confirmation wins the claim in between
        registered.registrations.remove(key)
        return result

    monkeypatch.setattr(module, "verify_secret", verify_then_replace)

    with pytest.raises(PendingRegistrationNotFound):
        await confirm_with_token(
            uow=uow, stores=registered, email="a@x.com", token=LINK_TOKEN
        )
    assert uow.db_users.create_calls == []


@pytest.mark.asyncio
async def test_code_does_not_confirm_a_replaced_registration(uow, registered, hash_password_stub):
    store_registration(
        stores=registered,
        name="Other",
        email="a@x.com",
        password="other-pw",
        token="client-token-0123456789",
        hash_password=hash_password_stub,
    )

    with pytest.raises(VerificationExpired):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)

    assert uow.db_users.create_calls == []
    assert registered.registrations.get("a@x.com").payload.name == "Other"


@pytest.mark.asyncio
async def test_code_is_bound_to_its_registration(uow, registered, clock):
    # a newer registration written straight to the store, code left behind
    replacement = ExpiringEntry.issue(
        PendingRegistration(name="Other", email="a@x.com", password_hash="hashed-x"),
        "another-token",
        ttl_seconds=600,
        now=clock.now(),
    )
    registered.registrations.put("a@x.com", replacement)

    with pytest.raises(VerificationExpired):
        await confirm_with_code(uow=uow, stores=registered, email="a@x.com", code=CODE)

    assert uow.db_users.create_calls == []
    assert registered.codes.get("a@x.com") is None
    assert registered.registrations.get("a@x.com") is replacement
