import pytest

from kinote.infrastructure.memory.registry import RegistrationStores
from tests.fakes import (
    CODE,
    LINK_TOKEN,
    FakeClock,
    FakeEmailFailing,
    FakeEmailOK,
    FakeUoW,
)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def stores(clock):
    # the sweep is driven by hand in tests
    return RegistrationStores.create(clock=clock, auto_start_cleanup=False)


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def email_ok():
    return FakeEmailOK()


@pytest.fixture()
def email_failing():
    return FakeEmailFailing()


@pytest.fixture()
def hash_password_stub():
    return lambda p: "hashed-" + p


@pytest.fixture(autouse=True)
def patch_secrets(monkeypatch):
    """
    Make the 6-digit code and the link token deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from kinote.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_6digit_code", lambda: CODE)
    monkeypatch.setattr(
        domain_services, "generate_verification_token", lambda: LINK_TOKEN
    )
    yield
