from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kinote.domain.entities import User
from kinote.infrastructure.memory.registry import RegistrationStores
from kinote.infrastructure.security.tokens import TokenIssuer
from kinote.main import create_app
from kinote.presentation.dependencies import (
    get_email_port,
    get_frontend_url,
    get_hash_password,
    get_registration_stores,
    get_token_issuer,
    get_uow,
    get_verify_password,
)
from tests.fakes import T0, FakeEmailOK, FakeUoW

TOKENS = TokenIssuer(secret="test-secret", ttl_seconds=3600)


@dataclass
class ApiDeps:
    app: FastAPI
    uow: FakeUoW
    stores: RegistrationStores
    email: FakeEmailOK


@pytest.fixture()
def deps(clock):
    app = create_app()
    deps = ApiDeps(
        app=app,
        uow=FakeUoW(),
        stores=RegistrationStores.create(clock=clock, auto_start_cleanup=False),
        email=FakeEmailOK(),
    )

    app.dependency_overrides[get_uow] = lambda: deps.uow
    app.dependency_overrides[get_registration_stores] = lambda: deps.stores
    app.dependency_overrides[get_email_port] = lambda: deps.email
    app.dependency_overrides[get_hash_password] = lambda: (
        lambda plain: "hashed-" + plain
    )
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )
    app.dependency_overrides[get_token_issuer] = lambda: TOKENS
    app.dependency_overrides[get_frontend_url] = lambda: "http://app.test"

    try:
        yield deps
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(deps):
    return TestClient(deps.app, raise_server_exceptions=False)


@pytest.fixture()
def verified_user(deps) -> User:
    user = User(
        id="auth-1",
        email="login@example.com",
        name="Login",
        email_verified_at=T0,
        created_at=T0,
    )
    deps.uow.db_users.seed(user, "hashed-s3cret")
    return user


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
