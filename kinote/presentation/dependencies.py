from typing import Callable

from fastapi import Request

from kinote.domain.ports.email_port import EmailPort
from kinote.domain.ports.unit_of_work import UnitOfWorkPort
from kinote.infrastructure.db.pool import get_pool
from kinote.infrastructure.db.uow import PgUnitOfWork
from kinote.infrastructure.memory.registry import RegistrationStores
from kinote.infrastructure.security.password import hash_password, verify_password
from kinote.infrastructure.security.tokens import TokenIssuer
from kinote.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_registration_stores(request: Request) -> RegistrationStores:
    # This is set in kinote.main.create_app
    return request.app.state.registration_stores


def get_email_port(request: Request) -> EmailPort:
    # This is set in kinote.main lifespan()
    return request.app.state.email_adapter


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_password


def get_token_issuer() -> TokenIssuer:
    settings = get_settings()
    return TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl_seconds=settings.jwt_ttl_seconds,
    )


def get_frontend_url() -> str:
    return get_settings().frontend_url
