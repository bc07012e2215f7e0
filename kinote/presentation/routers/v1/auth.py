from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kinote.application.cancel_registration import cancel_registration
from kinote.application.confirm_registration import confirm_with_code, confirm_with_token
from kinote.application.login_user import get_current_user, login_user
from kinote.application.register_user import begin_registration, store_registration
from kinote.application.resend_code import resend_verification_code
from kinote.application.reset_password import request_password_reset, reset_password
from kinote.domain.entities import User
from kinote.domain.errors import (
    EmailAlreadyRegistered,
    EmailNotVerified,
    InvalidCredentials,
    PendingRegistrationNotFound,
    ResetLinkExpired,
    ResetLinkInvalid,
    UserNotFound,
    VerificationExpired,
    VerificationMismatch,
)
from kinote.domain.ports.email_port import EmailPort
from kinote.domain.ports.unit_of_work import UnitOfWorkPort
from kinote.infrastructure.memory.registry import RegistrationStores
from kinote.infrastructure.security.tokens import InvalidToken, TokenIssuer
from kinote.presentation.dependencies import (
    get_email_port,
    get_frontend_url,
    get_hash_password,
    get_registration_stores,
    get_token_issuer,
    get_uow,
    get_verify_password,
)
from kinote.schemas.requests import (
    EmailIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    StoreRegistrationIn,
    VerifyEmailIn,
)
from kinote.schemas.responses import (
    LoginOut,
    LogoutOut,
    MessageOut,
    PasswordResetOut,
    PendingOut,
    UserOut,
    VerifiedOut,
)

router = APIRouter(prefix="/auth", tags=["Auth"])
bearer_scheme = HTTPBearer(auto_error=False)

Uow = Annotated[UnitOfWorkPort, Depends(get_uow)]
Stores = Annotated[RegistrationStores, Depends(get_registration_stores)]


def _confirmation_error(exc: Exception) -> HTTPException:
    if isinstance(exc, PendingRegistrationNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="no pending registration for this email",
        )
    if isinstance(exc, VerificationExpired):
        return HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="verification expired, request a new one",
        )
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid verification code"
    )


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id, name=user.name, email=user.email, created_at=user.created_at
    )


@router.post("/register", status_code=202, response_model=PendingOut)
async def post_register(
    body: RegisterIn,
    uow: Uow,
    stores: Stores,
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    frontend_url: Annotated[str, Depends(get_frontend_url)],
):
    try:
        receipt = await begin_registration(
            uow=uow,
            stores=stores,
            email_port=email_port,
            name=body.name,
            email=body.email,
            password=body.password,
            hash_password=hash_password,
            frontend_url=frontend_url,
        )
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="email already registered"
        )
    return PendingOut(email=receipt.email, expires_at=receipt.expires_at)


@router.post("/store-registration", response_model=MessageOut)
async def post_store_registration(
    body: StoreRegistrationIn,
    stores: Stores,
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    store_registration(
        stores=stores,
        name=body.name,
        email=body.email,
        password=body.password,
        token=body.token,
        hash_password=hash_password,
    )
    return MessageOut(message="Registration data stored")


@router.post("/verify-email", response_model=VerifiedOut)
async def post_verify_email(
    body: VerifyEmailIn,
    uow: Uow,
    stores: Stores,
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
):
    try:
        user = await confirm_with_code(
            uow=uow, stores=stores, email=body.email, code=body.code
        )
    except (
        PendingRegistrationNotFound,
        VerificationExpired,
        VerificationMismatch,
    ) as e:
        raise _confirmation_error(e)
    return VerifiedOut(token=tokens.issue(user), user=_user_out(user))


@router.get("/verify", response_model=VerifiedOut)
async def get_verify(
    uow: Uow,
    stores: Stores,
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
    email: str = Query(..., min_length=3),
    token: str = Query(..., min_length=1),
):
    try:
        user = await confirm_with_token(
            uow=uow, stores=stores, email=email, token=token
        )
    except (
        PendingRegistrationNotFound,
        VerificationExpired,
        VerificationMismatch,
    ) as e:
        raise _confirmation_error(e)
    return VerifiedOut(token=tokens.issue(user), user=_user_out(user))


@router.post("/resend-verification", response_model=PendingOut)
async def post_resend_verification(
    body: EmailIn,
    stores: Stores,
    email_port: Annotated[EmailPort, Depends(get_email_port)],
):
    try:
        expires_at = await resend_verification_code(
            stores=stores, email_port=email_port, email=body.email
        )
    except (PendingRegistrationNotFound, VerificationExpired) as e:
        raise _confirmation_error(e)
    return PendingOut(email=body.email.strip().lower(), expires_at=expires_at)


@router.post("/cancel-registration", status_code=204)
async def post_cancel_registration(body: EmailIn, stores: Stores) -> Response:
    cancel_registration(stores=stores, email=body.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/login", response_model=LoginOut)
async def post_login(
    body: LoginIn,
    uow: Uow,
    verify_password: Annotated[
        Callable[[str, str], bool], Depends(get_verify_password)
    ],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
):
    try:
        user = await login_user(
            uow=uow,
            email=body.email,
            password=body.password,
            verify_password=verify_password,
        )
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials"
        )
    except EmailNotVerified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="email not verified"
        )
    return LoginOut(
        id=user.id, name=user.name, email=user.email, token=tokens.issue(user)
    )


@router.get("/me", response_model=UserOut)
async def get_me(
    uow: Uow,
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
    auth: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
):
    if auth is None or not auth.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token"
        )
    try:
        claims = tokens.decode(auth.credentials)
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid or expired token"
        )

    try:
        user = await get_current_user(uow=uow, user_id=claims["sub"])
    except UserNotFound:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="unknown user"
        )
    return _user_out(user)


@router.post("/logout", response_model=LogoutOut)
async def post_logout():
    # tokens are stateless; the client drops its copy
    return LogoutOut()


@router.post("/forgot-password", response_model=MessageOut)
async def post_forgot_password(
    body: EmailIn,
    uow: Uow,
    stores: Stores,
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    frontend_url: Annotated[str, Depends(get_frontend_url)],
):
    await request_password_reset(
        uow=uow,
        stores=stores,
        email_port=email_port,
        email=body.email,
        frontend_url=frontend_url,
    )
    # same answer whether or not the account exists
    return MessageOut(
        message="If an account exists with this email, a password reset link has been sent."
    )


@router.post("/reset-password", response_model=PasswordResetOut)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: Uow,
    stores: Stores,
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    try:
        user = await reset_password(
            uow=uow,
            stores=stores,
            email=body.email,
            token=body.token,
            new_password=body.password,
            hash_password=hash_password,
        )
    except ResetLinkInvalid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid password reset link",
        )
    except ResetLinkExpired:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="password reset link has expired, please request a new one",
        )
    except UserNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    return PasswordResetOut(id=user.id, email=user.email)
