class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class EmailAlreadyRegistered(DomainError):
    """An account already exists for this email."""

    pass


class PendingRegistrationNotFound(DomainError):
    """No pending registration is waiting for this email."""

    pass


class VerificationExpired(DomainError):
    """The pending registration or its code passed its deadline."""

    pass


class VerificationMismatch(DomainError):
    """The presented code or token does not match the stored one."""

    pass


class InvalidCredentials(DomainError):
    """Unknown email or wrong password."""

    pass


class EmailNotVerified(DomainError):
    """The account exists but its email was never confirmed."""

    pass


class UserNotFound(DomainError):
    """No user matches the lookup criteria (e.g., id from a token)."""

    pass


class ResetLinkInvalid(DomainError):
    """No password reset is pending for this email, or the token differs."""

    pass


class ResetLinkExpired(DomainError):
    """The password reset link passed its deadline."""

    pass
