from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    body: str


def verification_email(
    *,
    name: str,
    email: str,
    code: str,
    token: str | None,
    frontend_url: str,
    ttl_minutes: int,
) -> EmailMessage:
    lines = [
        f"Hi {name or 'there'},",
        "",
        "Welcome to Kinote! Enter this code to confirm your email address:",
        "",
        f"    {code}",
        "",
    ]
    if token:
        query = urlencode({"email": email, "token": token})
        lines += [
            "Or open this link:",
            f"{frontend_url.rstrip('/')}/verify?{query}",
            "",
        ]
    lines += [
        f"The code expires in {ttl_minutes} minutes.",
        "If you did not sign up, you can ignore this message.",
    ]
    return EmailMessage(subject="Verify Your Email - Kinote", body="\n".join(lines))


def resend_code_email(*, name: str, code: str, ttl_minutes: int) -> EmailMessage:
    body = "\n".join(
        [
            f"Hi {name or 'there'},",
            "",
            f"Your new Kinote verification code is {code}.",
            f"It expires in {ttl_minutes} minutes.",
        ]
    )
    return EmailMessage(subject="Your new verification code - Kinote", body=body)


def password_reset_email(
    *, name: str, email: str, token: str, frontend_url: str, ttl_minutes: int
) -> EmailMessage:
    query = urlencode({"email": email, "token": token})
    body = "\n".join(
        [
            f"Hi {name or 'there'},",
            "",
            "Someone asked to reset the password of your Kinote account.",
            "Choose a new one here:",
            f"{frontend_url.rstrip('/')}/reset-password?{query}",
            "",
            f"The link expires in {ttl_minutes} minutes.",
            "If it was not you, ignore this message; your password stays the same.",
        ]
    )
    return EmailMessage(subject="Reset Your Password - Kinote", body=body)
