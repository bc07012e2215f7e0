# kinote/domain/services.py
from __future__ import annotations

import hmac
import secrets


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_6digit_code() -> str:
    """Zero-padded 6-digit numeric code."""
    return f"{secrets.randbelow(1_000_000):06d}"


def generate_verification_token() -> str:
    """Opaque 64-char hex token for confirmation links."""
    return secrets.token_hex(32)


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        # hmac.compare_digest supports str only when both are ASCII
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
