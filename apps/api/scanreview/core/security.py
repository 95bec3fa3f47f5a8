"""Security utilities: short codes, session ids and IP fingerprints."""

import hashlib
import hmac
import secrets

from scanreview.core.config import settings


def generate_short_code(length: int | None = None, alphabet: str | None = None) -> str:
    """Generate a random short code from a URL-safe alphabet."""
    length = length or settings.short_code_length
    alphabet = alphabet or settings.short_code_alphabet
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_batch_id() -> str:
    """Generate a batch grouping key."""
    return secrets.token_urlsafe(9)


def generate_session_id() -> str:
    """Generate a session id for a review page visit."""
    return secrets.token_hex(16)


def fingerprint_ip(ip: str, secret: str | None = None) -> str:
    """One-way keyed hash of a client IP. The raw address is never stored."""
    key = (secret or settings.secret_key).encode()
    return hmac.new(key, ip.encode(), hashlib.sha256).hexdigest()[:32]
