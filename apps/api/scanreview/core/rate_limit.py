"""Rate limiting for the public review flow using slowapi."""

from slowapi import Limiter
from starlette.requests import Request


def get_client_ip(request: Request) -> str:
    """Extract the real client IP behind Cloudflare / a reverse proxy.

    Only used as a rate-limit key and as input to ``fingerprint_ip``.
    """
    return (
        request.headers.get("CF-Connecting-IP")
        or request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        or (request.client.host if request.client else "127.0.0.1")
    )


limiter = Limiter(key_func=get_client_ip)
