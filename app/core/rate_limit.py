"""Rate limiting keyed by a normalized client address"""

import ipaddress

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# IPv6 hosts usually own a whole /64; keep only the network groups
_IPV6_KEY_GROUPS = 4


def normalize_ip(raw: str) -> str:
    """
    Reduce a client address to the key used for rate limiting.

    - IPv4-mapped IPv6 (``::ffff:10.0.0.1``) becomes the IPv4 address.
    - Other IPv6 addresses keep their first four groups.
    - Anything unparseable is returned stripped, as-is.
    """
    candidate = (raw or "").strip()
    if not candidate:
        return "unknown"
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return candidate

    if address.version == 6:
        if address.ipv4_mapped is not None:
            return str(address.ipv4_mapped)
        groups = address.exploded.split(":")[:_IPV6_KEY_GROUPS]
        return ":".join(group.lstrip("0") or "0" for group in groups)
    return str(address)


def client_ip(request: Request) -> str:
    """Client address, honouring X-Forwarded-For only behind a trusted proxy."""
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return get_remote_address(request)


def rate_limit_key(request: Request) -> str:
    key = normalize_ip(client_ip(request))
    logger.debug("Rate limit key resolved", extra={"key": key, "path": request.url.path})
    return key


limiter = Limiter(key_func=rate_limit_key, enabled=settings.RATE_LIMIT_ENABLED)

LOGIN_LIMIT = f"{settings.LOGIN_RATE_LIMIT_PER_MINUTE}/minute"
REGISTER_LIMIT = f"{settings.REGISTER_RATE_LIMIT_PER_HOUR}/hour"
