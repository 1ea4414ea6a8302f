"""Rate limiting for the verification API.

Budgets belong to the authenticated caller. A request that reaches the limiter
without an identity is counted against its client IP instead, and
X-Forwarded-For is only believed when the direct peer is a configured proxy.
"""

import ipaddress
from functools import lru_cache

from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import get_settings
from ..logging_config import get_logger

logger = get_logger(__name__)


@lru_cache
def proxy_networks() -> tuple:
    """Parse TRUSTED_PROXY_CIDRS once, skipping entries that are not networks."""
    networks = []
    for cidr in get_settings().trusted_proxy_cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr.strip(), strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr}")
    return tuple(networks)


def _from_proxy(peer: str) -> bool:
    try:
        addr = ipaddress.ip_address(peer)
    except ValueError:
        return False
    return any(addr in network for network in proxy_networks())


def get_client_ip(request) -> str:
    """Best-effort client address for callers without an identity."""
    peer = get_remote_address(request)
    if not _from_proxy(peer):
        return peer

    # Left-most hop is the original client
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or peer


def get_caller_key(request) -> str:
    """Rate-limit key: authenticated caller id, else client IP."""
    caller_id = getattr(request.state, "caller_id", None)
    if caller_id:
        return f"caller:{caller_id}"
    return f"ip:{get_client_ip(request)}"


def verify_rate_limit() -> str:
    """Current limit string for the verify endpoint (e.g. ``10/minute``)."""
    return get_settings().verify_rate_limit


limiter = Limiter(key_func=get_caller_key)
