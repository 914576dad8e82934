"""
Identity fingerprint resolution for anonymous clients.

Derives a reproducible pseudo-identity from request metadata so that
engagement can be de-duplicated without authentication.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from community_api.config import IDENTITY_KEY_MAX_LENGTH, USER_AGENT_MAX_LENGTH


class InvalidClientInfo(ValueError):
    """Raised when client info lacks the fields needed to derive an identity."""


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata describing the calling client."""
    ip: Optional[str]
    user_agent: Optional[str]
    fingerprint: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None


def resolve_identity_key(client: ClientInfo) -> str:
    """
    Derive the identity key for a client.

    A client-supplied fingerprint is used verbatim; otherwise the network IP
    is the key. The result is cut to the ledger column width.

    Args:
        client: Client metadata from the request

    Returns:
        Identity key string
    """
    key = client.fingerprint or client.ip
    if not key:
        raise InvalidClientInfo("Client info requires a fingerprint or an IP address")
    return key[:IDENTITY_KEY_MAX_LENGTH]


def normalize_user_agent(client: ClientInfo) -> str:
    """Return the user agent cut to the ledger column width."""
    if client.user_agent is None:
        raise InvalidClientInfo("Client info requires a user agent")
    return client.user_agent[:USER_AGENT_MAX_LENGTH]


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request, handling proxies.

    Checks X-Forwarded-For first (reverse proxy setups), then X-Real-IP,
    then falls back to the direct peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs; take the first one
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def client_info_from_request(request: Request) -> ClientInfo:
    """Build ClientInfo from an incoming FastAPI request."""
    return ClientInfo(
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent", "unknown"),
        fingerprint=request.headers.get("X-Client-Fingerprint") or None,
        country=request.headers.get("CF-IPCountry") or None,
        city=request.headers.get("X-Geo-City") or None,
    )
