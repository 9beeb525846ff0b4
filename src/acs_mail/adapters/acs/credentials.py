"""Credential provider resolving configured credentials to auth material.

Shared keys pass straight through. Service principals and managed
identities exchange their identity for a bearer token through
azure-identity, which handles its own transient retries. Tokens are fetched
fresh on every call; nothing is cached across sends.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential, ManagedIdentityCredential

from acs_mail.domain.errors import AuthenticationFailed
from acs_mail.domain.models import (
    AccessToken,
    AuthMaterial,
    Credential,
    ManagedIdentity,
    ServicePrincipal,
    SharedKey,
)

logger = logging.getLogger(__name__)

#: Token scope for Communication Services data-plane calls.
COMMUNICATION_SCOPE = "https://communication.azure.com/.default"


class RawToken(Protocol):
    """Shape of ``azure.core.credentials.AccessToken``."""

    token: str
    expires_on: int


class TokenSource(Protocol):
    """Anything exposing azure-identity's ``get_token(*scopes)``."""

    def get_token(self, *scopes: str) -> RawToken: ...


TokenSourceFactory = Callable[[ServicePrincipal | ManagedIdentity], TokenSource]


def build_token_source(credential: ServicePrincipal | ManagedIdentity) -> TokenSource:
    """Create the azure-identity credential for a token-based variant.

    Example:
        >>> source = build_token_source(ServicePrincipal("client", "secret", "tenant"))
        >>> type(source).__name__
        'ClientSecretCredential'
    """
    if isinstance(credential, ServicePrincipal):
        return ClientSecretCredential(
            tenant_id=credential.tenant_id,
            client_id=credential.client_id,
            client_secret=credential.client_secret,
        )
    return ManagedIdentityCredential(client_id=credential.client_id)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def fetch_access_token(
    credential: ServicePrincipal | ManagedIdentity,
    *,
    scope: str = COMMUNICATION_SCOPE,
    token_source_factory: TokenSourceFactory = build_token_source,
    now: Callable[[], datetime] = _utcnow,
) -> AccessToken:
    """Exchange a token-based credential for an access token.

    Raises:
        AuthenticationFailed: When the identity provider rejects the
            exchange, is unreachable, or hands back an already-expired token.
    """
    flow = type(credential).__name__
    logger.debug("Requesting access token", extra={"flow": flow, "scope": scope})
    try:
        raw = token_source_factory(credential).get_token(scope)
    except AzureError as exc:
        logger.debug("Token acquisition failed", exc_info=True)
        raise AuthenticationFailed(f"{flow} token acquisition failed: {exc.message}") from exc

    token = AccessToken(value=raw.token, expires_at=datetime.fromtimestamp(raw.expires_on, tz=timezone.utc))
    if token.is_expired(now()):
        raise AuthenticationFailed(f"{flow} token acquisition returned an expired token")
    return token


def resolve_auth_material(
    credential: Credential,
    *,
    token_source_factory: TokenSourceFactory = build_token_source,
    now: Callable[[], datetime] = _utcnow,
) -> AuthMaterial:
    """Return what is needed to authorize one request for ``credential``.

    Args:
        credential: Configured credential variant.
        token_source_factory: Builds the identity client for token variants.
            Tests pass a fake here.
        now: Clock used for the expiry check.

    Returns:
        The SharedKey itself for shared-key credentials, otherwise a freshly
        fetched AccessToken.

    Raises:
        AuthenticationFailed: Token exchange failed.

    Example:
        >>> key = SharedKey("c2VjcmV0")
        >>> resolve_auth_material(key) is key
        True
    """
    if isinstance(credential, SharedKey):
        return credential
    return fetch_access_token(credential, token_source_factory=token_source_factory, now=now)


__all__ = [
    "COMMUNICATION_SCOPE",
    "RawToken",
    "TokenSource",
    "TokenSourceFactory",
    "build_token_source",
    "fetch_access_token",
    "resolve_auth_material",
]
