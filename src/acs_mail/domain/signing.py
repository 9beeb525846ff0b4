"""Request signing for the Communication Services REST API.

Pure functions with no I/O: given a credential, its resolved authorization
material, and the request parts, build a :class:`SignedRequest`.

Shared-key requests are HMAC-SHA256 signed over the canonical string::

    {METHOD}\\n{path_and_query}\\n{date};{host};{content_hash}

The service rebuilds the same string byte for byte, so field order and
separators must not change. Token requests carry ``Bearer <token>`` instead
and still send the content hash header.

Contents:
    * :func:`compute_content_hash` - base64(sha256(body)).
    * :func:`format_http_date` - RFC 1123 date in GMT.
    * :func:`build_string_to_sign` - Canonical string.
    * :func:`compute_signature` - base64(HMAC-SHA256(key, string)).
    * :func:`sign_request` - Build a complete :class:`SignedRequest`.
    * :func:`verify_signature` - Recompute and compare a shared-key signature.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from email.utils import format_datetime

from .errors import ConfigurationError
from .models import AccessToken, AuthMaterial, Credential, SharedKey, SignedRequest

logger = logging.getLogger(__name__)

#: Headers covered by the shared-key signature, in signing order.
SIGNED_HEADERS = "x-ms-date;host;x-ms-content-sha256"

HMAC_SCHEME = "HMAC-SHA256"


def compute_content_hash(body: bytes) -> str:
    """Return base64(sha256(body)).

    Example:
        >>> compute_content_hash(b"")
        '47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU='
    """
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def format_http_date(now: datetime) -> str:
    """Format ``now`` as an RFC 1123 HTTP-date in GMT.

    Naive datetimes are taken to be UTC.

    Example:
        >>> format_http_date(datetime(1994, 11, 6, 8, 49, 37, tzinfo=timezone.utc))
        'Sun, 06 Nov 1994 08:49:37 GMT'
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc).replace(microsecond=0), usegmt=True)


def build_string_to_sign(method: str, url_path: str, date: str, host: str, content_hash: str) -> str:
    """Return the canonical string covered by the shared-key signature.

    Example:
        >>> build_string_to_sign("GET", "/emails/operations/1?api-version=1", "D", "h.example", "H")
        'GET\\n/emails/operations/1?api-version=1\\nD;h.example;H'
    """
    return f"{method.upper()}\n{url_path}\n{date};{host};{content_hash}"


def decode_shared_key(key: str) -> bytes:
    """Decode the base64 shared key, raising ConfigurationError when malformed.

    Example:
        >>> decode_shared_key("c2VjcmV0")
        b'secret'
        >>> decode_shared_key("not base64!")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: Shared key is not valid base64
    """
    try:
        decoded = base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("Shared key is not valid base64") from exc
    if not decoded:
        raise ConfigurationError("Shared key is empty")
    return decoded


def compute_signature(string_to_sign: str, key: str) -> str:
    """Return base64(HMAC-SHA256(base64decode(key), string_to_sign)).

    Raises:
        ConfigurationError: When ``key`` is not valid base64.
    """
    digest = hmac.new(decode_shared_key(key), string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_hmac_authorization(signature: str) -> str:
    """Return the ``Authorization`` header value for a shared-key signature."""
    return f"{HMAC_SCHEME} SignedHeaders={SIGNED_HEADERS}&Signature={signature}"


def _check_material(credential: Credential, auth_material: AuthMaterial) -> None:
    """Reject auth material that does not belong to the credential variant."""
    if isinstance(credential, SharedKey) != isinstance(auth_material, SharedKey):
        raise ConfigurationError(
            f"{type(auth_material).__name__} cannot authorize a {type(credential).__name__} credential"
        )


def sign_request(
    credential: Credential,
    auth_material: AuthMaterial,
    *,
    method: str,
    url_path: str,
    host: str,
    body: bytes,
    now: datetime,
) -> SignedRequest:
    """Sign one outgoing request.

    The whole signature is computed before anything is returned, so a
    failure never leaves a partially signed request behind.

    Args:
        credential: Configured credential variant.
        auth_material: Result of resolving ``credential``: the shared key
            itself, or an access token.
        method: HTTP method (upper-cased for signing).
        url_path: Path plus ``?query`` exactly as sent.
        host: Host authority as sent in the ``host`` header.
        body: Exact request body bytes (empty for GET).
        now: Signing time; becomes the ``x-ms-date`` header.

    Returns:
        Frozen SignedRequest ready to be placed on the wire.

    Raises:
        ConfigurationError: When the shared key is malformed or the auth
            material does not match the credential variant.

    Example:
        >>> signed = sign_request(
        ...     SharedKey("c2VjcmV0"), SharedKey("c2VjcmV0"),
        ...     method="GET", url_path="/x", host="h.example", body=b"",
        ...     now=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ... )
        >>> signed.authorization_header.startswith("HMAC-SHA256 SignedHeaders=x-ms-date;host;")
        True
        >>> signed.date
        'Mon, 01 Jan 2024 00:00:00 GMT'
    """
    _check_material(credential, auth_material)
    method = method.upper()
    content_hash = compute_content_hash(body)
    date = format_http_date(now)

    if isinstance(auth_material, AccessToken):
        authorization = f"Bearer {auth_material.value}"
    else:
        string_to_sign = build_string_to_sign(method, url_path, date, host, content_hash)
        logger.debug("Signing request", extra={"string_to_sign": string_to_sign})
        authorization = build_hmac_authorization(compute_signature(string_to_sign, auth_material.key))

    return SignedRequest(
        method=method,
        url_path=url_path,
        host=host,
        content_hash=content_hash,
        date=date,
        authorization_header=authorization,
        body=body,
    )


def verify_signature(signed: SignedRequest, key: str) -> bool:
    """Check a shared-key signature against the request's current contents.

    The content hash is recomputed from ``signed.body`` so a body swapped
    after signing fails verification, as it would on the server.

    Example:
        >>> from dataclasses import replace
        >>> key = SharedKey("c2VjcmV0")
        >>> signed = sign_request(key, key, method="POST", url_path="/p", host="h",
        ...                       body=b"{}", now=datetime(2024, 1, 1, tzinfo=timezone.utc))
        >>> verify_signature(signed, key.key)
        True
        >>> verify_signature(replace(signed, body=b"{ }"), key.key)
        False
    """
    prefix = f"{HMAC_SCHEME} SignedHeaders={SIGNED_HEADERS}&Signature="
    if not signed.authorization_header.startswith(prefix):
        return False
    presented = signed.authorization_header[len(prefix) :]
    string_to_sign = build_string_to_sign(
        signed.method, signed.url_path, signed.date, signed.host, compute_content_hash(signed.body)
    )
    expected = compute_signature(string_to_sign, key)
    return hmac.compare_digest(presented, expected)


__all__ = [
    "HMAC_SCHEME",
    "SIGNED_HEADERS",
    "build_hmac_authorization",
    "build_string_to_sign",
    "compute_content_hash",
    "compute_signature",
    "decode_shared_key",
    "format_http_date",
    "sign_request",
    "verify_signature",
]
