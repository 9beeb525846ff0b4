"""Parse Communication Services connection strings."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ConnectionString:
    """Host and access key extracted from a connection string."""

    host: str
    access_key: str = field(repr=False)


def parse_host(endpoint: str) -> str:
    """Return the host authority of an endpoint URL or bare host name.

    Example:
        >>> parse_host("https://contoso.communication.azure.com/")
        'contoso.communication.azure.com'
        >>> parse_host("contoso.communication.azure.com")
        'contoso.communication.azure.com'
    """
    candidate = endpoint.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    host = urlsplit(candidate).netloc
    if not host:
        raise ConfigurationError(f"Endpoint has no host: {endpoint!r}")
    return host


def parse_connection_string(raw: str) -> ConnectionString:
    """Split ``endpoint=...;accesskey=...`` into host and key.

    Keys are case-insensitive and may appear in any order; a trailing
    separator is tolerated. Anything else is a configuration error.

    Example:
        >>> cs = parse_connection_string("endpoint=https://contoso.communication.azure.com/;accesskey=c2VjcmV0")
        >>> cs.host
        'contoso.communication.azure.com'
        >>> cs.access_key
        'c2VjcmV0'
        >>> parse_connection_string("endpoint=https://x/")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: Connection string has no accesskey
    """
    values: dict[str, str] = {}
    for part in raw.strip().split(";"):
        if not part.strip():
            continue
        name, sep, value = part.partition("=")
        name = name.strip().lower()
        if not sep or name not in ("endpoint", "accesskey"):
            raise ConfigurationError(f"Invalid parameter in connection string: {name or part!r}")
        values[name] = value.strip()

    if not values.get("endpoint"):
        raise ConfigurationError("Connection string has no endpoint")
    if not values.get("accesskey"):
        raise ConfigurationError("Connection string has no accesskey")
    return ConnectionString(host=parse_host(values["endpoint"]), access_key=values["accesskey"])


__all__ = ["ConnectionString", "parse_connection_string", "parse_host"]
