"""Connection string and endpoint parsing."""

from __future__ import annotations

import pytest

from acs_mail.domain.connection_string import parse_connection_string, parse_host
from acs_mail.domain.errors import ConfigurationError


@pytest.mark.os_agnostic
def test_parses_endpoint_and_access_key() -> None:
    """The usual portal format yields host and key."""
    parsed = parse_connection_string("endpoint=https://contoso.communication.azure.com/;accesskey=c2VjcmV0")

    assert parsed.host == "contoso.communication.azure.com"
    assert parsed.access_key == "c2VjcmV0"


@pytest.mark.os_agnostic
def test_keys_are_case_insensitive_and_order_free() -> None:
    """Reordered, mixed-case keys with a trailing separator still parse."""
    parsed = parse_connection_string("AccessKey=a2V5;Endpoint=https://x.communication.azure.com;")

    assert parsed.host == "x.communication.azure.com"
    assert parsed.access_key == "a2V5"


@pytest.mark.os_agnostic
def test_access_key_with_padding_is_kept_intact() -> None:
    """Only the first '=' separates name and value."""
    parsed = parse_connection_string("endpoint=https://x.example/;accesskey=YWJjZA==")

    assert parsed.access_key == "YWJjZA=="


@pytest.mark.os_agnostic
def test_repr_hides_access_key() -> None:
    """The key never shows in a repr."""
    parsed = parse_connection_string("endpoint=https://x.example/;accesskey=c2VjcmV0")

    assert "c2VjcmV0" not in repr(parsed)


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "match"),
    [
        ("endpoint=https://x.example/", "accesskey"),
        ("accesskey=c2VjcmV0", "endpoint"),
        ("endpoint=https://x.example/;accesskey=", "accesskey"),
        ("endpoint=https://x.example/;accesskey=abc;region=eu", "region"),
        ("garbage", "Invalid parameter"),
        ("", "endpoint"),
    ],
)
def test_malformed_connection_strings_are_configuration_errors(raw: str, match: str) -> None:
    """Every malformed variant is rejected with a pointed message."""
    with pytest.raises(ConfigurationError, match=match):
        parse_connection_string(raw)


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("endpoint", "host"),
    [
        ("https://contoso.communication.azure.com/", "contoso.communication.azure.com"),
        ("https://contoso.communication.azure.com:8443/path", "contoso.communication.azure.com:8443"),
        ("contoso.communication.azure.com", "contoso.communication.azure.com"),
        ("  https://padded.example  ", "padded.example"),
    ],
)
def test_parse_host_accepts_urls_and_bare_hosts(endpoint: str, host: str) -> None:
    """The host authority is what gets signed and sent."""
    assert parse_host(endpoint) == host


@pytest.mark.os_agnostic
def test_parse_host_rejects_empty_endpoint() -> None:
    """An endpoint without a host cannot be used."""
    with pytest.raises(ConfigurationError):
        parse_host("https://")
