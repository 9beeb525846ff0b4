"""AcsConfig model: validators, secret redaction, credentials, and engine settings."""

from __future__ import annotations

import pydantic
import pytest

from acs_mail.adapters.acs.config import AcsConfig, load_acs_config_from_dict
from acs_mail.domain.enums import AuthMethod, TransportKind
from acs_mail.domain.errors import ConfigurationError
from acs_mail.domain.models import EmailAddress, ManagedIdentity, ServicePrincipal, SharedKey

CONNECTION_STRING = "endpoint=https://contoso.communication.azure.com/;accesskey=dGVzdC1zaGFyZWQta2V5LW1hdGVyaWFs"

# ---------------------------------------------------------------------------
# Defaults and coercion
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_defaults_select_rest_with_shared_key() -> None:
    """An empty section means REST delivery authorised by shared key."""
    config = AcsConfig()

    assert config.transport is TransportKind.REST
    assert config.auth_method is AuthMethod.SHARED_KEY
    assert config.smtp_host == "smtp.azurecomm.net"
    assert config.smtp_port == 587


@pytest.mark.os_agnostic
def test_empty_strings_from_config_files_mean_unset() -> None:
    """Blank values in defaultconfig.toml are treated as None."""
    config = AcsConfig.model_validate({"connection_string": "", "sender": "  ", "client_secret": ""})

    assert config.connection_string is None
    assert config.sender is None
    assert config.client_secret is None


@pytest.mark.os_agnostic
def test_single_recipient_string_becomes_list() -> None:
    """recipients accepts one address as a plain string."""
    assert AcsConfig.model_validate({"recipients": "ops@example.com"}).recipients == ["ops@example.com"]


@pytest.mark.os_agnostic
def test_non_list_recipients_coerce_to_empty() -> None:
    """Unusable recipient values fall back to no defaults."""
    assert AcsConfig.model_validate({"recipients": 42}).recipients == []


@pytest.mark.os_agnostic
def test_config_is_frozen() -> None:
    """Settings cannot be changed after validation."""
    config = AcsConfig()

    with pytest.raises(pydantic.ValidationError):
        config.transport = TransportKind.SMTP  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    "field",
    ["poll_interval", "poll_timeout", "request_timeout", "smtp_timeout"],
)
def test_non_positive_durations_are_rejected(field: str) -> None:
    """Zero or negative durations make no sense."""
    with pytest.raises(pydantic.ValidationError, match=field):
        AcsConfig.model_validate({field: 0})


@pytest.mark.os_agnostic
def test_smtp_port_out_of_range_is_rejected() -> None:
    """Ports must fit in 1..65535."""
    with pytest.raises(pydantic.ValidationError, match="smtp_port"):
        AcsConfig(smtp_port=70000)


@pytest.mark.os_agnostic
def test_invalid_sender_is_rejected() -> None:
    """The default sender must be a valid address."""
    with pytest.raises(pydantic.ValidationError):
        AcsConfig(sender="not-an-address")


@pytest.mark.os_agnostic
def test_invalid_default_recipient_is_rejected() -> None:
    """Every default recipient is validated."""
    with pytest.raises(pydantic.ValidationError):
        AcsConfig(recipients=["ok@example.com", "broken"])


@pytest.mark.os_agnostic
def test_unknown_transport_is_rejected() -> None:
    """Only rest and smtp are transports."""
    with pytest.raises(pydantic.ValidationError):
        AcsConfig.model_validate({"transport": "carrier-pigeon"})


# ---------------------------------------------------------------------------
# __repr__ with secret redaction
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_repr_redacts_every_secret() -> None:
    """Connection string, client secret and SMTP password are all hidden."""
    config = AcsConfig(
        connection_string=CONNECTION_STRING,
        client_secret="client-secret-value",
        smtp_password="smtp-password-value",
    )

    text = repr(config)

    assert "dGVzdC1zaGFyZWQta2V5" not in text
    assert "client-secret-value" not in text
    assert "smtp-password-value" not in text
    assert text.count("[REDACTED]") == 3


@pytest.mark.os_agnostic
def test_repr_shows_none_for_unset_secrets() -> None:
    """Unset secrets are not dressed up as redacted."""
    assert "client_secret=None" in repr(AcsConfig())


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_shared_key_credential_comes_from_connection_string() -> None:
    """The access key inside the connection string becomes the SharedKey."""
    credential = AcsConfig(connection_string=CONNECTION_STRING).build_credential()

    assert credential == SharedKey("dGVzdC1zaGFyZWQta2V5LW1hdGVyaWFs")


@pytest.mark.os_agnostic
def test_shared_key_without_connection_string_is_configuration_error() -> None:
    """Nothing to sign with."""
    with pytest.raises(ConfigurationError, match="connection_string"):
        AcsConfig().build_credential()


@pytest.mark.os_agnostic
def test_service_principal_credential() -> None:
    """All three identity fields produce a ServicePrincipal."""
    config = AcsConfig(auth_method=AuthMethod.SERVICE_PRINCIPAL, client_id="c", client_secret="s", tenant_id="t")

    assert config.build_credential() == ServicePrincipal("c", "s", "t")


@pytest.mark.os_agnostic
def test_service_principal_lists_missing_fields() -> None:
    """The error names exactly what is missing."""
    config = AcsConfig(auth_method=AuthMethod.SERVICE_PRINCIPAL, client_id="c")

    with pytest.raises(ConfigurationError, match=r"acs\.client_secret, acs\.tenant_id"):
        config.build_credential()


@pytest.mark.os_agnostic
def test_managed_identity_uses_optional_client_id() -> None:
    """client_id selects a user-assigned identity."""
    config = AcsConfig(auth_method=AuthMethod.MANAGED_IDENTITY, client_id="user-assigned")

    assert config.build_credential() == ManagedIdentity("user-assigned")


# ---------------------------------------------------------------------------
# Engine settings
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_endpoint_wins_over_connection_string_host() -> None:
    """Token strategies name the resource through acs.endpoint."""
    config = AcsConfig(connection_string=CONNECTION_STRING, endpoint="https://other.communication.azure.com")

    assert config.host() == "other.communication.azure.com"


@pytest.mark.os_agnostic
def test_missing_endpoint_is_configuration_error() -> None:
    """REST delivery needs a host."""
    with pytest.raises(ConfigurationError, match="endpoint"):
        AcsConfig().rest_settings()


@pytest.mark.os_agnostic
def test_rest_settings_carry_polling_values() -> None:
    """Polling parameters flow from config into the engine."""
    settings = AcsConfig(connection_string=CONNECTION_STRING, poll_interval=2.5, poll_timeout=60).rest_settings()

    assert settings.host == "contoso.communication.azure.com"
    assert (settings.poll_interval, settings.poll_timeout) == (2.5, 60.0)


@pytest.mark.os_agnostic
def test_smtp_settings_carry_relay_values() -> None:
    """SMTP fields flow into the engine settings."""
    settings = AcsConfig(smtp_host="smtp.example.com", smtp_port=465, use_ssl=True, smtp_username="u").smtp_settings()

    assert (settings.host, settings.port, settings.use_ssl, settings.username) == ("smtp.example.com", 465, True, "u")


@pytest.mark.os_agnostic
def test_reply_to_address_includes_display_name() -> None:
    """reply_to and reply_to_display combine into one address."""
    config = AcsConfig(reply_to="support@example.com", reply_to_display="Support")

    assert config.reply_to_address() == EmailAddress("support@example.com", "Support")
    assert AcsConfig().reply_to_address() is None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_loader_flattens_nested_smtp_table() -> None:
    """Keys under [acs.smtp] map to the smtp_* fields."""
    config = load_acs_config_from_dict(
        {
            "acs": {
                "transport": "smtp",
                "smtp": {"host": "smtp.example.com", "port": 2525, "username": "u", "use_starttls": False},
            }
        }
    )

    assert config.transport is TransportKind.SMTP
    assert (config.smtp_host, config.smtp_port, config.smtp_username) == ("smtp.example.com", 2525, "u")
    assert config.use_starttls is False


@pytest.mark.os_agnostic
def test_loader_accepts_prefixed_keys_in_smtp_table() -> None:
    """smtp_password and password are equivalent inside [acs.smtp]."""
    config = load_acs_config_from_dict({"acs": {"smtp": {"smtp_password": "pw"}}})

    assert config.smtp_password == "pw"


@pytest.mark.os_agnostic
def test_loader_without_acs_section_returns_defaults() -> None:
    """A missing section is the same as an empty one."""
    assert load_acs_config_from_dict({}) == AcsConfig()


@pytest.mark.os_agnostic
def test_loader_matches_bundled_defaults() -> None:
    """The bundled defaultconfig.toml parses into a valid model."""
    import rtoml

    from acs_mail.adapters.config.loader import get_default_config_path

    data = rtoml.load(get_default_config_path())
    config = load_acs_config_from_dict(data)

    assert config == AcsConfig()
