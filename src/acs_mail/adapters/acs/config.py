"""ACS configuration model and loader.

Provides the AcsConfig Pydantic model for validated, immutable delivery
settings and the loader that builds it from the ``[acs]`` section of the
layered configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from btx_lib_mail import validate_email_address, validate_smtp_host
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from acs_mail.domain.connection_string import parse_connection_string, parse_host
from acs_mail.domain.enums import AuthMethod, TransportKind
from acs_mail.domain.errors import ConfigurationError
from acs_mail.domain.models import Credential, EmailAddress, ManagedIdentity, ServicePrincipal, SharedKey

from .rest import API_VERSION, RestSettings
from .smtp import SmtpSettings

_SECRET_FIELDS = frozenset({"connection_string", "client_secret", "smtp_password"})


class AcsConfig(BaseModel):
    """Validated, immutable Communication Services settings.

    Example:
        >>> config = AcsConfig(
        ...     connection_string="endpoint=https://contoso.communication.azure.com/;accesskey=c2VjcmV0",
        ...     sender="DoNotReply@contoso.com",
        ... )
        >>> config.transport
        <TransportKind.REST: 'rest'>
        >>> config.rest_settings().host
        'contoso.communication.azure.com'
    """

    model_config = ConfigDict(frozen=True)

    transport: TransportKind = TransportKind.REST
    auth_method: AuthMethod = AuthMethod.SHARED_KEY
    connection_string: str | None = None
    endpoint: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    tenant_id: str | None = None
    sender: str | None = None
    reply_to: str | None = None
    reply_to_display: str | None = None
    recipients: list[str] = Field(default_factory=list)

    api_version: str = API_VERSION
    poll_interval: float = 5.0
    poll_timeout: float = 300.0
    request_timeout: float = 30.0

    smtp_host: str = "smtp.azurecomm.net"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    use_starttls: bool = True
    use_ssl: bool = False
    smtp_timeout: float = 30.0

    @field_validator("recipients", mode="before")
    @classmethod
    def _coerce_string_to_list(cls, v: Any) -> list[str]:
        """Coerce single strings to single-element lists.

        Examples:
            >>> AcsConfig._coerce_string_to_list("a@example.com")
            ['a@example.com']
            >>> AcsConfig._coerce_string_to_list("")
            []
        """
        if isinstance(v, str):
            return [v] if v.strip() else []
        if isinstance(v, list):
            return cast(list[str], v)
        return []

    @field_validator(
        "connection_string",
        "endpoint",
        "client_id",
        "client_secret",
        "tenant_id",
        "sender",
        "reply_to",
        "reply_to_display",
        "smtp_username",
        "smtp_password",
        mode="before",
    )
    @classmethod
    def _coerce_empty_string_to_none(cls, v: str | None) -> str | None:
        """Treat empty or whitespace-only strings from config files as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _validate_config(self) -> AcsConfig:
        """Catch obviously wrong values early.

        Example:
            >>> AcsConfig(poll_interval=0)  # doctest: +IGNORE_EXCEPTION_DETAIL
            Traceback (most recent call last):
            ...
            ValidationError: ...
        """
        for name in ("poll_interval", "poll_timeout", "request_timeout", "smtp_timeout"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if not 0 < self.smtp_port < 65536:
            raise ValueError(f"smtp_port out of range: {self.smtp_port}")

        for address in (self.sender, self.reply_to):
            if address is not None:
                validate_email_address(address)
        for recipient in self.recipients:
            validate_email_address(recipient)
        validate_smtp_host(f"{self.smtp_host}:{self.smtp_port}")
        return self

    def __repr__(self) -> str:
        """Return string representation with secrets redacted.

        Example:
            >>> config = AcsConfig(client_secret="hunter2")
            >>> "hunter2" in repr(config)
            False
            >>> "[REDACTED]" in repr(config)
            True
        """
        fields: list[str] = []
        for name, value in self:
            if name in _SECRET_FIELDS and value is not None:
                fields.append(f"{name}='[REDACTED]'")
            else:
                fields.append(f"{name}={value!r}")
        return f"AcsConfig({', '.join(fields)})"

    def host(self) -> str:
        """Return the resource host from ``endpoint`` or the connection string.

        Raises:
            ConfigurationError: Neither source is configured.
        """
        if self.endpoint is not None:
            return parse_host(self.endpoint)
        if self.connection_string is not None:
            return parse_connection_string(self.connection_string).host
        raise ConfigurationError("No ACS endpoint configured (set acs.endpoint or acs.connection_string)")

    def build_credential(self) -> Credential:
        """Turn the configured auth method into a Credential variant.

        Raises:
            ConfigurationError: Required fields for the auth method are missing.

        Example:
            >>> AcsConfig(auth_method="managed-identity").build_credential()
            ManagedIdentity(client_id=None)
        """
        if self.auth_method is AuthMethod.SHARED_KEY:
            if self.connection_string is None:
                raise ConfigurationError("auth_method 'shared-key' requires acs.connection_string")
            return SharedKey(parse_connection_string(self.connection_string).access_key)
        if self.auth_method is AuthMethod.SERVICE_PRINCIPAL:
            missing = [
                name for name in ("client_id", "client_secret", "tenant_id") if getattr(self, name) is None
            ]
            if missing:
                raise ConfigurationError(f"auth_method 'service-principal' requires acs.{', acs.'.join(missing)}")
            return ServicePrincipal(
                client_id=cast(str, self.client_id),
                client_secret=cast(str, self.client_secret),
                tenant_id=cast(str, self.tenant_id),
            )
        return ManagedIdentity(client_id=self.client_id)

    def reply_to_address(self) -> EmailAddress | None:
        """Return the configured default reply-to address, if any."""
        if self.reply_to is None:
            return None
        return EmailAddress(self.reply_to, self.reply_to_display)

    def rest_settings(self) -> RestSettings:
        """Build the REST engine settings."""
        return RestSettings(
            host=self.host(),
            api_version=self.api_version,
            poll_interval=self.poll_interval,
            poll_timeout=self.poll_timeout,
            request_timeout=self.request_timeout,
        )

    def smtp_settings(self) -> SmtpSettings:
        """Build the SMTP engine settings."""
        return SmtpSettings(
            host=self.smtp_host,
            port=self.smtp_port,
            username=self.smtp_username,
            password=self.smtp_password,
            use_starttls=self.use_starttls,
            use_ssl=self.use_ssl,
            timeout=self.smtp_timeout,
        )


def load_acs_config_from_dict(config_dict: Mapping[str, Any]) -> AcsConfig:
    """Load AcsConfig from a configuration dictionary.

    Flattens the nested ``[acs.smtp]`` table into the ``smtp_*`` and TLS
    fields; keys there may be given with or without the ``smtp_`` prefix.

    Example:
        >>> config = load_acs_config_from_dict(
        ...     {"acs": {"transport": "smtp", "smtp": {"host": "smtp.example.com", "port": 465}}}
        ... )
        >>> (config.transport.value, config.smtp_host, config.smtp_port)
        ('smtp', 'smtp.example.com', 465)
    """
    acs_section: Any = config_dict.get("acs", {})

    if not isinstance(acs_section, Mapping):
        return AcsConfig.model_validate(acs_section)

    acs_raw: dict[str, Any] = dict(cast(Mapping[str, Any], acs_section))

    smtp_raw: Any = acs_raw.pop("smtp", {})
    if isinstance(smtp_raw, Mapping):
        for key, value in cast(Mapping[str, Any], smtp_raw).items():
            if key in {"use_starttls", "use_ssl"} or key.startswith("smtp_"):
                acs_raw[key] = value
            else:
                acs_raw[f"smtp_{key}"] = value

    return AcsConfig.model_validate(acs_raw)


__all__ = [
    "AcsConfig",
    "load_acs_config_from_dict",
]
