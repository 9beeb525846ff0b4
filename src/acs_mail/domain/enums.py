"""Type-safe domain enums for transports, auth methods, and send status."""

from __future__ import annotations

from enum import Enum


class OutputFormat(str, Enum):
    """Output format options for configuration display.

    Inherits from str to allow direct string comparison and Click integration.

    Example:
        >>> OutputFormat.HUMAN.value
        'human'
        >>> OutputFormat.JSON == "json"
        True
    """

    HUMAN = "human"
    JSON = "json"


class TransportKind(str, Enum):
    """Delivery transport selected once from configuration.

    Example:
        >>> TransportKind("smtp") is TransportKind.SMTP
        True
    """

    REST = "rest"
    SMTP = "smtp"


class AuthMethod(str, Enum):
    """Credential strategy used to authorize requests.

    Example:
        >>> AuthMethod("managed-identity")
        <AuthMethod.MANAGED_IDENTITY: 'managed-identity'>
        >>> AuthMethod.SHARED_KEY.uses_token
        False
    """

    SHARED_KEY = "shared-key"
    SERVICE_PRINCIPAL = "service-principal"
    MANAGED_IDENTITY = "managed-identity"

    @property
    def uses_token(self) -> bool:
        """True for the strategies that need a bearer token."""
        return self is not AuthMethod.SHARED_KEY


class EmailSendStatus(str, Enum):
    """Status of an email operation as reported by the status endpoint.

    Unrecognised values parse to ``UNKNOWN``, which is terminal.

    Example:
        >>> EmailSendStatus.parse("Running").is_terminal
        False
        >>> EmailSendStatus.parse("OutForDelivery")
        <EmailSendStatus.UNKNOWN: 'Unknown'>
    """

    UNKNOWN = "Unknown"
    CANCELED = "Canceled"
    FAILED = "Failed"
    NOT_STARTED = "NotStarted"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"

    @classmethod
    def parse(cls, raw: object) -> EmailSendStatus:
        """Map a raw status field to a member, defaulting to ``UNKNOWN``."""
        for member in cls:
            if member.value == raw:
                return member
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self not in (EmailSendStatus.NOT_STARTED, EmailSendStatus.RUNNING)


__all__ = [
    "AuthMethod",
    "EmailSendStatus",
    "OutputFormat",
    "TransportKind",
]
