"""Domain layer - pure business logic with no I/O or framework dependencies.

Contents:
    * :mod:`.models` - Credentials, messages, signed requests, outcomes
    * :mod:`.signing` - Shared-key and bearer request signing
    * :mod:`.payload` - REST submit payload shaping
    * :mod:`.connection_string` - Connection string parsing
    * :mod:`.enums` - Domain enumerations
    * :mod:`.errors` - Domain exception types
"""

from __future__ import annotations

from .connection_string import ConnectionString, parse_connection_string
from .enums import AuthMethod, EmailSendStatus, OutputFormat, TransportKind
from .errors import (
    AuthenticationFailed,
    ConfigurationError,
    InvalidRecipientError,
    StatusQueryFailed,
    SubmissionFailed,
    ValidationError,
)
from .models import (
    Accepted,
    AccessToken,
    AuthMaterial,
    Credential,
    DeliveryOutcome,
    EmailAddress,
    EmailAttachment,
    EmailMessage,
    Failed,
    ManagedIdentity,
    ServicePrincipal,
    SharedKey,
    SignedRequest,
    Succeeded,
    TimedOut,
)
from .payload import build_send_payload
from .signing import sign_request, verify_signature

__all__ = [
    # Models
    "Accepted",
    "AccessToken",
    "AuthMaterial",
    "Credential",
    "DeliveryOutcome",
    "EmailAddress",
    "EmailAttachment",
    "EmailMessage",
    "Failed",
    "ManagedIdentity",
    "ServicePrincipal",
    "SharedKey",
    "SignedRequest",
    "Succeeded",
    "TimedOut",
    # Behaviors
    "ConnectionString",
    "build_send_payload",
    "parse_connection_string",
    "sign_request",
    "verify_signature",
    # Enums
    "AuthMethod",
    "EmailSendStatus",
    "OutputFormat",
    "TransportKind",
    # Errors
    "AuthenticationFailed",
    "ConfigurationError",
    "InvalidRecipientError",
    "StatusQueryFailed",
    "SubmissionFailed",
    "ValidationError",
]
