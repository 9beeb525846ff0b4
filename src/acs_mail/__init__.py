"""Azure Communication Services email client.

Public surface routed through the architectural layers:

- Domain exports: message and credential models, delivery outcomes, errors
- Composition exports: wired configuration and delivery services
- Metadata: package information
"""

from __future__ import annotations

# Metadata
from .__init__conf__ import print_info

# Composition exports (wired adapters)
from .composition import get_config, get_email_status, send

# Domain exports
from .domain import (
    AuthenticationFailed,
    ConfigurationError,
    EmailAddress,
    EmailAttachment,
    EmailMessage,
    EmailSendStatus,
    Failed,
    ManagedIdentity,
    ServicePrincipal,
    SharedKey,
    SubmissionFailed,
    Succeeded,
    TimedOut,
    TransportKind,
    ValidationError,
)

__all__ = [
    "AuthenticationFailed",
    "ConfigurationError",
    "EmailAddress",
    "EmailAttachment",
    "EmailMessage",
    "EmailSendStatus",
    "Failed",
    "ManagedIdentity",
    "ServicePrincipal",
    "SharedKey",
    "SubmissionFailed",
    "Succeeded",
    "TimedOut",
    "TransportKind",
    "ValidationError",
    "get_config",
    "get_email_status",
    "print_info",
    "send",
]
