"""Immutable value objects for credentials, messages, signed requests, and outcomes.

Closed variant sets (credentials, auth material, delivery outcomes) are plain
frozen dataclasses joined by a type alias. Consumers dispatch with
``isinstance`` in a single function rather than through methods on a class
hierarchy.

Contents:
    * :data:`Credential` - ``SharedKey | ServicePrincipal | ManagedIdentity``
    * :class:`AccessToken` - Bearer token with expiry.
    * :data:`AuthMaterial` - ``SharedKey | AccessToken``
    * :class:`SignedRequest` - Everything that goes on the wire for one request.
    * :class:`EmailMessage` - Caller-built message consumed by both engines.
    * :data:`DeliveryOutcome` - ``Accepted | Succeeded | Failed | TimedOut``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .enums import EmailSendStatus

# ======================== Credentials ========================


@dataclass(frozen=True, slots=True)
class SharedKey:
    """Pre-shared access key, base64 text exactly as issued by the service.

    Example:
        >>> "c2VjcmV0" in repr(SharedKey("c2VjcmV0"))
        False
    """

    key: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class ServicePrincipal:
    """Application identity authenticated with a client secret."""

    client_id: str
    client_secret: str = field(repr=False)
    tenant_id: str


@dataclass(frozen=True, slots=True)
class ManagedIdentity:
    """Identity bound to the executing host.

    ``client_id`` selects a user-assigned identity; None uses the
    system-assigned one.
    """

    client_id: str | None = None


Credential = SharedKey | ServicePrincipal | ManagedIdentity


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token obtained from the identity provider.

    Example:
        >>> from datetime import datetime, timezone
        >>> token = AccessToken("abc", datetime(2030, 1, 1, tzinfo=timezone.utc))
        >>> token.is_expired(datetime(2029, 1, 1, tzinfo=timezone.utc))
        False
        >>> "abc" in repr(token)
        False
    """

    value: str = field(repr=False)
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


AuthMaterial = SharedKey | AccessToken


# ======================== Signed request ========================


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """A request together with the authorization computed over it.

    The authorization header covers ``(method, url_path, host, content_hash,
    date)``. Instances are frozen; a changed request needs a new signature.
    """

    method: str
    url_path: str
    host: str
    content_hash: str
    date: str
    authorization_header: str = field(repr=False)
    body: bytes = field(repr=False)

    def headers(self) -> dict[str, str]:
        """Return the signing-related headers placed on the wire."""
        return {
            "x-ms-date": self.date,
            "x-ms-content-sha256": self.content_hash,
            "host": self.host,
            "Authorization": self.authorization_header,
        }


# ======================== Email message ========================


@dataclass(frozen=True, slots=True)
class EmailAddress:
    """Address with optional display name."""

    address: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class EmailAttachment:
    """In-memory attachment payload."""

    name: str
    content_type: str
    content: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class EmailMessage:
    """Message composed by the caller, read-only for the delivery engines.

    ``recipients`` are the ordered "To" addresses. Cc and Bcc are optional
    extras; at least one "To" recipient is always required.

    Example:
        >>> message = EmailMessage(
        ...     sender="noreply@example.com",
        ...     recipients=(EmailAddress("user@example.com"),),
        ...     subject="Hi",
        ...     plain_text_body="Hello",
        ... )
        >>> message.all_recipients()
        ['user@example.com']
    """

    sender: str
    recipients: tuple[EmailAddress, ...]
    subject: str
    plain_text_body: str = ""
    html_body: str = ""
    reply_to: EmailAddress | None = None
    cc: tuple[EmailAddress, ...] = ()
    bcc: tuple[EmailAddress, ...] = ()
    attachments: tuple[EmailAttachment, ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    disable_engagement_tracking: bool = False

    def all_recipients(self) -> list[str]:
        """Return every envelope recipient address: To, then Cc, then Bcc."""
        return [entry.address for entry in (*self.recipients, *self.cc, *self.bcc)]


# ======================== Delivery outcomes ========================


@dataclass(frozen=True, slots=True)
class Accepted:
    """The service accepted the submission; final status not yet known."""

    operation_id: str
    is_terminal = False


@dataclass(frozen=True, slots=True)
class Succeeded:
    """The message was delivered to the service or relay."""

    operation_id: str | None = None
    is_terminal = True


@dataclass(frozen=True, slots=True)
class Failed:
    """Delivery was rejected: terminal negative status or SMTP error."""

    reason: str
    operation_id: str | None = None
    is_terminal = True


@dataclass(frozen=True, slots=True)
class TimedOut:
    """The polling deadline elapsed before a terminal status was seen.

    The delivery result is unknown, not rejected.
    """

    operation_id: str
    last_status: EmailSendStatus | None = None
    is_terminal = True


DeliveryOutcome = Accepted | Succeeded | Failed | TimedOut


__all__ = [
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
]
