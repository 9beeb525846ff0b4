"""SMTP delivery engine for the Communication Services SMTP relay.

Submits one MIME message synchronously. Shared-key deployments log in with
the static SMTP username and password; token credentials authenticate with
``AUTH XOAUTH2`` using a freshly resolved bearer token.

Contents:
    * :class:`SmtpSettings` - Relay endpoint, TLS mode, and credentials.
    * :func:`build_mime_message` - Compose the RFC 5322 message.
    * :func:`build_xoauth2_string` - SASL XOAUTH2 initial response.
    * :func:`send_via_smtp` - Validate, authenticate, and submit.
"""

from __future__ import annotations

import logging
import re
import smtplib
import ssl
from collections.abc import Callable
from dataclasses import dataclass, field
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr, formatdate, make_msgid

from acs_mail.domain.errors import ConfigurationError
from acs_mail.domain.models import (
    AccessToken,
    AuthMaterial,
    Credential,
    DeliveryOutcome,
    EmailAddress,
    EmailMessage,
    Failed,
    SharedKey,
    Succeeded,
)

from .credentials import resolve_auth_material
from .validation import validate_message

logger = logging.getLogger(__name__)

Resolver = Callable[[Credential], AuthMaterial]

_REDACTED = "[REDACTED]"
_SECRET_ASSIGNMENT = re.compile(r"(?i)\b(password|passwd|pwd|secret|token|access_?key)(\s*[=:]\s*)\S+")
_BEARER_VALUE = re.compile(r"(?i)\b(bearer\s+)\S+")


@dataclass(frozen=True, slots=True)
class SmtpSettings:
    """Relay connection parameters.

    Example:
        >>> SmtpSettings(host="smtp.azurecomm.net", password="pw")
        SmtpSettings(host='smtp.azurecomm.net', port=587, username=None, use_starttls=True, use_ssl=False, timeout=30.0)
    """

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    use_starttls: bool = True
    use_ssl: bool = False
    timeout: float = 30.0


def _sanitize_exception_message(exc: Exception, secrets: tuple[str, ...] = ()) -> str:
    """Return the error text with credential values masked.

    Known secrets are replaced wherever they appear, as are values following
    ``password=``, ``token:`` and similar labels, and bearer tokens. The rest
    of the server's reply is kept so the failure stays diagnosable.

    Example:
        >>> _sanitize_exception_message(OSError("Connection refused"))
        'Connection refused'
        >>> _sanitize_exception_message(OSError("535 5.7.3 Authentication unsuccessful token=abc"))
        '535 5.7.3 Authentication unsuccessful token=[REDACTED]'
        >>> _sanitize_exception_message(OSError("rejected pw hunter2"), ("hunter2",))
        'rejected pw [REDACTED]'
    """
    text = str(exc) or type(exc).__name__
    for secret in secrets:
        if secret:
            text = text.replace(secret, _REDACTED)
    text = _SECRET_ASSIGNMENT.sub(rf"\1\2{_REDACTED}", text)
    return _BEARER_VALUE.sub(rf"\1{_REDACTED}", text)


def _format_address(address: EmailAddress) -> str:
    return formataddr((address.display_name or "", address.address))


def build_mime_message(message: EmailMessage) -> MimeMessage:
    """Compose the MIME message submitted to the relay.

    Bcc recipients are left out of the headers; they only travel in the
    SMTP envelope.

    Example:
        >>> msg = EmailMessage(
        ...     sender="noreply@contoso.com",
        ...     recipients=(EmailAddress("a@example.com", "Alice"),),
        ...     subject="Hi",
        ...     plain_text_body="Hello",
        ... )
        >>> mime = build_mime_message(msg)
        >>> mime["To"]
        'Alice <a@example.com>'
        >>> mime.get_content_type()
        'text/plain'
    """
    mime = MimeMessage()
    mime["From"] = message.sender
    mime["To"] = ", ".join(_format_address(addr) for addr in message.recipients)
    if message.cc:
        mime["Cc"] = ", ".join(_format_address(addr) for addr in message.cc)
    if message.reply_to is not None:
        mime["Reply-To"] = _format_address(message.reply_to)
    mime["Subject"] = message.subject
    mime["Date"] = formatdate(localtime=False, usegmt=True)
    mime["Message-ID"] = make_msgid(domain=message.sender.rpartition("@")[2] or None)
    for name, value in message.headers:
        mime[name] = value

    if message.plain_text_body:
        mime.set_content(message.plain_text_body)
        if message.html_body:
            mime.add_alternative(message.html_body, subtype="html")
    else:
        mime.set_content(message.html_body, subtype="html")

    for attachment in message.attachments:
        maintype, _, subtype = attachment.content_type.partition("/")
        mime.add_attachment(
            attachment.content,
            maintype=maintype or "application",
            subtype=subtype or "octet-stream",
            filename=attachment.name,
        )
    return mime


def build_xoauth2_string(username: str, token: str) -> str:
    r"""Return the SASL XOAUTH2 initial client response (not base64 encoded).

    Example:
        >>> build_xoauth2_string("user@contoso.com", "tok")
        'user=user@contoso.com\x01auth=Bearer tok\x01\x01'
    """
    return f"user={username}\x01auth=Bearer {token}\x01\x01"


def _open_connection(
    settings: SmtpSettings, tls_context: ssl.SSLContext, smtp_factory: Callable[..., smtplib.SMTP] | None
) -> smtplib.SMTP:
    if settings.use_ssl:
        ssl_factory = smtp_factory or smtplib.SMTP_SSL
        return ssl_factory(settings.host, settings.port, timeout=settings.timeout, context=tls_context)
    return (smtp_factory or smtplib.SMTP)(settings.host, settings.port, timeout=settings.timeout)


def _authenticate(connection: smtplib.SMTP, material: AuthMaterial, settings: SmtpSettings) -> None:
    username = settings.username or ""
    if isinstance(material, AccessToken):
        xoauth2 = build_xoauth2_string(username, material.value)
        # A 334 after the initial response carries an error document; the reply must be empty.
        connection.auth(
            "XOAUTH2",
            lambda challenge=None: xoauth2 if challenge is None else "",
            initial_response_ok=True,
        )
        return
    connection.login(username, settings.password or "")


def _check_static_login(settings: SmtpSettings) -> None:
    if not settings.username or not settings.password:
        raise ConfigurationError(
            "Shared-key SMTP delivery requires acs.smtp.username and acs.smtp.password"
        )


def send_via_smtp(
    message: EmailMessage,
    credential: Credential,
    *,
    settings: SmtpSettings,
    resolve: Resolver = resolve_auth_material,
    smtp_factory: Callable[..., smtplib.SMTP] | None = None,
    ssl_context: ssl.SSLContext | None = None,
) -> DeliveryOutcome:
    """Submit ``message`` to the SMTP relay.

    Args:
        message: Message to send.
        credential: Configured credential variant. Token variants are
            resolved before any connection is opened.
        settings: Relay endpoint, TLS mode, and static login.
        resolve: Credential provider.
        smtp_factory: Replaces ``smtplib.SMTP``/``SMTP_SSL`` in tests.
        ssl_context: TLS context for implicit TLS and STARTTLS. Defaults to
            ``ssl.create_default_context()``, which verifies the relay's
            certificate and hostname.

    Returns:
        ``Succeeded`` when the relay accepted the message, otherwise
        ``Failed`` with a sanitized reason.

    Raises:
        ValidationError: Message rejected before any network call.
        AuthenticationFailed: Token exchange failed.
        ConfigurationError: Shared-key credential without SMTP username and
            password, or no SMTP username for XOAUTH2.
    """
    validate_message(message)
    if isinstance(credential, SharedKey):
        _check_static_login(settings)
        material: AuthMaterial = credential
    else:
        if not settings.username:
            raise ConfigurationError("Token-based SMTP delivery requires acs.smtp.username")
        material = resolve(credential)

    tls_context = ssl_context or ssl.create_default_context()
    mime = build_mime_message(message)
    envelope = message.all_recipients()
    logger.info(
        "Sending email via SMTP",
        extra={
            "host": settings.host,
            "port": settings.port,
            "sender": message.sender,
            "recipients": envelope,
            "subject": message.subject,
            "attachment_count": len(message.attachments),
        },
    )

    try:
        with _open_connection(settings, tls_context, smtp_factory) as connection:
            connection.ehlo()
            if settings.use_starttls and not settings.use_ssl:
                connection.starttls(context=tls_context)
                connection.ehlo()
            _authenticate(connection, material, settings)
            refused = connection.send_message(mime, from_addr=message.sender, to_addrs=envelope)
    except (smtplib.SMTPException, OSError) as exc:
        secrets = (settings.password or "", material.value if isinstance(material, AccessToken) else "")
        reason = _sanitize_exception_message(exc, secrets)
        logger.error("SMTP delivery failed", extra={"host": settings.host, "error": reason})
        return Failed(reason)

    if refused:
        logger.warning("SMTP relay refused some recipients", extra={"refused": sorted(refused)})
    logger.info("Email sent successfully", extra={"sender": message.sender, "recipients": envelope})
    return Succeeded()


__all__ = [
    "SmtpSettings",
    "build_mime_message",
    "build_xoauth2_string",
    "send_via_smtp",
]
