"""Message validation shared by both delivery engines and test adapters.

Raises domain exceptions (ValidationError, InvalidRecipientError) rather
than library-specific exceptions, always before any network call.
"""

from __future__ import annotations

from collections.abc import Sequence

from btx_lib_mail import validate_email_address

from acs_mail.domain.errors import InvalidRecipientError, ValidationError
from acs_mail.domain.models import EmailMessage


def validate_recipient(recipient: str) -> None:
    """Validate a single email address.

    Raises:
        InvalidRecipientError: When the email address is invalid.

    Example:
        >>> validate_recipient("valid@example.com")  # no exception
        >>> validate_recipient("invalid")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        InvalidRecipientError: Invalid recipient: invalid
    """
    try:
        validate_email_address(recipient)
    except ValueError as e:
        raise InvalidRecipientError(f"Invalid recipient: {recipient}") from e


def validate_recipients(recipients: str | Sequence[str] | None) -> None:
    """Validate runtime recipients.

    Example:
        >>> validate_recipients(None)  # no-op
        >>> validate_recipients(["a@example.com", "b@example.com"])
    """
    if recipients is None:
        return
    recipient_list = [recipients] if isinstance(recipients, str) else list(recipients)
    for recipient in recipient_list:
        validate_recipient(recipient)


def validate_message(message: EmailMessage) -> None:
    """Reject messages that must never be sent.

    Raises:
        ValidationError: No "To" recipient, or neither a plain-text nor an
            HTML body.
        InvalidRecipientError: Sender, reply-to, or any recipient address
            is malformed.
    """
    if not message.recipients:
        raise ValidationError("Message has no recipients")
    if not message.plain_text_body and not message.html_body:
        raise ValidationError("Message has neither a plain-text nor an HTML body")
    try:
        validate_email_address(message.sender)
    except ValueError as e:
        raise InvalidRecipientError(f"Invalid sender: {message.sender}") from e
    if message.reply_to is not None:
        validate_recipient(message.reply_to.address)
    validate_recipients(message.all_recipients())


__all__ = ["validate_message", "validate_recipient", "validate_recipients"]
