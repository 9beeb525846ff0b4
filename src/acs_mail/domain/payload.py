"""Shape an :class:`EmailMessage` into the REST submit payload."""

from __future__ import annotations

import base64
from typing import Any

from .models import EmailAddress, EmailMessage


def _address(entry: EmailAddress) -> dict[str, str]:
    result = {"address": entry.address}
    if entry.display_name:
        result["displayName"] = entry.display_name
    return result


def build_send_payload(message: EmailMessage) -> dict[str, Any]:
    """Return the JSON-ready ``emails:send`` body for ``message``.

    Optional sections are omitted when empty.

    Example:
        >>> msg = EmailMessage(
        ...     sender="noreply@example.com",
        ...     recipients=(EmailAddress("a@example.com", "A"),),
        ...     subject="Hi",
        ...     plain_text_body="Hello",
        ... )
        >>> payload = build_send_payload(msg)
        >>> payload["recipients"]["to"]
        [{'address': 'a@example.com', 'displayName': 'A'}]
        >>> "replyTo" in payload
        False
    """
    content: dict[str, str] = {"subject": message.subject}
    if message.plain_text_body:
        content["plainText"] = message.plain_text_body
    if message.html_body:
        content["html"] = message.html_body

    recipients: dict[str, list[dict[str, str]]] = {"to": [_address(r) for r in message.recipients]}
    if message.cc:
        recipients["cc"] = [_address(r) for r in message.cc]
    if message.bcc:
        recipients["bcc"] = [_address(r) for r in message.bcc]

    payload: dict[str, Any] = {
        "senderAddress": message.sender,
        "content": content,
        "recipients": recipients,
    }
    if message.reply_to is not None:
        payload["replyTo"] = [_address(message.reply_to)]
    if message.attachments:
        payload["attachments"] = [
            {
                "name": attachment.name,
                "contentType": attachment.content_type,
                "contentInBase64": base64.b64encode(attachment.content).decode("ascii"),
            }
            for attachment in message.attachments
        ]
    if message.headers:
        payload["headers"] = dict(message.headers)
    if message.disable_engagement_tracking:
        payload["userEngagementTrackingDisabled"] = True
    return payload


__all__ = ["build_send_payload"]
