"""In-memory email adapters for testing.

Provides delivery functions that satisfy the same Protocols as production
adapters but never open a network connection.

Contents:
    * :class:`EmailSpy` - Captures send and status calls for test assertions.
    * :func:`load_acs_config_from_dict_in_memory` - In-memory config loader.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ...domain.enums import EmailSendStatus, TransportKind
from ...domain.models import Credential, DeliveryOutcome, EmailMessage, Succeeded
from ..acs.config import AcsConfig, load_acs_config_from_dict
from ..acs.rest import RestSettings, StatusReport
from ..acs.validation import validate_message


def _empty_call_list() -> list[dict[str, Any]]:
    """Create an empty typed list for call records."""
    return []


@dataclass
class EmailSpy:
    """Captures delivery operations for test assertions.

    Each test should create its own EmailSpy instance to avoid cross-test
    pollution. The methods match the Protocol signatures expected by
    AppServices.

    Attributes:
        sent_emails: Captured ``send_email`` calls.
        status_queries: Captured ``query_email_status`` calls.
        outcome: Outcome returned by ``send_email``.
        status: Status reported by ``query_email_status``.
        status_sequence: Statuses replayed through ``on_status`` on every send.
        raise_exception: When set, both operations raise this exception.

    Example:
        >>> from acs_mail.domain.models import EmailAddress, SharedKey
        >>> spy = EmailSpy()
        >>> message = EmailMessage(
        ...     sender="noreply@example.com",
        ...     recipients=(EmailAddress("a@example.com"),),
        ...     subject="Hi",
        ...     plain_text_body="Hello",
        ... )
        >>> spy.send_email(message, TransportKind.REST, SharedKey("c2VjcmV0"), config=AcsConfig())
        Succeeded(operation_id=None)
        >>> len(spy.sent_emails)
        1
    """

    sent_emails: list[dict[str, Any]] = field(default_factory=_empty_call_list)
    status_queries: list[dict[str, Any]] = field(default_factory=_empty_call_list)
    outcome: DeliveryOutcome = field(default_factory=Succeeded)
    status: EmailSendStatus = EmailSendStatus.SUCCEEDED
    status_error: str | None = None
    status_sequence: tuple[EmailSendStatus, ...] = ()
    raise_exception: Exception | None = None

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.sent_emails.clear()
        self.status_queries.clear()
        self.raise_exception = None

    def send_email(
        self,
        message: EmailMessage,
        transport_kind: TransportKind,
        credential: Credential,
        *,
        config: AcsConfig,
        on_status: Callable[[str, EmailSendStatus], None] | None = None,
    ) -> DeliveryOutcome:
        """Validate and record the call, then return the configured outcome.

        Raises:
            ValidationError: Message would be rejected by the real engines.
            Exception: If raise_exception is set, raises that exception.
        """
        validate_message(message)
        self.sent_emails.append(
            {
                "message": message,
                "transport": transport_kind,
                "credential": credential,
                "config": config,
            }
        )
        if self.raise_exception is not None:
            raise self.raise_exception
        if on_status is not None:
            for status in self.status_sequence:
                on_status(self.outcome.operation_id or "spy-operation", status)
        return self.outcome

    def query_email_status(self, operation_id: str, credential: Credential, *, settings: RestSettings) -> StatusReport:
        """Record the call and report the configured status."""
        self.status_queries.append({"operation_id": operation_id, "credential": credential, "settings": settings})
        if self.raise_exception is not None:
            raise self.raise_exception
        return StatusReport(operation_id=operation_id, status=self.status, error_message=self.status_error)


def load_acs_config_from_dict_in_memory(config_dict: Mapping[str, Any]) -> AcsConfig:
    """Parse the ``[acs]`` section with the real Pydantic model."""
    return load_acs_config_from_dict(config_dict)


__all__ = [
    "EmailSpy",
    "load_acs_config_from_dict_in_memory",
]
