"""Transport selector dispatching one send to the REST or SMTP engine.

Callers swap transports by changing ``transport_kind`` only; message and
credential stay the same.
"""

from __future__ import annotations

import logging
import smtplib
import time
from collections.abc import Callable
from datetime import datetime, timezone

import httpx

from acs_mail.domain.enums import TransportKind
from acs_mail.domain.models import AuthMaterial, Credential, DeliveryOutcome, EmailMessage

from .config import AcsConfig
from .credentials import resolve_auth_material
from .rest import StatusCallback, send_via_rest
from .smtp import send_via_smtp
from .validation import validate_message

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def send(
    message: EmailMessage,
    transport_kind: TransportKind,
    credential: Credential,
    *,
    config: AcsConfig,
    resolve: Callable[[Credential], AuthMaterial] = resolve_auth_material,
    client: httpx.Client | None = None,
    smtp_factory: Callable[..., smtplib.SMTP] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    now: Callable[[], datetime] = _utcnow,
    on_status: StatusCallback | None = None,
) -> DeliveryOutcome:
    """Validate ``message`` once and hand it to the selected engine.

    REST-only hooks (``client``, ``sleep``, ``clock``, ``now``, ``on_status``)
    are ignored for SMTP, and ``smtp_factory`` is ignored for REST.

    Returns:
        The engine's terminal DeliveryOutcome.

    Raises:
        ValidationError: Message rejected before any network call.
        ConfigurationError: Settings for the selected engine are incomplete.
        AuthenticationFailed: Token exchange failed.
        SubmissionFailed: REST submit was not accepted.
    """
    validate_message(message)
    logger.debug("Dispatching email", extra={"transport": transport_kind.value})

    if transport_kind is TransportKind.SMTP:
        return send_via_smtp(
            message,
            credential,
            settings=config.smtp_settings(),
            resolve=resolve,
            smtp_factory=smtp_factory,
        )
    return send_via_rest(
        message,
        credential,
        settings=config.rest_settings(),
        client=client,
        resolve=resolve,
        now=now,
        sleep=sleep,
        clock=clock,
        on_status=on_status,
    )


__all__ = ["send"]
