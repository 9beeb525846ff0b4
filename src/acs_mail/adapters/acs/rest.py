"""REST delivery engine for the Communication Services Email API.

The email API is asynchronous: a signed ``POST /emails:send`` returns
``202 Accepted`` with an operation id, and the final result is read by
polling ``GET /emails/operations/{id}``. Every request, including every
poll, resolves the credential again and is signed with a fresh date.

Contents:
    * :class:`RestSettings` - Host, API version, and polling parameters.
    * :func:`submit_email` - Signed submit, returns ``Accepted``.
    * :func:`get_email_status` - One signed status query.
    * :func:`poll_until_terminal` - Deadline-bounded polling loop.
    * :func:`send_via_rest` - Validate, submit, and poll.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, cast
from urllib.parse import quote, urlsplit

import httpx
import orjson

from acs_mail.domain.enums import EmailSendStatus
from acs_mail.domain.errors import StatusQueryFailed, SubmissionFailed
from acs_mail.domain.models import (
    Accepted,
    AuthMaterial,
    Credential,
    DeliveryOutcome,
    EmailMessage,
    Failed,
    Succeeded,
    TimedOut,
)
from acs_mail.domain.payload import build_send_payload
from acs_mail.domain.signing import format_http_date, sign_request

from .credentials import resolve_auth_material
from .validation import validate_message

logger = logging.getLogger(__name__)

API_VERSION = "2023-03-31"

Resolver = Callable[[Credential], AuthMaterial]
StatusCallback = Callable[[str, EmailSendStatus], None]


@dataclass(frozen=True, slots=True)
class RestSettings:
    """Connection and polling parameters for the REST engine.

    Example:
        >>> RestSettings(host="contoso.communication.azure.com").poll_interval
        5.0
    """

    host: str
    api_version: str = API_VERSION
    poll_interval: float = 5.0
    poll_timeout: float = 300.0
    request_timeout: float = 30.0


@dataclass(frozen=True, slots=True)
class StatusReport:
    """Parsed status endpoint answer."""

    operation_id: str
    status: EmailSendStatus
    error_message: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _client_scope(client: httpx.Client | None, settings: RestSettings) -> Iterator[httpx.Client]:
    """Yield the caller's client untouched, or an owned one closed on exit."""
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=settings.request_timeout) as owned:
        yield owned


def _parse_json(response: httpx.Response) -> dict[str, Any]:
    """Return the JSON object body, or an empty dict when there is none."""
    try:
        parsed: object = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return {}
    return cast(dict[str, Any], parsed) if isinstance(parsed, dict) else {}


def _error_message(body: dict[str, Any]) -> str | None:
    """Extract ``error.message`` from a service error body."""
    error: object = body.get("error")
    if isinstance(error, dict):
        message = cast(dict[str, Any], error).get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _signed_call(
    client: httpx.Client,
    credential: Credential,
    *,
    method: str,
    path_and_query: str,
    body: bytes,
    settings: RestSettings,
    resolve: Resolver,
    moment: datetime,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Resolve auth material, sign, and send one request.

    The signature covers the path exactly as httpx puts it on the wire.
    """
    request = client.build_request(method, f"https://{settings.host}{path_and_query}", content=body or None)
    signed = sign_request(
        credential,
        resolve(credential),
        method=method,
        url_path=request.url.raw_path.decode("ascii"),
        host=settings.host,
        body=body,
        now=moment,
    )
    request.headers.update({**signed.headers(), **(extra_headers or {})})
    return client.send(request)


def _operation_id(response: httpx.Response, body: dict[str, Any]) -> str | None:
    """Read the operation id from the body, falling back to Operation-Location."""
    candidate = body.get("id")
    if isinstance(candidate, str) and candidate:
        return candidate
    location = response.headers.get("operation-location")
    if location:
        tail = urlsplit(location).path.rstrip("/").rsplit("/", 1)[-1]
        return tail or None
    return None


def submit_email(
    message: EmailMessage,
    credential: Credential,
    *,
    settings: RestSettings,
    client: httpx.Client,
    resolve: Resolver = resolve_auth_material,
    now: Callable[[], datetime] = _utcnow,
) -> Accepted:
    """POST the signed submit request and return the accepted operation.

    The submit step is never retried here; callers re-invoke to retry.

    Raises:
        SubmissionFailed: Non-202 answer, missing operation id, or no answer.
        AuthenticationFailed: Token exchange failed.
        ConfigurationError: Malformed shared key.
    """
    body = orjson.dumps(build_send_payload(message))
    moment = now()
    request_id = str(uuid.uuid4())
    try:
        response = _signed_call(
            client,
            credential,
            method="POST",
            path_and_query=f"/emails:send?api-version={settings.api_version}",
            body=body,
            settings=settings,
            resolve=resolve,
            moment=moment,
            extra_headers={
                "Content-Type": "application/json",
                "repeatability-request-id": request_id,
                "repeatability-first-sent": format_http_date(moment),
                "x-ms-client-request-id": request_id,
            },
        )
    except httpx.HTTPError as exc:
        logger.debug("Submit request failed", exc_info=True)
        raise SubmissionFailed(None, str(exc)) from exc

    parsed = _parse_json(response)
    if response.status_code != httpx.codes.ACCEPTED:
        detail = _error_message(parsed)
        logger.error(
            "Email submission rejected",
            extra={"status_code": response.status_code, "error": detail, "request_id": request_id},
        )
        text = f"Email submission rejected with HTTP {response.status_code}"
        raise SubmissionFailed(response.status_code, response.text, f"{text}: {detail}" if detail else text)

    operation_id = _operation_id(response, parsed)
    if operation_id is None:
        raise SubmissionFailed(response.status_code, response.text, "Submit response carried no operation id")
    return Accepted(operation_id)


def get_email_status(
    operation_id: str,
    credential: Credential,
    *,
    settings: RestSettings,
    client: httpx.Client | None = None,
    resolve: Resolver = resolve_auth_material,
    now: Callable[[], datetime] = _utcnow,
) -> StatusReport:
    """Query the status of one operation with a freshly signed GET.

    Raises:
        StatusQueryFailed: Non-200 answer, missing status, or no answer.
        AuthenticationFailed: Token exchange failed.
    """
    path = f"/emails/operations/{quote(operation_id, safe='')}?api-version={settings.api_version}"
    with _client_scope(client, settings) as http:
        try:
            response = _signed_call(
                http,
                credential,
                method="GET",
                path_and_query=path,
                body=b"",
                settings=settings,
                resolve=resolve,
                moment=now(),
            )
        except httpx.HTTPError as exc:
            raise StatusQueryFailed(f"Status query for {operation_id} failed: {exc}") from exc

    parsed = _parse_json(response)
    if response.status_code != httpx.codes.OK:
        detail = _error_message(parsed) or response.reason_phrase
        raise StatusQueryFailed(
            f"Status query for {operation_id} returned HTTP {response.status_code}: {detail}",
            status_code=response.status_code,
        )
    if "status" not in parsed:
        raise StatusQueryFailed(f"Status response for {operation_id} has no status field")
    return StatusReport(
        operation_id=operation_id,
        status=EmailSendStatus.parse(parsed["status"]),
        error_message=_error_message(parsed),
    )


def poll_until_terminal(
    operation_id: str,
    credential: Credential,
    *,
    settings: RestSettings,
    client: httpx.Client,
    resolve: Resolver = resolve_auth_material,
    now: Callable[[], datetime] = _utcnow,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_status: StatusCallback | None = None,
) -> DeliveryOutcome:
    """Poll the status endpoint until a terminal status or the deadline.

    Each wait is clamped to the time left, and the deadline is checked only
    after the poll that follows it, so a status that turns terminal right at
    the deadline is still seen. The loop ends within ``poll_timeout`` plus
    one request.

    Returns:
        ``Succeeded``, ``Failed`` (terminal negative status or an unusable
        status answer), or ``TimedOut``.
    """
    deadline = clock() + settings.poll_timeout
    last_status: EmailSendStatus | None = None

    while True:
        sleep(max(0.0, min(settings.poll_interval, deadline - clock())))
        try:
            report = get_email_status(
                operation_id, credential, settings=settings, client=client, resolve=resolve, now=now
            )
        except StatusQueryFailed as exc:
            logger.error("Status polling failed", extra={"operation_id": operation_id, "error": str(exc)})
            return Failed(str(exc), operation_id)

        last_status = report.status
        logger.debug("Polled email status", extra={"operation_id": operation_id, "status": report.status.value})
        if on_status is not None:
            on_status(operation_id, report.status)

        if report.status is EmailSendStatus.SUCCEEDED:
            return Succeeded(operation_id)
        if report.status.is_terminal:
            reason = report.error_message or f"Operation ended with status {report.status.value}"
            return Failed(reason, operation_id)
        if clock() >= deadline:
            return TimedOut(operation_id, last_status)


def send_via_rest(
    message: EmailMessage,
    credential: Credential,
    *,
    settings: RestSettings,
    client: httpx.Client | None = None,
    resolve: Resolver = resolve_auth_material,
    now: Callable[[], datetime] = _utcnow,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_status: StatusCallback | None = None,
) -> DeliveryOutcome:
    """Send ``message`` through the REST API and wait for the final status.

    Args:
        message: Message to send.
        credential: Configured credential variant.
        settings: Host, API version, and polling parameters.
        client: Optional httpx client; when None an owned client is created
            and closed before returning.
        resolve: Credential provider, called once per request.
        now: Clock for request dates.
        sleep: Wait function used between polls.
        clock: Monotonic clock for the polling deadline.
        on_status: Called with ``(operation_id, status)`` after every poll.

    Returns:
        Terminal DeliveryOutcome: ``Succeeded``, ``Failed``, or ``TimedOut``.

    Raises:
        ValidationError: Message rejected before any network call.
        SubmissionFailed: The submit step was not accepted.
        AuthenticationFailed: Token exchange failed.
        ConfigurationError: Malformed shared key.
    """
    validate_message(message)
    logger.info(
        "Sending email via REST",
        extra={"host": settings.host, "recipients": message.all_recipients(), "subject": message.subject},
    )
    with _client_scope(client, settings) as http:
        accepted = submit_email(message, credential, settings=settings, client=http, resolve=resolve, now=now)
        logger.info("Email accepted", extra={"operation_id": accepted.operation_id})
        outcome = poll_until_terminal(
            accepted.operation_id,
            credential,
            settings=settings,
            client=http,
            resolve=resolve,
            now=now,
            sleep=sleep,
            clock=clock,
            on_status=on_status,
        )

    if isinstance(outcome, Succeeded):
        logger.info("Email delivered", extra={"operation_id": accepted.operation_id})
    else:
        logger.warning("Email not delivered", extra={"operation_id": accepted.operation_id, "outcome": repr(outcome)})
    return outcome


__all__ = [
    "API_VERSION",
    "RestSettings",
    "StatusReport",
    "get_email_status",
    "poll_until_terminal",
    "send_via_rest",
    "submit_email",
]
