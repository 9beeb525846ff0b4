"""Domain-specific exceptions for typed error handling at boundaries."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete configuration.

    Raised when required configuration values are absent, malformed, or
    logically inconsistent, including a shared key that is not valid base64.
    Fatal: retrying with the same configuration cannot succeed.

    Example:
        >>> from acs_mail.domain.errors import ConfigurationError
        >>> err = ConfigurationError("Connection string has no accesskey")
        >>> str(err)
        'Connection string has no accesskey'
    """


class AuthenticationFailed(Exception):
    """Token exchange with the identity provider was rejected or unavailable.

    Fatal for the current send. Callers may retry the whole send.

    Example:
        >>> from acs_mail.domain.errors import AuthenticationFailed
        >>> str(AuthenticationFailed("managed identity endpoint unavailable"))
        'managed identity endpoint unavailable'
    """


class ValidationError(ValueError):
    """The email message is malformed and must never reach the wire.

    Inherits from ValueError so generic ``except ValueError`` handlers at the
    CLI boundary keep catching it.

    Example:
        >>> from acs_mail.domain.errors import ValidationError
        >>> isinstance(ValidationError("no recipients"), ValueError)
        True
    """


class InvalidRecipientError(ValidationError):
    """Email address validation failure.

    Raised when an address fails RFC 5321/5322 validation.

    Example:
        >>> from acs_mail.domain.errors import InvalidRecipientError
        >>> err = InvalidRecipientError("Invalid recipient: not-an-email")
        >>> str(err)
        'Invalid recipient: not-an-email'
        >>> isinstance(err, ValidationError)
        True
    """


class SubmissionFailed(Exception):
    """The REST submit request was not accepted by the service.

    Carries the HTTP status (None when the request never got a response)
    and the raw response body for diagnostics. Never retried internally.

    Example:
        >>> err = SubmissionFailed(400, '{"error": {"message": "bad sender"}}')
        >>> err.status_code
        400
        >>> str(err)
        'Email submission rejected with HTTP 400'
    """

    def __init__(self, status_code: int | None, body: str = "", message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        if message is None:
            if status_code is None:
                message = "Email submission failed before a response was received"
            else:
                message = f"Email submission rejected with HTTP {status_code}"
        super().__init__(message)


class StatusQueryFailed(Exception):
    """A status request for an accepted operation got no usable answer.

    The polling loop turns this into a ``Failed`` outcome; the one-shot
    status command reports it directly.

    Example:
        >>> StatusQueryFailed("HTTP 404 querying operation abc", status_code=404).status_code
        404
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "AuthenticationFailed",
    "ConfigurationError",
    "InvalidRecipientError",
    "StatusQueryFailed",
    "SubmissionFailed",
    "ValidationError",
]
