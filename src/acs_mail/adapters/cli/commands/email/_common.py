"""Shared utilities for the email CLI commands.

Contains configuration loading, outcome reporting, and the mapping from
domain errors and delivery outcomes to exit codes shared by ``send`` and
``email-status``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, NoReturn, cast

import orjson
import rich_click as click
from pydantic import ValidationError

from acs_mail.domain.errors import (
    AuthenticationFailed,
    ConfigurationError,
    StatusQueryFailed,
    SubmissionFailed,
)
from acs_mail.domain.enums import OutputFormat
from acs_mail.domain.models import Accepted, DeliveryOutcome, Failed, Succeeded, TimedOut

from ...exit_codes import ExitCode

if TYPE_CHECKING:
    from acs_mail.adapters.acs.config import AcsConfig

    from ...context import CLIContext

logger = logging.getLogger(__name__)


def filter_sentinels(**kwargs: Any) -> dict[str, Any]:
    """Drop unset options (None and empty tuples); tuples become lists.

    Example:
        >>> filter_sentinels(transport="smtp", auth_method=None, recipients=())
        {'transport': 'smtp'}
    """
    result: dict[str, Any] = {}
    for k, v in kwargs.items():
        if v is None or v == ():
            continue
        if isinstance(v, tuple):
            result[k] = list(cast(tuple[Any, ...], v))
        else:
            result[k] = v
    return result


def load_acs_config(cli_ctx: CLIContext, overrides: Mapping[str, Any] | None = None) -> AcsConfig:
    """Validate the ``[acs]`` section of the active configuration, overrides applied.

    Raises:
        SystemExit: CONFIG_ERROR (78) when the section is invalid.
    """
    try:
        return cli_ctx.services.load_acs_config_from_dict({"acs": cli_ctx.acs_section(overrides)})
    except ValidationError as exc:
        _fail(exc, "Invalid ACS configuration", "Configuration error", exit_code=ExitCode.CONFIG_ERROR)


def outcome_to_dict(outcome: DeliveryOutcome) -> dict[str, Any]:
    """Flatten an outcome into a JSON-friendly mapping.

    Example:
        >>> outcome_to_dict(Failed("bounced", "op-1"))
        {'outcome': 'failed', 'operation_id': 'op-1', 'reason': 'bounced'}
    """
    data: dict[str, Any] = {"outcome": type(outcome).__name__.lower(), "operation_id": outcome.operation_id}
    if isinstance(outcome, Failed):
        data["reason"] = outcome.reason
    if isinstance(outcome, TimedOut):
        data["last_status"] = outcome.last_status.value if outcome.last_status is not None else None
    return data


def _describe(outcome: DeliveryOutcome) -> str:
    suffix = f" (operation {outcome.operation_id})" if outcome.operation_id else ""
    if isinstance(outcome, Succeeded):
        return f"Email delivered successfully{suffix}."
    if isinstance(outcome, Accepted):
        return f"Email accepted{suffix}."
    if isinstance(outcome, Failed):
        return f"Email delivery failed{suffix}: {outcome.reason}"
    last = outcome.last_status.value if outcome.last_status is not None else "no status"
    return f"Email delivery still pending at the polling deadline{suffix}, last status: {last}"


def report_outcome(outcome: DeliveryOutcome, output_format: OutputFormat) -> None:
    """Print the outcome and exit non-zero unless the email went out.

    Raises:
        SystemExit: DELIVERY_FAILURE (69) for ``Failed``, TIMED_OUT (75) for
            ``TimedOut``.
    """
    if output_format is OutputFormat.JSON:
        click.echo(orjson.dumps(outcome_to_dict(outcome)).decode())
    else:
        click.echo(f"\n{_describe(outcome)}", err=not isinstance(outcome, Succeeded | Accepted))

    if isinstance(outcome, Failed):
        logger.error("Email delivery failed", extra={"operation_id": outcome.operation_id, "reason": outcome.reason})
        raise SystemExit(ExitCode.DELIVERY_FAILURE)
    if isinstance(outcome, TimedOut):
        logger.warning("Email delivery timed out", extra={"operation_id": outcome.operation_id})
        raise SystemExit(ExitCode.TIMED_OUT)
    logger.info("Email sent via CLI", extra={"operation_id": outcome.operation_id})


def execute_with_delivery_error_handling(operation: Callable[[], None]) -> None:
    """Run ``operation`` and translate domain errors into exit codes.

    Exception Priority Order:
        1. ConfigurationError -> CONFIG_ERROR (78)
        2. AuthenticationFailed -> AUTH_FAILURE (77)
        3. FileNotFoundError -> FILE_NOT_FOUND (2): missing attachment
        4. ValueError (ValidationError, InvalidRecipientError) -> INVALID_ARGUMENT (22)
        5. SubmissionFailed / StatusQueryFailed -> DELIVERY_FAILURE (69)
        6. Exception -> GENERAL_ERROR (1), re-raised when DEVELOPMENT_MODE is set

    ``SystemExit`` raised by :func:`report_outcome` passes through untouched.
    """
    try:
        operation()
    except ConfigurationError as exc:
        _fail(exc, "Email configuration error", "Configuration error", exit_code=ExitCode.CONFIG_ERROR)
    except AuthenticationFailed as exc:
        _fail(exc, "Authentication failed", "Authentication failed", exit_code=ExitCode.AUTH_FAILURE)
    except FileNotFoundError as exc:
        _fail(exc, "Attachment file not found", "Attachment file not found", exit_code=ExitCode.FILE_NOT_FOUND)
    except ValueError as exc:
        _fail(exc, "Invalid email parameters", "Invalid email parameters", exit_code=ExitCode.INVALID_ARGUMENT)
    except (SubmissionFailed, StatusQueryFailed) as exc:
        _fail(exc, "Email service rejected the request", "Request failed", exit_code=ExitCode.DELIVERY_FAILURE)
    except Exception as exc:
        if os.environ.get("DEVELOPMENT_MODE"):
            raise
        _fail(
            exc,
            "Unexpected error during email command",
            "Unexpected error",
            exit_code=ExitCode.GENERAL_ERROR,
            log_traceback=True,
        )


def _fail(
    exc: Exception,
    log_message: str,
    user_message: str,
    *,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
    log_traceback: bool = False,
) -> NoReturn:
    """Log ``exc``, print a one-line error, and exit with ``exit_code``."""
    logger.error(
        log_message,
        extra={"error": str(exc), "error_type": type(exc).__name__},
        exc_info=log_traceback,
    )
    click.echo(f"\nError: {user_message} - {exc}", err=True)
    raise SystemExit(exit_code)


__all__ = [
    "execute_with_delivery_error_handling",
    "filter_sentinels",
    "load_acs_config",
    "outcome_to_dict",
    "report_outcome",
]
