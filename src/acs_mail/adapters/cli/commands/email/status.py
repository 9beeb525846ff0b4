"""Email status CLI command.

Queries the REST status endpoint once for an operation accepted earlier.
"""

from __future__ import annotations

import logging

import lib_log_rich.runtime
import orjson
import rich_click as click

from acs_mail.domain.enums import AuthMethod, OutputFormat

from ...constants import CLICK_CONTEXT_SETTINGS
from ...context import get_cli_context
from ._common import execute_with_delivery_error_handling, filter_sentinels, load_acs_config

logger = logging.getLogger(__name__)


@click.command("email-status", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--operation-id", required=True, help="Operation id returned when the email was accepted")
@click.option(
    "--auth-method",
    type=click.Choice([m.value for m in AuthMethod], case_sensitive=False),
    default=None,
    help="Credential strategy (overrides acs.auth_method)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=OutputFormat.HUMAN.value,
    help="Output format",
)
@click.pass_context
def cli_email_status(ctx: click.Context, operation_id: str, auth_method: str | None, output_format: str) -> None:
    """Show the current status of a previously accepted email."""
    cli_ctx = get_cli_context(ctx)
    fmt = OutputFormat(output_format.lower())

    extra = {"command": "email-status", "operation_id": operation_id}
    with lib_log_rich.runtime.bind(job_id="cli-email-status", extra=extra):
        acs_config = load_acs_config(
            cli_ctx,
            filter_sentinels(auth_method=auth_method.lower() if auth_method else None),
        )

        def operation() -> None:
            report = cli_ctx.services.query_email_status(
                operation_id,
                acs_config.build_credential(),
                settings=acs_config.rest_settings(),
            )
            logger.info("Queried email status", extra={"status": report.status.value})
            if fmt is OutputFormat.JSON:
                payload = {
                    "operation_id": report.operation_id,
                    "status": report.status.value,
                    "terminal": report.status.is_terminal,
                    "error": report.error_message,
                }
                click.echo(orjson.dumps(payload).decode())
                return
            click.echo(f"{report.operation_id}: {report.status.value}")
            if report.error_message:
                click.echo(f"  error: {report.error_message}")

        execute_with_delivery_error_handling(operation)


__all__ = ["cli_email_status"]
