"""Send CLI command.

Builds an EmailMessage from options and configured defaults, then hands it
to the configured transport.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

import lib_log_rich.runtime
import rich_click as click

from acs_mail.domain.enums import AuthMethod, EmailSendStatus, OutputFormat, TransportKind
from acs_mail.domain.models import EmailAddress, EmailAttachment, EmailMessage

from ...constants import CLICK_CONTEXT_SETTINGS
from ...context import get_cli_context
from ._common import execute_with_delivery_error_handling, filter_sentinels, load_acs_config, report_outcome

logger = logging.getLogger(__name__)


def load_attachment(path: str) -> EmailAttachment:
    """Read ``path`` into an attachment, guessing the content type from its name.

    Raises:
        FileNotFoundError: The file does not exist.
    """
    file_path = Path(path)
    content_type, _ = mimetypes.guess_type(file_path.name)
    return EmailAttachment(
        name=file_path.name,
        content_type=content_type or "application/octet-stream",
        content=file_path.read_bytes(),
    )


def _addresses(values: tuple[str, ...] | list[str]) -> tuple[EmailAddress, ...]:
    return tuple(EmailAddress(value) for value in values)


def _echo_status(operation_id: str, status: EmailSendStatus) -> None:
    click.echo(f"  {operation_id}: {status.value}", err=True)


@click.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--to",
    "recipients",
    multiple=True,
    help="Recipient address (repeatable; uses acs.recipients if not specified)",
)
@click.option("--cc", multiple=True, help="Carbon-copy address (repeatable)")
@click.option("--bcc", multiple=True, help="Blind carbon-copy address (repeatable)")
@click.option("--subject", required=True, help="Email subject line")
@click.option("--body", default="", help="Plain-text email body")
@click.option("--body-html", default="", help="HTML email body")
@click.option("--from", "sender", default=None, help="Sender address (uses acs.sender if not specified)")
@click.option("--reply-to", default=None, help="Reply-to address (uses acs.reply_to if not specified)")
@click.option(
    "--attachment",
    "attachments",
    multiple=True,
    type=click.Path(path_type=str),
    help="File to attach (repeatable)",
)
@click.option(
    "--transport",
    type=click.Choice([t.value for t in TransportKind], case_sensitive=False),
    default=None,
    help="Delivery transport (overrides acs.transport)",
)
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
    help="Output format for the delivery outcome",
)
@click.pass_context
def cli_send(
    ctx: click.Context,
    recipients: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str,
    body: str,
    body_html: str,
    sender: str | None,
    reply_to: str | None,
    attachments: tuple[str, ...],
    transport: str | None,
    auth_method: str | None,
    output_format: str,
) -> None:
    """Send an email through Azure Communication Services.

    The REST transport waits until the operation reaches a final status;
    each status change is echoed to stderr.
    """
    cli_ctx = get_cli_context(ctx)
    fmt = OutputFormat(output_format.lower())
    extra = {"command": "send", "recipients": list(recipients) or None, "subject": subject}

    with lib_log_rich.runtime.bind(job_id="cli-send", extra=extra):
        acs_config = load_acs_config(
            cli_ctx,
            filter_sentinels(
                transport=transport.lower() if transport else None,
                auth_method=auth_method.lower() if auth_method else None,
            ),
        )

        def operation() -> None:
            resolved_sender = sender or acs_config.sender
            if resolved_sender is None:
                raise ValueError("No sender configured (set acs.sender or pass --from)")
            message = EmailMessage(
                sender=resolved_sender,
                recipients=_addresses(recipients or acs_config.recipients),
                subject=subject,
                plain_text_body=body,
                html_body=body_html,
                reply_to=EmailAddress(reply_to) if reply_to else acs_config.reply_to_address(),
                cc=_addresses(cc),
                bcc=_addresses(bcc),
                attachments=tuple(load_attachment(path) for path in attachments),
            )
            logger.info(
                "Sending email",
                extra={
                    "transport": acs_config.transport.value,
                    "recipients": message.all_recipients(),
                    "attachment_count": len(message.attachments),
                },
            )
            outcome = cli_ctx.services.send_email(
                message,
                acs_config.transport,
                acs_config.build_credential(),
                config=acs_config,
                on_status=_echo_status if fmt is OutputFormat.HUMAN else None,
            )
            report_outcome(outcome, fmt)

        execute_with_delivery_error_handling(operation)


__all__ = ["cli_send", "load_attachment"]
