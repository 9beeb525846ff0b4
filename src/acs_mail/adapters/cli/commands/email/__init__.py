"""Email CLI commands.

Contents:
    * :func:`.send.cli_send` - Send one email over REST or SMTP.
    * :func:`.status.cli_email_status` - Query a REST operation's status.
"""

from __future__ import annotations

from .send import cli_send
from .status import cli_email_status

__all__ = ["cli_email_status", "cli_send"]
