"""CLI command implementations.

Collects all subcommand functions and re-exports them for registration
with the root CLI group.

Contents:
    * Info command from :mod:`.info`
    * Config command from :mod:`.config`
    * Email commands from :mod:`.email` (subpackage)
    * Logging command from :mod:`.logging`
"""

from __future__ import annotations

from .config import cli_config
from .email import cli_email_status, cli_send
from .info import cli_info
from .logging import cli_logdemo

__all__ = [
    "cli_config",
    "cli_email_status",
    "cli_info",
    "cli_logdemo",
    "cli_send",
]
