"""The ``acs-mail`` command group.

Every invocation passes through :func:`cli` first: it builds the services,
loads the layered configuration for ``--profile``, applies ``--set``
overrides, starts logging and leaves a :class:`CLIContext` behind for the
subcommand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import rich_click as click
from lib_layered_config import Config

from acs_mail import __init__conf__
from acs_mail.adapters.config.overrides import apply_overrides

from .constants import CLICK_CONTEXT_SETTINGS
from .context import apply_traceback_preferences, store_cli_context

if TYPE_CHECKING:
    from acs_mail.composition import AppServices


def _resolve_config(services: AppServices, profile: str | None, set_overrides: tuple[str, ...]) -> Config:
    """Load configuration for ``profile`` and layer the ``--set`` values on top.

    Raises:
        click.UsageError: An override is malformed or collides with a scalar.
    """
    config = services.get_config(profile=profile)
    try:
        return apply_overrides(config, set_overrides)
    except (TypeError, ValueError) as exc:
        raise click.UsageError(str(exc)) from exc


@click.group(help=__init__conf__.title, context_settings=CLICK_CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option("--traceback/--no-traceback", default=False, help="Print the full traceback when a command fails")
@click.option("--profile", default=None, help="Configuration profile to load, e.g. 'staging'")
@click.option(
    "--set",
    "set_overrides",
    multiple=True,
    metavar="SECTION.KEY=VALUE",
    help="Override one configuration value, e.g. acs.transport=smtp (repeatable).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, profile: str | None, set_overrides: tuple[str, ...]) -> None:
    """Send email through Azure Communication Services.

    Example:
        >>> from click.testing import CliRunner
        >>> from acs_mail.composition import build_testing
        >>> CliRunner().invoke(cli, ["info"], obj=build_testing).exit_code
        0
    """
    if not callable(ctx.obj):
        raise RuntimeError("Services factory not provided. This is a bug.")
    services: AppServices = ctx.obj()  # type: ignore[assignment]
    config = _resolve_config(services, profile, set_overrides)
    services.init_logging(config)
    store_cli_context(
        ctx,
        traceback=traceback,
        config=config,
        services=services,
        profile=profile,
        set_overrides=set_overrides,
    )
    apply_traceback_preferences(traceback)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _register_commands() -> None:
    # Command modules import ``cli`` helpers from this package.
    from .commands import cli_config, cli_email_status, cli_info, cli_logdemo, cli_send

    for command in (cli_send, cli_email_status, cli_config, cli_info, cli_logdemo):
        cli.add_command(command)


_register_commands()


__all__ = ["cli"]
