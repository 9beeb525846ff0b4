"""Per-invocation CLI state shared between the root group and its commands.

The root group loads configuration and wires services once; ``send``,
``email-status`` and ``config`` read them back through :func:`get_cli_context`.
The traceback helpers keep ``lib_cli_exit_tools.config`` in step with the
``--traceback`` flag and let :func:`acs_mail.adapters.cli.main.main` undo it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

import lib_cli_exit_tools
import rich_click as click
from lib_layered_config import Config

if TYPE_CHECKING:
    from acs_mail.composition import AppServices

TracebackState = tuple[bool, bool]
"""``(traceback, traceback_force_color)`` as stored in lib_cli_exit_tools."""


@dataclass(slots=True)
class CLIContext:
    """Typed replacement for Click's untyped ``ctx.obj``.

    Attributes:
        traceback: ``--traceback`` was given.
        config: Configuration after ``--profile`` and ``--set`` were applied.
        services: Adapter functions chosen by the services factory.
        profile: Root ``--profile`` value.
        set_overrides: Raw ``--set`` strings, reapplied when a command reloads
            configuration for another profile.
    """

    traceback: bool
    config: Config
    services: AppServices
    profile: str | None = None
    set_overrides: tuple[str, ...] = ()

    def acs_section(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return a copy of the ``[acs]`` table with per-command overrides on top.

        Example:
            >>> from acs_mail.composition import build_testing
            >>> state = CLIContext(False, Config({"acs": {"transport": "rest"}}, {}), build_testing())
            >>> state.acs_section({"transport": "smtp"})
            {'transport': 'smtp'}
        """
        section: Any = self.config.as_dict().get("acs", {})
        merged: dict[str, Any] = dict(cast(Mapping[str, Any], section)) if isinstance(section, Mapping) else {}
        merged.update(overrides or {})
        return merged


def store_cli_context(
    ctx: click.Context,
    *,
    traceback: bool,
    config: Config,
    services: AppServices,
    profile: str | None = None,
    set_overrides: tuple[str, ...] = (),
) -> None:
    """Replace ``ctx.obj`` (the services factory) with the resolved CLIContext."""
    ctx.obj = CLIContext(
        traceback=traceback,
        config=config,
        services=services,
        profile=profile,
        set_overrides=set_overrides,
    )


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Return the CLIContext stored by the root group.

    Raises:
        RuntimeError: The command ran without the root group.
    """
    if not isinstance(ctx.obj, CLIContext):
        raise RuntimeError("CLI context not initialized. Call store_cli_context first.")
    return ctx.obj


def apply_traceback_preferences(enabled: bool) -> None:
    """Turn full, coloured tracebacks on or off for lib_cli_exit_tools.

    Example:
        >>> previous = snapshot_traceback_state()
        >>> apply_traceback_preferences(True)
        >>> lib_cli_exit_tools.config.traceback
        True
        >>> restore_traceback_state(previous)
    """
    lib_cli_exit_tools.config.traceback = bool(enabled)
    lib_cli_exit_tools.config.traceback_force_color = bool(enabled)


def snapshot_traceback_state() -> TracebackState:
    """Capture the current traceback flags."""
    return (
        bool(getattr(lib_cli_exit_tools.config, "traceback", False)),
        bool(getattr(lib_cli_exit_tools.config, "traceback_force_color", False)),
    )


def restore_traceback_state(state: TracebackState) -> None:
    """Put back flags captured by :func:`snapshot_traceback_state`."""
    lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = state


__all__ = [
    "CLIContext",
    "TracebackState",
    "apply_traceback_preferences",
    "get_cli_context",
    "restore_traceback_state",
    "snapshot_traceback_state",
    "store_cli_context",
]
