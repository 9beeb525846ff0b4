"""Display configuration - delegates to lib_layered_config.

Wraps lib_layered_config's Rich-styled display_config, masking ACS secrets
and flushing pending log output first so the two never interleave.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

import lib_log_rich.runtime
from lib_layered_config import Config
from lib_layered_config import OutputFormat as LibOutputFormat
from lib_layered_config import display_config as _lib_display
from rich.console import Console

from acs_mail.domain.enums import OutputFormat

REDACTED = "[REDACTED]"

_SECRET_PATHS: tuple[tuple[str, ...], ...] = (
    ("acs", "connection_string"),
    ("acs", "client_secret"),
    ("acs", "smtp", "password"),
)


def _lookup(data: Mapping[str, Any], path: tuple[str, ...]) -> object:
    node: object = data
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = cast(Mapping[str, Any], node).get(key)
    return node


def redact_secrets(config: Config) -> Config:
    """Return ``config`` with every configured ACS secret replaced by ``[REDACTED]``.

    Empty secrets are left alone so users can still see that they are unset.

    Example:
        >>> cfg = Config({"acs": {"client_secret": "s3cret", "smtp": {"password": ""}}}, {})
        >>> redacted = redact_secrets(cfg).as_dict()["acs"]
        >>> (redacted["client_secret"], redacted["smtp"]["password"])
        ('[REDACTED]', '')
    """
    data = config.as_dict()
    overrides: dict[str, Any] = {}
    for path in _SECRET_PATHS:
        if not _lookup(data, path):
            continue
        node = overrides
        for key in path[:-1]:
            node = node.setdefault(key, {})
        node[path[-1]] = REDACTED
    return config.with_overrides(overrides) if overrides else config


def display_config(
    config: Config,
    *,
    output_format: OutputFormat = OutputFormat.HUMAN,
    section: str | None = None,
    console: Console | None = None,
    profile: str | None = None,
) -> None:
    """Display configuration using lib_layered_config's Rich display.

    Args:
        config: Already-loaded layered configuration object to display.
        output_format: TOML-like human output or JSON.
        section: Optional section name to display only that section.
        console: Optional Rich Console for output, mainly for tests.
        profile: Optional profile name to include in provenance comments.

    Raises:
        ValueError: If a section was requested that doesn't exist.
    """
    if lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.flush()

    lib_format = LibOutputFormat(output_format.value)
    _lib_display(redact_secrets(config), output_format=lib_format, section=section, profile=profile, console=console)


__all__ = ["REDACTED", "display_config", "redact_secrets"]
