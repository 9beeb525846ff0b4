"""Static package metadata surfaced to CLI commands and documentation.

Values mirror ``pyproject.toml`` and are checked against it by
``tests/test_metadata_sync.py``. The ``LAYEREDCONF_*`` identifiers pick the
platform-specific configuration directories used by lib_layered_config.
"""

from __future__ import annotations

#: Distribution name declared in pyproject.toml.
name = "acs-mail"
#: Human-readable summary shown in CLI help output.
title = "Send email through Azure Communication Services over REST or SMTP"
#: Current release version pulled from pyproject.toml.
version = "1.0.0"
#: Author attribution surfaced in CLI output.
author = "acs-mail contributors"
#: Console-script name published by the package.
shell_command = "acs-mail"

#: Vendor identifier for lib_layered_config paths (macOS/Windows)
LAYEREDCONF_VENDOR: str = "acs-mail"
#: Application display name for lib_layered_config paths (macOS/Windows)
LAYEREDCONF_APP: str = "ACS Mail"
#: Configuration slug for lib_layered_config Linux paths and environment variables
LAYEREDCONF_SLUG: str = "acs-mail"


def print_info() -> None:
    """Print the summarised metadata block used by the CLI ``info`` command.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for acs-mail:
        ...
    """
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))


__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "author",
    "name",
    "print_info",
    "shell_command",
    "title",
    "version",
]
