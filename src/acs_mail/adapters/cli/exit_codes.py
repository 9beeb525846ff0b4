"""POSIX-conventional exit codes for CLI error paths.

Provides a single :class:`ExitCode` enum so every ``SystemExit`` raised by a
CLI command carries a meaningful, grep-friendly integer instead of a bare ``1``.

Signal codes (130, 141, 143) are informational constants only; the
application never raises ``SystemExit`` with these values because
``lib_cli_exit_tools`` handles signal-to-exit-code translation.

Contents:
    * :class:`ExitCode` - IntEnum of all exit codes used by this application.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """POSIX-conventional exit codes for CLI error paths.

    Values follow sysexits.h and errno conventions where applicable:

    * 0–1: generic success / failure
    * 2: ENOENT (missing attachment file)
    * 22: EINVAL (malformed message or option)
    * 69: EX_UNAVAILABLE (submission rejected, delivery failed)
    * 75: EX_TEMPFAIL (delivery still pending at the polling deadline)
    * 77: EX_NOPERM (token exchange rejected)
    * 78: EX_CONFIG (missing or malformed configuration)
    * 128+N: signal N (informational only)

    Example:
        >>> ExitCode.SUCCESS
        <ExitCode.SUCCESS: 0>
        >>> int(ExitCode.TIMED_OUT)
        75
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    FILE_NOT_FOUND = 2
    INVALID_ARGUMENT = 22
    DELIVERY_FAILURE = 69
    TIMED_OUT = 75
    AUTH_FAILURE = 77
    CONFIG_ERROR = 78
    SIGNAL_INT = 130
    BROKEN_PIPE = 141
    SIGNAL_TERM = 143


__all__ = ["ExitCode"]
