"""Adapters layer - infrastructure and framework integrations.

Contents:
    * :mod:`.acs` - Communication Services delivery over REST and SMTP
    * :mod:`.config` - Configuration loading and display
    * :mod:`.logging` - Logging setup with lib_log_rich
    * :mod:`.cli` - Click CLI framework integration
    * :mod:`.memory` - In-memory adapters for tests
"""

from __future__ import annotations

__all__: list[str] = []
