"""Shared pytest fixtures for domain, engine, and CLI tests.

Centralizes test infrastructure:
- All shared fixtures live here
- Tests import fixtures implicitly via pytest's conftest discovery
- Fixtures use descriptive names that read as plain English
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import lib_cli_exit_tools
import pytest
from click.testing import CliRunner
from lib_layered_config import Config
from lib_layered_config.domain.config import SourceInfo

from acs_mail.domain.models import EmailAddress, EmailMessage, SharedKey

if TYPE_CHECKING:
    from acs_mail.adapters.memory.email import EmailSpy
    from acs_mail.composition import AppServices

_COVERAGE_BASENAME = ".coverage.acs_mail"

#: base64("test-shared-key-material")
SHARED_KEY_B64 = "dGVzdC1zaGFyZWQta2V5LW1hdGVyaWFs"
TEST_HOST = "contoso.communication.azure.com"
CONNECTION_STRING = f"endpoint=https://{TEST_HOST}/;accesskey={SHARED_KEY_B64}"
FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _purge_stale_coverage_files(cov_path: Path) -> None:
    """Delete leftover SQLite database and journal files from crashed runs."""
    for suffix in ("", "-journal", "-wal", "-shm"):
        with contextlib.suppress(FileNotFoundError):
            Path(str(cov_path) + suffix).unlink()


def pytest_configure(config: pytest.Config) -> None:
    """Redirect the coverage database to a local temp directory.

    coverage.py stores trace data in SQLite, which needs POSIX locking that
    network mounts do not reliably provide. This runs before pytest-cov
    creates its ``Coverage()`` object.
    """
    if "COVERAGE_FILE" not in os.environ:
        cov_path = Path(tempfile.gettempdir()) / _COVERAGE_BASENAME
        _purge_stale_coverage_files(cov_path)
        os.environ["COVERAGE_FILE"] = str(cov_path)


ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))


def _remove_ansi_codes(text: str) -> str:
    """Return *text* stripped of ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


# ======================== CLI infrastructure ========================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test.

    Use ``result.stdout`` for clean output (e.g., JSON parsing) so log lines
    written to stderr do not contaminate it.
    """
    return CliRunner()


@pytest.fixture
def production_factory() -> Callable[[], AppServices]:
    """Provide the production services factory for tests.

    Example:
        def test_info(cli_runner: CliRunner, production_factory: Callable[[], AppServices]) -> None:
            result = cli_runner.invoke(cli, ["info"], obj=production_factory)
            assert result.exit_code == 0
    """
    from acs_mail.composition import build_production

    return build_production


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    """Return a helper that strips ANSI escape sequences from a string."""

    def _strip(value: str) -> str:
        return _remove_ansi_codes(value)

    return _strip


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset traceback flags to a known baseline and restore after the test."""
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the get_config cache before each test.

    Only clears before, not after, so a monkeypatched loader does not break
    teardown.
    """
    from acs_mail.adapters.config import loader as config_mod

    config_mod.get_config.cache_clear()
    yield


# ======================== Config fixtures ========================


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts without filesystem I/O.

    Example:
        def test_acs_section(config_factory: Callable[[dict[str, Any]], Config]) -> None:
            config = config_factory({"acs": {"transport": "smtp"}})
            assert config.get("acs.transport") == "smtp"
    """

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def source_info_factory() -> Callable[[str, str, str | None], SourceInfo]:
    """Create SourceInfo dicts for provenance-tracking tests."""

    def _factory(key: str, layer: str, path: str | None = None) -> SourceInfo:
        return {"layer": layer, "path": path, "key": key}

    return _factory


@pytest.fixture
def acs_section() -> dict[str, Any]:
    """A complete, valid ``[acs]`` section using a shared key over REST."""
    return {
        "transport": "rest",
        "auth_method": "shared-key",
        "connection_string": CONNECTION_STRING,
        "sender": "DoNotReply@example.com",
        "recipients": ["ops@example.com"],
        "poll_interval": 0.01,
        "poll_timeout": 1.0,
        "smtp": {
            "host": "smtp.azurecomm.net",
            "port": 587,
            "username": "smtp-user",
            "password": "smtp-pass",
        },
    }


@pytest.fixture
def config_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], Callable[[], AppServices]]:
    """Create a services factory whose ``get_config`` returns the given data.

    Everything else stays in memory.

    Example:
        def test_config_display(cli_runner, config_cli_context) -> None:
            factory = config_cli_context({"section": {"key": "value"}})
            result = cli_runner.invoke(cli, ["config"], obj=factory)
    """
    from acs_mail.composition import build_production

    def _create(config_data: dict[str, Any]) -> Callable[[], AppServices]:
        config = Config(config_data, {})

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        test_services = replace(build_production(), get_config=_fake_get_config)
        return lambda: test_services

    return _create


@pytest.fixture
def inject_config_with_profile_capture(
    clear_config_cache: None,
) -> Callable[[Config, list[str | None]], Callable[[], AppServices]]:
    """Return a factory whose ``get_config`` records every profile it is asked for."""
    from acs_mail.composition import build_production, build_testing

    def _inject(config: Config, captured_profiles: list[str | None]) -> Callable[[], AppServices]:
        def _capturing_get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            captured_profiles.append(profile)
            return config

        test_services = replace(
            build_testing(),
            get_config=_capturing_get_config,
            init_logging=build_production().init_logging,
        )
        return lambda: test_services

    return _inject


@dataclass
class AcsCliContext:
    """Container for delivery CLI test setup.

    Attributes:
        factory: Callable that returns wired AppServices for CLI invocation.
        spy: EmailSpy instance for asserting on sent messages and status queries.
    """

    factory: Callable[[], Any]
    spy: EmailSpy


@pytest.fixture
def acs_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], AcsCliContext]:
    """Create a delivery CLI context from an ``[acs]`` section.

    Example:
        def test_send(cli_runner, acs_cli_context, acs_section) -> None:
            ctx = acs_cli_context(acs_section)
            result = cli_runner.invoke(cli, ["send", "--subject", "Hi", "--body", "x"], obj=ctx.factory)
            assert ctx.spy.sent_emails[0]["message"].subject == "Hi"
    """
    from acs_mail.adapters.memory.email import EmailSpy as EmailSpyImpl
    from acs_mail.composition import build_production, build_testing

    def _create(acs_data: dict[str, Any]) -> AcsCliContext:
        spy = EmailSpyImpl()
        config = Config({"acs": acs_data}, {})

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        test_services = replace(
            build_testing(spy=spy),
            get_config=_fake_get_config,
            init_logging=build_production().init_logging,
        )
        return AcsCliContext(factory=lambda: test_services, spy=spy)

    return _create


# ======================== Domain fixtures ========================


@pytest.fixture
def shared_key() -> SharedKey:
    """Shared-key credential matching ``CONNECTION_STRING``."""
    return SharedKey(SHARED_KEY_B64)


@pytest.fixture
def sample_message() -> EmailMessage:
    """A minimal valid message with one "To" recipient and a plain-text body."""
    return EmailMessage(
        sender="DoNotReply@example.com",
        recipients=(EmailAddress("alice@example.com", "Alice"),),
        subject="Quarterly report",
        plain_text_body="The report is attached.",
    )


@pytest.fixture
def fixed_now() -> Callable[[], datetime]:
    """A clock that always returns the same UTC instant."""
    return lambda: FIXED_NOW
