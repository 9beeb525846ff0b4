"""Application ports - callable Protocol definitions for adapter functions.

Each Protocol class defines a ``__call__`` method whose signature exactly
matches the corresponding adapter function.  Existing module-level functions
satisfy these protocols automatically via structural subtyping (PEP 544).

System Role:
    Sits between domain and adapters.  Infrastructure types (``Config``,
    ``AcsConfig``, ``RestSettings``) are imported under ``TYPE_CHECKING``
    only so that import-linter layer contracts remain satisfied at runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.enums import EmailSendStatus, OutputFormat, TransportKind
from ..domain.models import Credential, DeliveryOutcome, EmailMessage

if TYPE_CHECKING:
    from lib_layered_config import Config

    from ..adapters.acs.config import AcsConfig
    from ..adapters.acs.rest import RestSettings, StatusReport


class GetConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class GetDefaultConfigPath(Protocol):
    """Return the path to the bundled default configuration file."""

    def __call__(self) -> Path: ...


class DisplayConfig(Protocol):
    """Display the provided configuration in the requested format."""

    def __call__(
        self, config: Config, *, output_format: OutputFormat = ..., section: str | None = ..., profile: str | None = ...
    ) -> None: ...


class SendEmail(Protocol):
    """Send one message over the selected transport and return its outcome."""

    def __call__(
        self,
        message: EmailMessage,
        transport_kind: TransportKind,
        credential: Credential,
        *,
        config: AcsConfig,
        on_status: Callable[[str, EmailSendStatus], None] | None = ...,
    ) -> DeliveryOutcome: ...


class QueryEmailStatus(Protocol):
    """Query the status of a previously accepted REST operation."""

    def __call__(self, operation_id: str, credential: Credential, *, settings: RestSettings) -> StatusReport: ...


class LoadAcsConfigFromDict(Protocol):
    """Load AcsConfig from a configuration dictionary."""

    def __call__(self, config_dict: Mapping[str, Any]) -> AcsConfig: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


__all__ = [
    "DisplayConfig",
    "GetConfig",
    "GetDefaultConfigPath",
    "InitLogging",
    "LoadAcsConfigFromDict",
    "QueryEmailStatus",
    "SendEmail",
]
