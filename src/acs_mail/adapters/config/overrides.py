"""Parse and apply ``--set SECTION.KEY=VALUE`` CLI overrides to Config.

Nested tables are addressed with further dots, e.g. ``acs.smtp.port=465``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import orjson
from lib_layered_config import Config

CoercedValue = str | int | float | bool | None | list[object] | dict[str, object]
"""Union of types that :func:`coerce_value` can produce."""


@dataclass(frozen=True, slots=True)
class ConfigOverride:
    """A single parsed configuration override."""

    section: str
    key_path: tuple[str, ...]
    value: CoercedValue


def parse_override(raw: str) -> ConfigOverride:
    """Split ``SECTION.KEY[.SUBKEY...]=VALUE`` into a ConfigOverride.

    Raises:
        ValueError: Missing ``=``, no dot in the key, or an empty component.

    Examples:
        >>> override = parse_override("acs.transport=smtp")
        >>> (override.section, override.key_path, override.value)
        ('acs', ('transport',), 'smtp')

        >>> parse_override("acs.smtp.port=465").key_path
        ('smtp', 'port')
        >>> parse_override("acs.smtp.port=465").value
        465
    """
    if "=" not in raw:
        raise ValueError(f"Invalid override {raw!r}: must contain '='")

    path_part, value_str = raw.split("=", maxsplit=1)

    if "." not in path_part:
        raise ValueError(f"Invalid override {raw!r}: key must contain at least one dot (SECTION.KEY)")

    section, *key_parts = path_part.split(".")

    if not section:
        raise ValueError(f"Invalid override {raw!r}: section name is empty")
    if not all(key_parts):
        raise ValueError(f"Invalid override {raw!r}: key path contains empty component")

    return ConfigOverride(section=section, key_path=tuple(key_parts), value=coerce_value(value_str))


def coerce_value(raw: str) -> CoercedValue:
    """Parse ``raw`` as JSON, keeping the plain string when that fails.

    Examples:
        >>> coerce_value("true")
        True
        >>> coerce_value("2.5")
        2.5
        >>> coerce_value('["a@example.com","b@example.com"]')
        ['a@example.com', 'b@example.com']
        >>> coerce_value("managed-identity")
        'managed-identity'
        >>> coerce_value("")
        ''
    """
    if raw == "":
        return ""
    try:
        return orjson.loads(raw)
    except (orjson.JSONDecodeError, ValueError):
        return raw


def _nest_override(target: dict[str, dict[str, object]], override: ConfigOverride) -> None:
    """Insert ``override`` into the nested dict, creating tables on the way.

    Raises:
        TypeError: An intermediate key already holds a scalar.

    Examples:
        >>> d: dict[str, dict[str, object]] = {}
        >>> _nest_override(d, ConfigOverride(section="acs", key_path=("smtp", "port"), value=465))
        >>> d
        {'acs': {'smtp': {'port': 465}}}
    """
    node: dict[str, object] = target.setdefault(override.section, {})
    for part in override.key_path[:-1]:
        existing = node.setdefault(part, {})
        if not isinstance(existing, dict):
            msg = f"Expected dict at key {part!r}, got {type(existing).__name__}"
            raise TypeError(msg)
        node = cast("dict[str, object]", existing)
    node[override.key_path[-1]] = override.value


def apply_overrides(config: Config, raw_overrides: tuple[str, ...]) -> Config:
    """Deep-merge CLI overrides into ``config`` via ``Config.with_overrides``.

    Returns the original instance unchanged when there are no overrides.

    Raises:
        ValueError: Any override string is malformed.

    Examples:
        >>> provenance = {"acs.poll_interval": {"layer": "default", "path": None, "key": "acs.poll_interval"}}
        >>> cfg = Config({"acs": {"poll_interval": 5.0}}, provenance)
        >>> apply_overrides(cfg, ("acs.poll_interval=1",))["acs"]["poll_interval"]
        1
        >>> apply_overrides(cfg, ()) is cfg
        True
    """
    if not raw_overrides:
        return config

    overrides: dict[str, dict[str, object]] = {}
    for raw in raw_overrides:
        _nest_override(overrides, parse_override(raw))

    return config.with_overrides(overrides)


__all__ = [
    "CoercedValue",
    "ConfigOverride",
    "apply_overrides",
    "coerce_value",
    "parse_override",
]
