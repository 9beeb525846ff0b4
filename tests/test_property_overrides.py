"""Property-based checks for ``--set`` parsing and for the AcsConfig model.

Hypothesis generates inputs well beyond hand-picked examples to confirm
``parse_override`` and ``coerce_value`` never misbehave, and that config
validation rejects what it must.
"""

from __future__ import annotations

import pydantic
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from acs_mail.adapters.acs.config import AcsConfig
from acs_mail.adapters.config.overrides import coerce_value, parse_override

IDENTIFIER = st.from_regex(r"[a-z_][a-z0-9_]*", fullmatch=True)
ALLOWED_COERCED_TYPES = (str, int, float, bool, type(None), list, dict)


# ======================== coerce_value ========================


@pytest.mark.os_agnostic
@given(raw=st.text())
@settings(max_examples=200)
def test_coerce_value_never_raises(raw: str) -> None:
    """Every string decodes to a JSON type or stays a string."""
    assert isinstance(coerce_value(raw), ALLOWED_COERCED_TYPES)


@pytest.mark.os_agnostic
@given(port=st.integers(min_value=1, max_value=65535))
def test_ports_coerce_to_int(port: int) -> None:
    """Any port number typed on the command line becomes an int."""
    assert coerce_value(str(port)) == port


@pytest.mark.os_agnostic
@given(raw=IDENTIFIER)
@settings(max_examples=200)
def test_identifiers_stay_strings(raw: str) -> None:
    """Bare words other than the JSON keywords are not reinterpreted."""
    if raw in ("true", "false", "null"):
        return

    assert coerce_value(raw) == raw


# ======================== parse_override ========================


@pytest.mark.os_agnostic
@given(key=IDENTIFIER, value=st.text(max_size=50))
@settings(max_examples=200)
def test_acs_keys_parse_into_section_and_key(key: str, value: str) -> None:
    """``acs.KEY=VALUE`` always lands in the acs section."""
    result = parse_override(f"acs.{key}={value}")

    assert result.section == "acs"
    assert result.key_path == (key,)
    assert result.value == coerce_value(value)


@pytest.mark.os_agnostic
@given(key=IDENTIFIER, value=st.text(max_size=50))
@settings(max_examples=100)
def test_smtp_keys_parse_into_nested_path(key: str, value: str) -> None:
    """``acs.smtp.KEY=VALUE`` is a two-element key path."""
    assert parse_override(f"acs.smtp.{key}={value}").key_path == ("smtp", key)


@pytest.mark.os_agnostic
@given(raw=st.text().filter(lambda s: "=" not in s))
@settings(max_examples=200)
def test_strings_without_equals_are_rejected(raw: str) -> None:
    """No ``=``, no override."""
    with pytest.raises(ValueError, match="must contain '='"):
        parse_override(raw)


@pytest.mark.os_agnostic
@given(
    key=st.text(min_size=1).filter(lambda s: "." not in s and "=" not in s),
    value=st.text(max_size=20),
)
@settings(max_examples=200)
def test_keys_without_dot_are_rejected(key: str, value: str) -> None:
    """A bare key cannot name a section."""
    with pytest.raises(ValueError, match="at least one dot"):
        parse_override(f"{key}={value}")


@pytest.mark.os_agnostic
@given(tail=st.text(max_size=30))
def test_value_keeps_everything_after_first_equals(tail: str) -> None:
    """Values such as connection strings keep their own ``=`` characters."""
    result = parse_override(f"acs.connection_string=accesskey={tail}")

    assert result.value == f"accesskey={tail}"


# ======================== AcsConfig ========================


@pytest.mark.os_agnostic
@given(interval=st.floats(max_value=0, allow_nan=False))
def test_non_positive_poll_interval_is_rejected(interval: float) -> None:
    """No polling interval at or below zero validates."""
    with pytest.raises(pydantic.ValidationError, match="poll_interval must be positive"):
        AcsConfig(poll_interval=interval)


@pytest.mark.os_agnostic
@given(port=st.one_of(st.integers(max_value=0), st.integers(min_value=65536)))
def test_out_of_range_ports_are_rejected(port: int) -> None:
    """Ports outside 1..65535 never validate."""
    with pytest.raises(pydantic.ValidationError, match="smtp_port out of range"):
        AcsConfig(smtp_port=port)


@pytest.mark.os_agnostic
@given(sender=st.from_regex(r"[a-z]{1,10}", fullmatch=True))
def test_sender_without_at_sign_is_rejected(sender: str) -> None:
    """A bare word is never a sender address."""
    with pytest.raises(pydantic.ValidationError):
        AcsConfig(sender=sender)


@pytest.mark.os_agnostic
@given(interval=st.floats(min_value=0.001, max_value=3600, allow_nan=False))
def test_positive_poll_interval_is_kept(interval: float) -> None:
    """Any positive interval passes through unchanged."""
    assert AcsConfig(poll_interval=interval).poll_interval == interval
