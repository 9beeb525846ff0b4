"""Package metadata: values in __init__conf__ stay in sync with pyproject.toml."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import rtoml

from acs_mail import __init__conf__

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def pyproject() -> dict[str, Any]:
    return rtoml.load(PROJECT_ROOT / "pyproject.toml")


@pytest.mark.os_agnostic
def test_name_and_version_match_pyproject(pyproject: dict[str, Any]) -> None:
    """Drift here would make ``info`` and ``--version`` lie."""
    assert __init__conf__.name == pyproject["project"]["name"]
    assert __init__conf__.version == pyproject["project"]["version"]


@pytest.mark.os_agnostic
def test_console_script_name_matches(pyproject: dict[str, Any]) -> None:
    """The published script is the shell command shown in help."""
    assert __init__conf__.shell_command in pyproject["project"]["scripts"]
    assert pyproject["project"]["scripts"][__init__conf__.shell_command] == "acs_mail.entry:main"


@pytest.mark.os_agnostic
def test_layeredconf_slug_matches_project_name(pyproject: dict[str, Any]) -> None:
    """The slug names ``~/.config/<slug>/`` and the environment variable prefix."""
    assert __init__conf__.LAYEREDCONF_SLUG == pyproject["project"]["name"].replace("_", "-")


@pytest.mark.os_agnostic
def test_layeredconf_vendor_and_app_are_set() -> None:
    """macOS and Windows config paths need both."""
    assert __init__conf__.LAYEREDCONF_VENDOR.strip()
    assert __init__conf__.LAYEREDCONF_APP.strip()


@pytest.mark.os_agnostic
def test_print_info_lists_metadata(capsys: pytest.CaptureFixture[str]) -> None:
    """print_info is re-exported at package level."""
    from acs_mail import print_info

    print_info()

    output = capsys.readouterr().out
    assert output.startswith("Info for acs-mail:")
    assert f"version       = {__init__conf__.version}" in output


@pytest.mark.os_agnostic
def test_py_typed_and_default_config_are_packaged(pyproject: dict[str, Any]) -> None:
    """Both data files exist and are listed in the wheel includes."""
    includes = pyproject["tool"]["hatch"]["build"]["targets"]["wheel"]["include"]

    for relative in ("src/acs_mail/py.typed", "src/acs_mail/adapters/config/defaultconfig.toml"):
        assert (PROJECT_ROOT / relative).is_file()
        assert relative in includes
