"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from ocphelpers.cli import main
from ocphelpers.constants import CONFIG_FILE_ENV_VAR

from .support.constants import TEST_IMAGE, TEST_NAMESPACE
from .support.openshift import MockOpenShiftImageApi


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("logLevel: WARNING\n")
    return path


def test_help() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["help"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Commands:" in result.output

    result = runner.invoke(main, ["help", "volume"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "SECRET" in result.output

    result = runner.invoke(main, ["help", "unknown-command"])
    assert result.exit_code != 0


def test_volume() -> None:
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["volume", "tls", "server-tls", "-i", "tls.crt=server.crt"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert yaml.safe_load(result.output) == {
        "name": "tls",
        "secret": {
            "secretName": "server-tls",
            "items": [{"key": "tls.crt", "path": "server.crt"}],
        },
    }

    result = runner.invoke(
        main,
        ["volume", "tls", "server-tls", "--default-mode", "256"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert yaml.safe_load(result.output) == {
        "name": "tls",
        "secret": {"secretName": "server-tls", "defaultMode": 256},
    }


def test_volume_errors() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["volume", "tls", "secret", "-i", "bogus"])
    assert result.exit_code == 2
    assert "is not of the form KEY=PATH" in result.output

    result = runner.invoke(main, ["volume", "tls", ""])
    assert result.exit_code == 2
    assert "Secret name must not be empty" in result.output


def test_inspect(
    config_path: Path, mock_openshift: MockOpenShiftImageApi
) -> None:
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["inspect", TEST_IMAGE, "-c", str(config_path), "-n", TEST_NAMESPACE],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "labels": {
            "io.k8s.display-name": "Apache httpd 2.4",
            "io.openshift.expose-services": "8080:http,8443:https",
            "io.openshift.s2i.scripts-url": "image:///usr/libexec/s2i",
            "version": "2.4",
        },
        "command": "/usr/bin/run-httpd",
        "entrypoint": ["container-entrypoint"],
        "env": {
            "PATH": (
                "/opt/app-root/src/bin:/usr/local/sbin:/usr/local/bin"
                ":/usr/sbin:/usr/bin"
            ),
            "HTTPD_VERSION": "2.4",
            "HTTPD_MAIN_CONF_PATH": "/etc/httpd/conf",
            "OPTIONS": "--debug=true --level=info",
        },
        "exposedPorts": [8080, 8443],
        "user": "1001",
        "workingDir": "/opt/app-root/src",
    }
    stream = mock_openshift.get_object_for_test(
        "imagestreams", TEST_NAMESPACE, "httpd-24-rhel7"
    )
    assert stream


def test_inspect_env_config(
    config_path: Path,
    mock_openshift: MockOpenShiftImageApi,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    config_path.write_text("logLevel: WARNING\nnamespace: from-file\n")
    monkeypatch.setenv(CONFIG_FILE_ENV_VAR, str(config_path))
    runner = CliRunner()
    result = runner.invoke(
        main, ["inspect", TEST_IMAGE, "-p", "UDP"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert json.loads(result.output)["exposedPorts"] == [8443]
    stream = mock_openshift.get_object_for_test(
        "imagestreams", "from-file", "httpd-24-rhel7"
    )
    assert stream
