"""Basic tests for CLI functionality."""

import json

import pytest
from typer.testing import CliRunner

from health_sync.config import ENV_VARS
from hsync import app

runner = CliRunner()

# Blank values count as unset, masking whatever the host environment has.
CLEAN_ENV = {var: "" for var in ENV_VARS.values()}


def invoke(args, **env):
    return runner.invoke(app, args, env={**CLEAN_ENV, **env})


def test_help_command():
    """Test that help command works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "HealthSync Bridge" in result.stdout


def test_version_command():
    """Test that version command works."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


@pytest.mark.parametrize("command", [["sync"], ["vendor"], ["config"]])
def test_command_help(command):
    """Test that command help works."""
    result = runner.invoke(app, [*command, "--help"])
    assert result.exit_code == 0
    assert command[0] in result.stdout.lower()


def test_config_show_masks_secrets():
    result = invoke(
        ["config", "show"],
        HEALTHSYNC_SERVER_URL="https://health.example.com/sync",
        HEALTHSYNC_UPLOAD_USER="me",
        HEALTHSYNC_UPLOAD_PASSWORD="upload-secret",
    )

    assert result.exit_code == 0
    assert "********" in result.stdout
    assert "upload-secret" not in result.stdout


@pytest.mark.parametrize(
    "var, value",
    [("HEALTHSYNC_LOOKBACK_DAYS", "lots"), ("LOG_LEVEL", "chatty")],
)
def test_invalid_config_exits_1(var, value):
    result = invoke(["config", "show"], **{var: value})
    assert result.exit_code == 1
    assert var in result.stdout


def test_sync_without_health_source_exits_1():
    result = invoke(["sync"])
    assert result.exit_code == 1
    assert "HEALTHSYNC_EXPORT_PATH" in result.stdout


def test_sync_without_upload_config_exits_1(tmp_path):
    export = tmp_path / "export.json"
    export.write_text("{}")

    result = invoke(["sync"], HEALTHSYNC_EXPORT_PATH=str(export))

    assert result.exit_code == 1
    assert "Upload not configured" in result.stdout


def test_sync_rejects_bad_time():
    result = invoke(["sync", "--daily", "--at", "25:00"])
    assert result.exit_code == 1
    assert "Invalid time" in result.stdout


def test_dry_run_prints_payload_without_uploading(tmp_path):
    export = tmp_path / "export.json"
    export.write_text(json.dumps({"steps": []}))

    result = invoke(["sync", "--dry-run"], HEALTHSYNC_EXPORT_PATH=str(export))

    assert result.exit_code == 0
    assert "Dry Run" in result.stdout
    assert "Not connected" in result.stdout
    assert '"source": "health_connect_app"' in result.stdout


def test_dry_run_with_bad_export_exits_1(tmp_path):
    export = tmp_path / "export.json"
    export.write_text("not json")

    result = invoke(["sync", "--dry-run"], HEALTHSYNC_EXPORT_PATH=str(export))

    assert result.exit_code == 1
    assert "Cannot read health export" in result.stdout


def test_vendor_login_without_credential_exits_1():
    result = invoke(["vendor", "login"])
    assert result.exit_code == 1
    assert "Vendor not configured" in result.stdout
