"""Unit tests for workspace configuration and session lifecycle."""

from unittest import mock

import pytest

from databricks_admin_core import identity
from databricks_admin_core.auth import (
    clear_workspace_config,
    get_client,
    get_workspace_config,
    set_workspace_config,
)
from databricks_admin_core.config import WorkspaceConfig
from databricks_admin_core.errors import ConfigurationError


# ── WorkspaceConfig ────────────────────────────────────────────────────


def test_host_normalized():
    config = WorkspaceConfig(host="adb-123.azuredatabricks.net/", token="t")
    assert config.host == "https://adb-123.azuredatabricks.net"


def test_http_host_kept():
    assert WorkspaceConfig(host="http://localhost:8080").host == "http://localhost:8080"


def test_defaults():
    config = WorkspaceConfig(host="h", token="t")
    assert config.api_version == "2.0"
    assert config.timeout == 60
    assert config.verify_ssl is True


def test_resolve_api_version():
    config = WorkspaceConfig(host="h", api_version="/2.1/")
    assert config.api_version == "2.1"
    assert config.resolve_api_version() == "2.1"
    assert config.resolve_api_version("2.0") == "2.0"


def test_static_token_headers():
    assert WorkspaceConfig(host="h", token="dapi1").auth_headers() == {"Authorization": "Bearer dapi1"}


def test_sdk_headers_without_token():
    config = WorkspaceConfig(host="https://h.cloud.databricks.com")
    with mock.patch("databricks_admin_core.config.Config") as sdk_config:
        sdk_config.return_value.authenticate.return_value = {"Authorization": "Bearer oauth"}
        assert config.auth_headers() == {"Authorization": "Bearer oauth"}
        assert config.auth_headers() == {"Authorization": "Bearer oauth"}
    # SDK config is built once and reused for fresh headers
    sdk_config.assert_called_once_with(host="https://h.cloud.databricks.com", profile=None)


def test_sdk_failure_is_configuration_error():
    config = WorkspaceConfig(host="https://h.cloud.databricks.com")
    with mock.patch("databricks_admin_core.config.Config", side_effect=ValueError("no auth")):
        with pytest.raises(ConfigurationError):
            config.auth_headers()


# ── from_environment ───────────────────────────────────────────────────


def test_from_environment_env_vars(monkeypatch):
    monkeypatch.setenv("DATABRICKS_HOST", "https://env.cloud.databricks.com")
    monkeypatch.setenv("DATABRICKS_TOKEN", "env-token")
    monkeypatch.setenv("DATABRICKS_API_VERSION", "2.1")

    config = WorkspaceConfig.from_environment()

    assert config.host == "https://env.cloud.databricks.com"
    assert config.token == "env-token"
    assert config.api_version == "2.1"


def test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("DATABRICKS_HOST", "https://env.cloud.databricks.com")
    config = WorkspaceConfig.from_environment(host="https://explicit.cloud.databricks.com", token="t")
    assert config.host == "https://explicit.cloud.databricks.com"


def test_missing_host():
    with pytest.raises(ConfigurationError):
        WorkspaceConfig.from_environment()


def test_profile_file(monkeypatch, tmp_path):
    cfg = tmp_path / ".databrickscfg"
    cfg.write_text(
        "[prod]\nhost = https://prod.cloud.databricks.com\ntoken = prod-token\naccount_id = acc-1\n"
    )
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(cfg))

    config = WorkspaceConfig.from_environment(profile="prod")

    assert config.host == "https://prod.cloud.databricks.com"
    assert config.token == "prod-token"
    assert config.account_id == "acc-1"


def test_unknown_profile(monkeypatch, tmp_path):
    cfg = tmp_path / ".databrickscfg"
    cfg.write_text("[dev]\nhost = https://dev.cloud.databricks.com\n")
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(cfg))

    with pytest.raises(ConfigurationError, match="Available profiles: dev"):
        WorkspaceConfig.from_environment(profile="prod")


def test_default_profile_used_without_host_or_profile(monkeypatch, tmp_path):
    cfg = tmp_path / ".databrickscfg"
    cfg.write_text("[DEFAULT]\nhost = https://default.cloud.databricks.com\ntoken = default-token\n")
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(cfg))

    config = WorkspaceConfig.from_environment()

    assert config.host == "https://default.cloud.databricks.com"
    assert config.token == "default-token"


def test_default_profile_not_used_when_host_given(monkeypatch, tmp_path):
    cfg = tmp_path / ".databrickscfg"
    cfg.write_text("[DEFAULT]\nhost = https://default.cloud.databricks.com\ntoken = default-token\n")
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("DATABRICKS_HOST", "https://env.cloud.databricks.com")

    config = WorkspaceConfig.from_environment()

    assert config.host == "https://env.cloud.databricks.com"
    assert config.token is None


def test_file_without_default_host_still_fails(monkeypatch, tmp_path):
    cfg = tmp_path / ".databrickscfg"
    cfg.write_text("[dev]\nhost = https://dev.cloud.databricks.com\n")
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(cfg))

    with pytest.raises(ConfigurationError):
        WorkspaceConfig.from_environment()


def test_project_file_defaults(tmp_path):
    (tmp_path / identity.CONFIG_FILENAME).write_text("api_version: '2.1'\naccount_id: acc-yaml\ntimeout: 15\n")

    config = WorkspaceConfig.from_environment(host="h", token="t")

    assert config.api_version == "2.1"
    assert config.account_id == "acc-yaml"
    assert config.timeout == 15


def test_environment_beats_project_file(monkeypatch, tmp_path):
    (tmp_path / identity.CONFIG_FILENAME).write_text("api_version: '2.1'\n")
    monkeypatch.setenv("DATABRICKS_API_VERSION", "2.0")

    assert WorkspaceConfig.from_environment(host="h").api_version == "2.0"


def test_unparseable_project_file_ignored(tmp_path):
    (tmp_path / identity.CONFIG_FILENAME).write_text("api_version: [unclosed\n")
    assert identity.load_project_config(refresh=True) == {}


# ── lifecycle ──────────────────────────────────────────────────────────


def test_context_config_roundtrip(config):
    set_workspace_config(config)
    assert get_workspace_config() is config

    clear_workspace_config()
    with pytest.raises(ConfigurationError):
        get_workspace_config()


def test_get_client_prefers_explicit(client):
    assert get_client(client) is client


def test_get_client_from_context(config):
    set_workspace_config(config)
    assert get_client().config is config
