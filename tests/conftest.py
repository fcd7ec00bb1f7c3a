"""
Pytest fixtures for databricks-admin-core unit tests.

No test talks to a real workspace: the dispatcher gets a mocked
``requests.Session`` and the environment is scrubbed of Databricks settings.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from databricks_admin_core import identity
from databricks_admin_core.auth import clear_workspace_config
from databricks_admin_core.client import DatabricksClient
from databricks_admin_core.config import WorkspaceConfig

TEST_HOST = "https://adb-1234567890123456.7.azuredatabricks.net"
TEST_TOKEN = "dapi-test-token"
TEST_ACCOUNT_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Strip Databricks env vars, project config and context state between tests."""
    for var in (
        "DATABRICKS_HOST",
        "DATABRICKS_TOKEN",
        "DATABRICKS_ACCOUNT_ID",
        "DATABRICKS_API_VERSION",
        "DATABRICKS_CONFIG_PROFILE",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DATABRICKS_CONFIG_FILE", str(tmp_path / "absent.databrickscfg"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(identity, "_git_toplevel", lambda: None)
    monkeypatch.setattr(identity, "_cached_config", None)
    clear_workspace_config()
    yield
    clear_workspace_config()


@pytest.fixture
def config() -> WorkspaceConfig:
    return WorkspaceConfig(host=TEST_HOST, token=TEST_TOKEN, account_id=TEST_ACCOUNT_ID)


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(config, session) -> DatabricksClient:
    return DatabricksClient(config, session=session)


@pytest.fixture
def make_response():
    """Factory for real ``requests.Response`` objects with a given status and body."""

    def _make(status_code=200, body=None, text=None, reason="OK"):
        response = requests.Response()
        response.status_code = status_code
        response.reason = reason
        response.encoding = "utf-8"
        response.url = TEST_HOST
        if body is not None:
            response._content = json.dumps(body).encode("utf-8")
        elif text is not None:
            response._content = text.encode("utf-8")
        else:
            response._content = b""
        return response

    return _make
