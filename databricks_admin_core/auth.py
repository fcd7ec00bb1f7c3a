"""Session lifecycle for the workspace configuration.

Uses Python contextvars to carry the active ``WorkspaceConfig`` through the
call stack without threading it through every operation.

Usage:
    set_workspace_config(WorkspaceConfig(host=host, token=token))
    try:
        clusters = invoke("clusters.list")
    finally:
        clear_workspace_config()

Operations also accept an explicit ``client=`` argument, which bypasses the
context entirely.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from .client import DatabricksClient
from .config import WorkspaceConfig

_config_ctx: ContextVar[Optional[WorkspaceConfig]] = ContextVar("databricks_admin_config", default=None)


def set_workspace_config(config: WorkspaceConfig) -> None:
    """Install the configuration used by operations called without ``client=``.

    Args:
        config: Workspace configuration for the current context
    """
    _config_ctx.set(config)


def clear_workspace_config() -> None:
    """Remove the configuration from the current context."""
    _config_ctx.set(None)


def get_workspace_config() -> WorkspaceConfig:
    """Get the context configuration, or build one from the environment.

    Raises:
        ConfigurationError: If nothing is set and the environment has no host
    """
    config = _config_ctx.get()
    if config is not None:
        return config
    return WorkspaceConfig.from_environment()


def get_client(client: Optional[DatabricksClient] = None) -> DatabricksClient:
    """Return ``client`` if given, else a dispatcher for the current configuration."""
    if client is not None:
        return client
    return DatabricksClient(get_workspace_config())


@contextmanager
def client_scope(client: Optional[DatabricksClient] = None) -> Iterator[DatabricksClient]:
    """Yield ``client`` if given, else a dispatcher that is closed on exit.

    A caller-supplied client stays open; its owner closes it.
    """
    if client is not None:
        yield client
        return
    with DatabricksClient(get_workspace_config()) as owned:
        yield owned
