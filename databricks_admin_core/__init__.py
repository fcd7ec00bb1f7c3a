"""
Databricks Admin Core Library

Synchronous client for the Databricks workspace-administration REST APIs:
clusters, jobs, permissions, identity (SCIM) and Unity Catalog.
"""

__version__ = "0.1.0"

from .auth import clear_workspace_config, client_scope, get_client, get_workspace_config, set_workspace_config
from .client import DatabricksClient
from .config import WorkspaceConfig
from .errors import (
    AmbiguousParameterSet,
    ApiError,
    ConfigurationError,
    DatabricksAdminError,
    MissingRequiredField,
    ParameterError,
    TransportError,
    UnknownOperation,
    UnsupportedOperation,
)
from .operations import describe_operation, invoke, list_operations
from .permissions import (
    access_control_entry,
    get_permission_levels,
    get_permissions,
    resolve_parameter_set,
    set_permissions,
    update_permissions,
)

__all__ = [
    "DatabricksClient",
    "WorkspaceConfig",
    "set_workspace_config",
    "clear_workspace_config",
    "get_workspace_config",
    "get_client",
    "client_scope",
    "invoke",
    "list_operations",
    "describe_operation",
    "resolve_parameter_set",
    "access_control_entry",
    "get_permissions",
    "get_permission_levels",
    "set_permissions",
    "update_permissions",
    "DatabricksAdminError",
    "ConfigurationError",
    "ParameterError",
    "MissingRequiredField",
    "AmbiguousParameterSet",
    "UnsupportedOperation",
    "UnknownOperation",
    "ApiError",
    "TransportError",
]
