"""
Operations - table-driven command catalog

Every entry of ``ENDPOINTS`` is callable through ``invoke``:

    clusters = invoke("clusters.list")
    cluster = invoke("clusters.get", cluster_id="0712-123003-rail519")
    envelope = invoke("jobs.list", limit=25, raw=True)
"""

import logging
from typing import Any, Dict, List, Optional

from .auth import client_scope
from .client import DatabricksClient
from .endpoints import ENDPOINTS, EndpointDescriptor, build_request, content_type_for, unwrap_envelope
from .errors import UnknownOperation

logger = logging.getLogger(__name__)


def get_descriptor(name: str) -> EndpointDescriptor:
    """
    Look up an operation by name.

    Raises:
        UnknownOperation: If the name is not in the catalog
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise UnknownOperation(f"Unknown operation: '{name}'. See list_operations() for valid names.", endpoint=name)


def list_operations(prefix: Optional[str] = None) -> List[str]:
    """Names of all catalog operations, optionally filtered by a family prefix (e.g. "jobs")."""
    names = sorted(ENDPOINTS)
    if prefix:
        names = [n for n in names if n == prefix or n.startswith(f"{prefix}.")]
    return names


def describe_operation(name: str) -> Dict[str, Any]:
    """Summary of an operation's descriptor, for discovery and documentation."""
    descriptor = get_descriptor(name)
    return {
        "name": name,
        "method": descriptor.method,
        "path": f"/api/{descriptor.api_version}/{descriptor.path_template}",
        "list_key": descriptor.list_key,
        "content_type": content_type_for(descriptor),
        "path_parameters": list(descriptor.placeholders),
        "optional_path_parameters": list(descriptor.optional_path),
        "required": list(descriptor.required),
    }


def invoke(operation: str, /, *, raw: bool = False, client: Optional[DatabricksClient] = None, **params: Any) -> Any:
    """
    Call one catalog operation.

    Args:
        operation: Operation name (e.g., "clusters.list", "scim.users.get")
        raw: Return the full response envelope instead of the unwrapped list field
        client: Dispatcher to use (default: one for the context configuration,
            closed when the call returns)
        **params: Path placeholders and payload fields. ``account_id`` is filled
            from the configuration for account-level operations.

    Returns:
        The unwrapped list field for list operations; the envelope when ``raw``
        is set, when a single resource id was supplied, or when the operation
        has no list field

    Raises:
        UnknownOperation: If the name is not in the catalog
        MissingRequiredField: If a required path value or field is missing (nothing is sent)
        ApiError: If the API request fails
        TransportError: If no response is obtained
    """
    descriptor = get_descriptor(operation)
    needs_account = "account_id" in descriptor.placeholders and params.get("account_id") is None

    if not needs_account:
        request = build_request(operation, descriptor, params)

    with client_scope(client) as active:
        if needs_account:
            params["account_id"] = active.config.account_id
            request = build_request(operation, descriptor, params)

        path, payload, single_resource = request
        logger.debug(f"Invoking {operation}: {descriptor.method} {path}")
        envelope = active.request(
            descriptor.method,
            path,
            payload,
            content_type=descriptor.content_type,
            api_version=descriptor.api_version,
        )
    return unwrap_envelope(envelope, descriptor.list_key, raw=raw or single_resource)
