"""
Endpoint Descriptors

One immutable descriptor per remote operation: HTTP method, path template and
API version, plus how its payload is built and its response unwrapped.
Operations are generated from this table rather than written out one by one.
"""

import string
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote

from .client import JSON_CONTENT_TYPE, SCIM_CONTENT_TYPE
from .errors import MissingRequiredField
from .payload import FieldSpec, InsertionPolicy, RequestPayload, is_empty

SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
SCIM_GROUP_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:Group"
SCIM_PATCH_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:PatchOp"


@dataclass(frozen=True)
class EndpointDescriptor:
    """
    Fixed description of one remote operation.

    Attributes:
        method: HTTP method
        path_template: Path below ``/api/<version>/`` with ``{placeholders}``
        api_version: API version for this endpoint
        list_key: Envelope field unwrapped by default (None = return envelope)
        content_type: Body content type override (SCIM endpoints)
        required: Payload fields that must be supplied
        fields: Insertion policies for payload fields (others skip-if-empty)
        optional_path: Placeholders that may be omitted; their path segment is
            dropped. Supplying one addresses a single resource, so the
            envelope is returned without unwrapping.
    """

    method: str
    path_template: str
    api_version: str = "2.0"
    list_key: Optional[str] = None
    content_type: Optional[str] = None
    required: Tuple[str, ...] = ()
    fields: Tuple[FieldSpec, ...] = ()
    optional_path: Tuple[str, ...] = ()

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(name for _, name, _, _ in string.Formatter().parse(self.path_template) if name)


def _sentinel(name: str) -> FieldSpec:
    return FieldSpec(name, InsertionPolicy.SENTINEL_SKIP)


def _forced(name: str, default: Any = None) -> FieldSpec:
    return FieldSpec(name, InsertionPolicy.FORCE, default=default)


def _scim(method: str, path_template: str, **kwargs: Any) -> EndpointDescriptor:
    return EndpointDescriptor(method, path_template, content_type=SCIM_CONTENT_TYPE, **kwargs)


ENDPOINTS: Dict[str, EndpointDescriptor] = {
    # --- Clusters ---
    "clusters.list": EndpointDescriptor("GET", "clusters/list", list_key="clusters"),
    "clusters.get": EndpointDescriptor("GET", "clusters/get", required=("cluster_id",)),
    "clusters.create": EndpointDescriptor(
        "POST", "clusters/create", required=("spark_version",), fields=(_sentinel("num_workers"),)
    ),
    "clusters.edit": EndpointDescriptor(
        "POST", "clusters/edit", required=("cluster_id", "spark_version"), fields=(_sentinel("num_workers"),)
    ),
    "clusters.start": EndpointDescriptor("POST", "clusters/start", required=("cluster_id",)),
    "clusters.restart": EndpointDescriptor("POST", "clusters/restart", required=("cluster_id",)),
    "clusters.delete": EndpointDescriptor("POST", "clusters/delete", required=("cluster_id",)),
    "clusters.permanent_delete": EndpointDescriptor("POST", "clusters/permanent-delete", required=("cluster_id",)),
    "clusters.pin": EndpointDescriptor("POST", "clusters/pin", required=("cluster_id",)),
    "clusters.unpin": EndpointDescriptor("POST", "clusters/unpin", required=("cluster_id",)),
    "clusters.events": EndpointDescriptor(
        "POST",
        "clusters/events",
        list_key="events",
        required=("cluster_id",),
        fields=(_sentinel("limit"), _sentinel("offset"), _sentinel("start_time"), _sentinel("end_time")),
    ),
    "clusters.list_node_types": EndpointDescriptor("GET", "clusters/list-node-types", list_key="node_types"),
    "clusters.spark_versions": EndpointDescriptor("GET", "clusters/spark-versions", list_key="versions"),
    # --- Cluster policies ---
    "cluster_policies.list": EndpointDescriptor("GET", "policies/clusters/list", list_key="policies"),
    "cluster_policies.get": EndpointDescriptor("GET", "policies/clusters/get", required=("policy_id",)),
    # --- Instance pools ---
    "instance_pools.list": EndpointDescriptor("GET", "instance-pools/list", list_key="instance_pools"),
    "instance_pools.get": EndpointDescriptor("GET", "instance-pools/get", required=("instance_pool_id",)),
    "instance_pools.create": EndpointDescriptor(
        "POST",
        "instance-pools/create",
        required=("instance_pool_name", "node_type_id"),
        fields=(_sentinel("min_idle_instances"), _sentinel("max_capacity")),
    ),
    "instance_pools.delete": EndpointDescriptor("POST", "instance-pools/delete", required=("instance_pool_id",)),
    # --- Jobs ---
    "jobs.list": EndpointDescriptor(
        "GET", "jobs/list", api_version="2.1", list_key="jobs", fields=(_sentinel("limit"), _sentinel("offset"))
    ),
    "jobs.get": EndpointDescriptor("GET", "jobs/get", api_version="2.1", required=("job_id",)),
    "jobs.create": EndpointDescriptor("POST", "jobs/create", api_version="2.1", required=("name",)),
    "jobs.reset": EndpointDescriptor("POST", "jobs/reset", api_version="2.1", required=("job_id", "new_settings")),
    "jobs.update": EndpointDescriptor("POST", "jobs/update", api_version="2.1", required=("job_id",)),
    "jobs.delete": EndpointDescriptor("POST", "jobs/delete", api_version="2.1", required=("job_id",)),
    "jobs.run_now": EndpointDescriptor("POST", "jobs/run-now", api_version="2.1", required=("job_id",)),
    "jobs.runs_list": EndpointDescriptor(
        "GET",
        "jobs/runs/list",
        api_version="2.1",
        list_key="runs",
        fields=(_sentinel("job_id"), _sentinel("limit"), _sentinel("offset")),
    ),
    "jobs.runs_get": EndpointDescriptor("GET", "jobs/runs/get", api_version="2.1", required=("run_id",)),
    "jobs.runs_cancel": EndpointDescriptor("POST", "jobs/runs/cancel", api_version="2.1", required=("run_id",)),
    "jobs.runs_get_output": EndpointDescriptor(
        "GET", "jobs/runs/get-output", api_version="2.1", required=("run_id",)
    ),
    # --- Tokens ---
    "tokens.list": EndpointDescriptor("GET", "token/list", list_key="token_infos"),
    # lifetime_seconds of -1 and an omitted lifetime both mean "never expires"
    "tokens.create": EndpointDescriptor("POST", "token/create", fields=(_sentinel("lifetime_seconds"),)),
    "tokens.revoke": EndpointDescriptor("POST", "token/delete", required=("token_id",)),
    "token_management.get": EndpointDescriptor(
        "GET", "token-management/tokens/{token_id}", list_key="token_infos", optional_path=("token_id",)
    ),
    # --- Identity (SCIM) ---
    "scim.me": _scim("GET", "preview/scim/v2/Me"),
    "scim.users.get": _scim(
        "GET",
        "preview/scim/v2/Users/{user_id}",
        list_key="Resources",
        optional_path=("user_id",),
        fields=(_sentinel("count"), _sentinel("startIndex")),
    ),
    "scim.users.create": _scim(
        "POST", "preview/scim/v2/Users", required=("userName",), fields=(_forced("schemas", [SCIM_USER_SCHEMA]),)
    ),
    "scim.users.patch": _scim(
        "PATCH",
        "preview/scim/v2/Users/{user_id}",
        required=("Operations",),
        fields=(_forced("schemas", [SCIM_PATCH_SCHEMA]),),
    ),
    "scim.users.delete": _scim("DELETE", "preview/scim/v2/Users/{user_id}"),
    "scim.groups.get": _scim(
        "GET",
        "preview/scim/v2/Groups/{group_id}",
        list_key="Resources",
        optional_path=("group_id",),
        fields=(_sentinel("count"), _sentinel("startIndex")),
    ),
    "scim.groups.create": _scim(
        "POST",
        "preview/scim/v2/Groups",
        required=("displayName",),
        fields=(_forced("schemas", [SCIM_GROUP_SCHEMA]),),
    ),
    "scim.groups.patch": _scim(
        "PATCH",
        "preview/scim/v2/Groups/{group_id}",
        required=("Operations",),
        fields=(_forced("schemas", [SCIM_PATCH_SCHEMA]),),
    ),
    "scim.groups.delete": _scim("DELETE", "preview/scim/v2/Groups/{group_id}"),
    "scim.service_principals.get": _scim(
        "GET",
        "preview/scim/v2/ServicePrincipals/{service_principal_id}",
        list_key="Resources",
        optional_path=("service_principal_id",),
    ),
    # --- Workspace ---
    "workspace.list": EndpointDescriptor("GET", "workspace/list", list_key="objects", required=("path",)),
    "workspace.get_status": EndpointDescriptor("GET", "workspace/get-status", required=("path",)),
    "workspace.mkdirs": EndpointDescriptor("POST", "workspace/mkdirs", required=("path",)),
    "workspace.delete": EndpointDescriptor(
        "POST", "workspace/delete", required=("path",), fields=(_forced("recursive", False),)
    ),
    # --- Secrets ---
    "secrets.scopes_list": EndpointDescriptor("GET", "secrets/scopes/list", list_key="scopes"),
    "secrets.list": EndpointDescriptor("GET", "secrets/list", list_key="secrets", required=("scope",)),
    # --- SQL warehouses ---
    "sql_warehouses.get": EndpointDescriptor(
        "GET", "sql/warehouses/{warehouse_id}", list_key="warehouses", optional_path=("warehouse_id",)
    ),
    "sql_warehouses.start": EndpointDescriptor("POST", "sql/warehouses/{warehouse_id}/start"),
    "sql_warehouses.stop": EndpointDescriptor("POST", "sql/warehouses/{warehouse_id}/stop"),
    # --- Unity Catalog ---
    "unity_catalog.catalogs.get": EndpointDescriptor(
        "GET",
        "unity-catalog/catalogs/{name}",
        api_version="2.1",
        list_key="catalogs",
        optional_path=("name",),
        fields=(_sentinel("max_results"),),
    ),
    "unity_catalog.catalogs.create": EndpointDescriptor(
        "POST", "unity-catalog/catalogs", api_version="2.1", required=("name",)
    ),
    "unity_catalog.catalogs.delete": EndpointDescriptor(
        "DELETE", "unity-catalog/catalogs/{name}", api_version="2.1"
    ),
    "unity_catalog.schemas.get": EndpointDescriptor(
        "GET",
        "unity-catalog/schemas/{full_name}",
        api_version="2.1",
        list_key="schemas",
        optional_path=("full_name",),
        fields=(_sentinel("max_results"),),
    ),
    "unity_catalog.tables.get": EndpointDescriptor(
        "GET",
        "unity-catalog/tables/{full_name}",
        api_version="2.1",
        list_key="tables",
        optional_path=("full_name",),
        fields=(_sentinel("max_results"),),
    ),
    "unity_catalog.grants.get": EndpointDescriptor(
        "GET",
        "unity-catalog/permissions/{securable_type}/{full_name}",
        api_version="2.1",
        list_key="privilege_assignments",
    ),
    "unity_catalog.grants.update": EndpointDescriptor(
        "PATCH",
        "unity-catalog/permissions/{securable_type}/{full_name}",
        api_version="2.1",
        list_key="privilege_assignments",
        required=("changes",),
    ),
    # --- Account ---
    "account.workspaces.list": EndpointDescriptor("GET", "accounts/{account_id}/workspaces"),
    "account.users.get": _scim(
        "GET",
        "accounts/{account_id}/scim/v2/Users/{user_id}",
        list_key="Resources",
        optional_path=("user_id",),
    ),
}


def _fill_path(name: str, descriptor: EndpointDescriptor, path_values: Mapping[str, Any]) -> str:
    segments = []
    for segment in descriptor.path_template.split("/"):
        names = [n for _, n, _, _ in string.Formatter().parse(segment) if n]
        missing = [n for n in names if is_empty(path_values.get(n))]
        if missing:
            if all(n in descriptor.optional_path for n in missing):
                continue
            raise MissingRequiredField(missing[0], endpoint=name)
        segments.append(segment.format(**{n: quote(str(path_values[n]), safe="") for n in names}))
    return "/".join(segments)


def build_request(
    name: str, descriptor: EndpointDescriptor, params: Mapping[str, Any]
) -> Tuple[str, Dict[str, Any], bool]:
    """
    Resolve the path and payload for one call. Pure: sends nothing.

    Args:
        name: Operation name (for error messages)
        descriptor: Endpoint descriptor
        params: Caller-supplied parameters (path placeholders and payload fields)

    Returns:
        Tuple of (path, payload, single_resource) where ``single_resource`` is True
        when an optional path id was supplied

    Raises:
        MissingRequiredField: If a path placeholder or required field is missing
    """
    placeholders = descriptor.placeholders
    path_values = {k: v for k, v in params.items() if k in placeholders}
    body_values = {k: v for k, v in params.items() if k not in placeholders}

    path = _fill_path(name, descriptor, path_values)

    for field in descriptor.required:
        if is_empty(body_values.get(field)):
            raise MissingRequiredField(field, endpoint=name)

    payload = RequestPayload().update(body_values, descriptor.fields).to_dict()
    single_resource = any(not is_empty(path_values.get(n)) for n in descriptor.optional_path)
    return path, payload, single_resource


def unwrap_envelope(envelope: Any, list_key: Optional[str], raw: bool = False) -> Any:
    """
    Extract ``list_key`` from a response envelope.

    The envelope is returned unchanged when ``raw`` is set, when there is no
    ``list_key`` or when the response isn't an object. The API omits empty
    list fields, so a missing ``list_key`` yields an empty list.
    """
    if raw or not list_key or not isinstance(envelope, dict):
        return envelope
    return envelope.get(list_key, [])


def content_type_for(descriptor: EndpointDescriptor) -> str:
    return descriptor.content_type or JSON_CONTENT_TYPE
