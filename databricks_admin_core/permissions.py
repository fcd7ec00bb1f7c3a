"""
Permissions - Parameter sets and permission commands

Object permissions are addressed in several mutually exclusive ways (by cluster
id, by job id, by a generic object type + id, by workspace object type, ...).
Each way is an explicit parameter-set dataclass; ``resolve_parameter_set``
picks one from keyword arguments using a fixed precedence table, and
``normalize`` turns it into the lowercase path suffix under ``permissions/``.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, Union

from .auth import client_scope
from .client import DatabricksClient
from .endpoints import unwrap_envelope
from .errors import AmbiguousParameterSet, MissingRequiredField, UnsupportedOperation
from .payload import RequestPayload, is_empty

logger = logging.getLogger(__name__)

PERMISSIONS_PREFIX = "permissions"

# Generic object types accepted by ByGenericObjectTypeAndId, mapped to their path token
GENERIC_OBJECT_TYPES: Dict[str, str] = {
    "CLUSTERS": "clusters",
    "CLUSTER-POLICIES": "cluster-policies",
    "INSTANCE-POOLS": "instance-pools",
    "JOBS": "jobs",
    "PIPELINES": "pipelines",
    "NOTEBOOKS": "notebooks",
    "DIRECTORIES": "directories",
    "REGISTERED-MODELS": "registered-models",
    "EXPERIMENTS": "experiments",
    "REPOS": "repos",
    "FILES": "files",
    "SQL/WAREHOUSES": "sql/warehouses",
    "SERVING-ENDPOINTS": "serving-endpoints",
}

# Authorization resources are workspace-wide: the path carries no id segment
AUTHORIZATION_TYPES: Dict[str, str] = {
    "TOKENS": "tokens",
    "PASSWORDS": "passwords",
}

# Workspace object types (as returned by workspace/list) that have a permission model
WORKSPACE_OBJECT_TYPES: Dict[str, str] = {
    "NOTEBOOK": "notebooks",
    "DIRECTORY": "directories",
    "REPO": "repos",
    "FILE": "files",
    "MLFLOW_EXPERIMENT": "experiments",
}

# Workspace object types known to reject permission calls
UNSUPPORTED_WORKSPACE_OBJECT_TYPES = frozenset({"LIBRARY", "DASHBOARD"})

OPERATIONS = ("get", "get_levels", "set", "update")


# Spellings that canonicalize to something other than a GENERIC_OBJECT_TYPES key
_TYPE_ALIASES = {"SQL-WAREHOUSES": "SQL/WAREHOUSES"}


def _canonical_type(value: str) -> str:
    key = str(value).strip().upper().replace("_", "-")
    return _TYPE_ALIASES.get(key, key)


@dataclass(frozen=True)
class ParameterSet:
    """Base class for one way of addressing an object's permissions."""

    object_type: ClassVar[str] = ""

    def to_path(self, operation: str = "get") -> str:
        """Lowercase ``<object-type>/<object-id>`` path suffix."""
        object_id = getattr(self, fields(self)[0].name)
        if is_empty(object_id):
            raise MissingRequiredField(fields(self)[0].name)
        return f"{self.object_type.lower()}/{object_id}"


@dataclass(frozen=True)
class ByClusterId(ParameterSet):
    cluster_id: str
    object_type: ClassVar[str] = "clusters"


@dataclass(frozen=True)
class ByJobId(ParameterSet):
    job_id: Union[int, str]
    object_type: ClassVar[str] = "jobs"


@dataclass(frozen=True)
class ByInstancePoolId(ParameterSet):
    instance_pool_id: str
    object_type: ClassVar[str] = "instance-pools"


@dataclass(frozen=True)
class ByClusterPolicyId(ParameterSet):
    cluster_policy_id: str
    object_type: ClassVar[str] = "cluster-policies"


@dataclass(frozen=True)
class ByPipelineId(ParameterSet):
    pipeline_id: str
    object_type: ClassVar[str] = "pipelines"


@dataclass(frozen=True)
class ByDirectoryId(ParameterSet):
    directory_id: Union[int, str]
    object_type: ClassVar[str] = "directories"


@dataclass(frozen=True)
class ByNotebookId(ParameterSet):
    notebook_id: Union[int, str]
    object_type: ClassVar[str] = "notebooks"


@dataclass(frozen=True)
class ByRegisteredModelId(ParameterSet):
    registered_model_id: str
    object_type: ClassVar[str] = "registered-models"


@dataclass(frozen=True)
class ByExperimentId(ParameterSet):
    experiment_id: str
    object_type: ClassVar[str] = "experiments"


@dataclass(frozen=True)
class BySqlEndpointId(ParameterSet):
    sql_endpoint_id: str
    object_type: ClassVar[str] = "sql/warehouses"


@dataclass(frozen=True)
class ByWorkspaceObjectType(ParameterSet):
    """Workspace item addressed by its ``object_type`` from workspace/list and its ``object_id``."""

    workspace_object_type: str
    workspace_object_id: Optional[Union[int, str]] = None

    def to_path(self, operation: str = "get") -> str:
        if is_empty(self.workspace_object_type):
            raise MissingRequiredField("workspace_object_type")
        key = str(self.workspace_object_type).strip().upper()
        if key in UNSUPPORTED_WORKSPACE_OBJECT_TYPES or key not in WORKSPACE_OBJECT_TYPES:
            raise UnsupportedOperation(key, f"permissions.{operation}")
        if is_empty(self.workspace_object_id):
            raise MissingRequiredField("workspace_object_id")
        return f"{WORKSPACE_OBJECT_TYPES[key]}/{self.workspace_object_id}"


@dataclass(frozen=True)
class ByGenericObjectTypeAndId(ParameterSet):
    """Any object type by name. Authorization types (TOKENS, PASSWORDS) ignore ``object_id``."""

    object_type_name: str
    object_id: Optional[Union[int, str]] = None

    def to_path(self, operation: str = "get") -> str:
        if is_empty(self.object_type_name):
            raise MissingRequiredField("object_type")
        key = _canonical_type(self.object_type_name)
        if key.startswith("AUTHORIZATION/"):
            key = key.split("/", 1)[1]
        if key == "AUTHORIZATION":
            raise MissingRequiredField(
                "object_type",
                message="Object type 'AUTHORIZATION' needs a sub-type: one of " + ", ".join(AUTHORIZATION_TYPES),
            )

        if key in AUTHORIZATION_TYPES:
            if not is_empty(self.object_id):
                logger.debug(f"Ignoring object_id '{self.object_id}' for authorization type {key}")
            return f"authorization/{AUTHORIZATION_TYPES[key]}"

        if key not in GENERIC_OBJECT_TYPES:
            raise UnsupportedOperation(key, f"permissions.{operation}")
        if is_empty(self.object_id):
            raise MissingRequiredField("object_id")
        return f"{GENERIC_OBJECT_TYPES[key]}/{self.object_id}"


# Precedence order used by resolve_parameter_set: (variant, keyword arguments it accepts).
# The first name of each entry is the variant's trigger field.
PARAMETER_SETS: List[Tuple[Type[ParameterSet], Tuple[str, ...]]] = [
    (ByClusterId, ("cluster_id",)),
    (ByJobId, ("job_id",)),
    (ByInstancePoolId, ("instance_pool_id",)),
    (ByClusterPolicyId, ("cluster_policy_id",)),
    (ByPipelineId, ("pipeline_id",)),
    (ByDirectoryId, ("directory_id",)),
    (ByNotebookId, ("notebook_id",)),
    (ByRegisteredModelId, ("registered_model_id",)),
    (ByExperimentId, ("experiment_id",)),
    (BySqlEndpointId, ("sql_endpoint_id",)),
    (ByWorkspaceObjectType, ("workspace_object_type", "workspace_object_id")),
    (ByGenericObjectTypeAndId, ("object_type", "object_id")),
]

_ACCEPTED_KWARGS = frozenset(name for _, names in PARAMETER_SETS for name in names)


def resolve_parameter_set(**kwargs: Any) -> ParameterSet:
    """
    Pick exactly one parameter set from keyword arguments.

    Variants are checked in ``PARAMETER_SETS`` order. A variant is a candidate
    when any of its fields is supplied (non-empty). Supplying fields from two
    variants is rejected rather than resolved silently.

    Args:
        **kwargs: cluster_id, job_id, ..., workspace_object_type/workspace_object_id,
            object_type/object_id

    Returns:
        The selected ParameterSet

    Raises:
        TypeError: If an unknown keyword is passed
        MissingRequiredField: If no parameter set is supplied at all
        AmbiguousParameterSet: If fields of more than one parameter set are supplied
    """
    unknown = set(kwargs) - _ACCEPTED_KWARGS
    if unknown:
        raise TypeError(f"Unexpected parameter(s): {sorted(unknown)}. Accepted: {sorted(_ACCEPTED_KWARGS)}")

    supplied = {k: v for k, v in kwargs.items() if not is_empty(v)}
    matches = [(variant, names) for variant, names in PARAMETER_SETS if any(n in supplied for n in names)]

    if not matches:
        raise MissingRequiredField(
            "object_id",
            message="No object was specified. Supply one of: " + ", ".join(names[0] for _, names in PARAMETER_SETS),
        )
    if len(matches) > 1:
        raise AmbiguousParameterSet([variant.__name__ for variant, _ in matches])

    variant, names = matches[0]
    return variant(*(supplied.get(name) for name in names))


def normalize(parameter_set: ParameterSet, operation: str = "get") -> str:
    """
    Path suffix (below ``permissions/``) for a parameter set.

    Raises:
        MissingRequiredField: If the id the variant needs is missing
        UnsupportedOperation: If the object type has no permission model
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Invalid operation: '{operation}'. Valid operations: {list(OPERATIONS)}")
    return parameter_set.to_path(operation)


def permissions_path(parameter_set: ParameterSet, operation: str = "get") -> str:
    path = f"{PERMISSIONS_PREFIX}/{normalize(parameter_set, operation)}"
    if operation == "get_levels":
        path += "/permissionLevels"
    return path


def _resolve(parameter_set: Optional[ParameterSet], kwargs: Dict[str, Any]) -> ParameterSet:
    if parameter_set is not None:
        if any(not is_empty(v) for v in kwargs.values()):
            raise AmbiguousParameterSet([type(parameter_set).__name__, "keyword arguments"])
        return parameter_set
    return resolve_parameter_set(**kwargs)


def access_control_entry(
    permission_level: str,
    user_name: Optional[str] = None,
    group_name: Optional[str] = None,
    service_principal_name: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build one access control entry for set/update calls.

    Exactly one of user_name, group_name or service_principal_name must be given.

    Raises:
        MissingRequiredField: If no principal or permission level is given
        AmbiguousParameterSet: If more than one principal is given
    """
    principals = {
        "user_name": user_name,
        "group_name": group_name,
        "service_principal_name": service_principal_name,
    }
    supplied = [name for name, value in principals.items() if not is_empty(value)]
    if not supplied:
        raise MissingRequiredField("user_name | group_name | service_principal_name")
    if len(supplied) > 1:
        raise AmbiguousParameterSet(supplied)
    if is_empty(permission_level):
        raise MissingRequiredField("permission_level")
    return {supplied[0]: principals[supplied[0]], "permission_level": str(permission_level).upper()}


def get_permissions(
    parameter_set: Optional[ParameterSet] = None,
    raw: bool = False,
    client: Optional[DatabricksClient] = None,
    **kwargs: Any,
) -> Any:
    """
    Get the access control list of an object.

    Args:
        parameter_set: Explicit parameter set (alternative to keyword arguments)
        raw: Return the full response envelope instead of ``access_control_list``
        client: Dispatcher to use (default: one for the context configuration)
        **kwargs: Keyword form of the parameter set (see resolve_parameter_set)

    Returns:
        List of access control entries, or the envelope when ``raw`` is set

    Raises:
        ParameterError: If the object can't be resolved (no request is sent)
        ApiError: If the API request fails
    """
    path = permissions_path(_resolve(parameter_set, kwargs), "get")
    with client_scope(client) as active:
        envelope = active.get(path)
    return unwrap_envelope(envelope, "access_control_list", raw=raw)


def get_permission_levels(
    parameter_set: Optional[ParameterSet] = None,
    raw: bool = False,
    client: Optional[DatabricksClient] = None,
    **kwargs: Any,
) -> Any:
    """Get the permission levels that can be granted on an object."""
    path = permissions_path(_resolve(parameter_set, kwargs), "get_levels")
    with client_scope(client) as active:
        envelope = active.get(path)
    return unwrap_envelope(envelope, "permission_levels", raw=raw)


def set_permissions(
    access_control_list: List[Dict[str, Any]],
    parameter_set: Optional[ParameterSet] = None,
    raw: bool = False,
    client: Optional[DatabricksClient] = None,
    **kwargs: Any,
) -> Any:
    """
    Replace all direct permissions of an object.

    An empty ``access_control_list`` is sent as-is and removes every direct grant.
    """
    path = permissions_path(_resolve(parameter_set, kwargs), "set")
    body = RequestPayload().force("access_control_list", list(access_control_list or []))
    with client_scope(client) as active:
        envelope = active.put(path, body.to_dict())
    return unwrap_envelope(envelope, "access_control_list", raw=raw)


def update_permissions(
    access_control_list: List[Dict[str, Any]],
    parameter_set: Optional[ParameterSet] = None,
    raw: bool = False,
    client: Optional[DatabricksClient] = None,
    **kwargs: Any,
) -> Any:
    """
    Add permissions to an object, keeping existing grants.

    Raises:
        MissingRequiredField: If ``access_control_list`` is empty
    """
    if is_empty(access_control_list):
        raise MissingRequiredField("access_control_list")
    path = permissions_path(_resolve(parameter_set, kwargs), "update")
    body = RequestPayload().add("access_control_list", list(access_control_list))
    with client_scope(client) as active:
        envelope = active.patch(path, body.to_dict())
    return unwrap_envelope(envelope, "access_control_list", raw=raw)
