"""
Lookups - advisory validation sets

Helpers that fetch the ids currently valid in a workspace (cluster ids, job
ids, ...) so interactive callers can offer or pre-check choices. They are
never consulted by the dispatch path: a value missing from a lookup is only
logged, and the request is still the caller's decision.
"""

import logging
from typing import Any, Iterable, List, Optional

from .client import DatabricksClient
from .operations import invoke

logger = logging.getLogger(__name__)


def _ids(items: Any, key: str) -> List[str]:
    if not isinstance(items, list):
        return []
    return [str(item[key]) for item in items if isinstance(item, dict) and item.get(key) is not None]


def list_cluster_ids(client: Optional[DatabricksClient] = None) -> List[str]:
    """Ids of all clusters in the workspace."""
    return _ids(invoke("clusters.list", client=client), "cluster_id")


def list_job_ids(limit: int = 100, client: Optional[DatabricksClient] = None) -> List[str]:
    """Ids of the first ``limit`` jobs (one page, one request)."""
    return _ids(invoke("jobs.list", limit=limit, client=client), "job_id")


def list_instance_pool_ids(client: Optional[DatabricksClient] = None) -> List[str]:
    """Ids of all instance pools in the workspace."""
    return _ids(invoke("instance_pools.list", client=client), "instance_pool_id")


def list_sql_warehouse_ids(client: Optional[DatabricksClient] = None) -> List[str]:
    """Ids of all SQL warehouses in the workspace."""
    return _ids(invoke("sql_warehouses.get", client=client), "id")


def validate_choice(value: Any, choices: Iterable[Any], field: str) -> bool:
    """
    Check ``value`` against a validation set fetched by one of the lookups.

    Returns:
        True if the value is one of ``choices``. A miss is logged as a warning
        and returns False; this function never raises.
    """
    known = {str(c) for c in choices}
    if str(value) in known:
        return True
    logger.warning(f"{field}='{value}' is not among the {len(known)} known values; the request may fail")
    return False
