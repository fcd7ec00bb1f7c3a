"""Product identity and project configuration.

Every request sent by the dispatcher carries a User-Agent header naming this
library, so calls are attributable in ``system.access.audit``.

Per-project defaults can be placed in ``.databricks-admin-core.yaml`` at the
repository root (or the current working directory)::

    api_version: "2.0"
    account_id: 00000000-0000-0000-0000-000000000000
    timeout: 30
"""

import logging
import os
import platform
import subprocess
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

PRODUCT_NAME = "databricks-admin-core"
PRODUCT_VERSION = "0.1.0"

CONFIG_FILENAME = ".databricks-admin-core.yaml"

_cached_config: Optional[Dict[str, Any]] = None


def _git_toplevel() -> Optional[str]:
    """Return the git repo root directory, or None."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


def load_project_config(refresh: bool = False) -> Dict[str, Any]:
    """Load ``.databricks-admin-core.yaml`` from the cwd or the git repo root.

    The result is cached for the lifetime of the process.

    Args:
        refresh: Drop the cached value and search again

    Returns:
        Parsed config dict, or empty dict if no file exists or it can't be parsed.
    """
    global _cached_config
    if _cached_config is not None and not refresh:
        return _cached_config

    for directory in (os.getcwd(), _git_toplevel()):
        if not directory:
            continue
        config_path = os.path.join(directory, CONFIG_FILENAME)
        if not os.path.isfile(config_path):
            continue
        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            logger.warning("Failed to parse %s", config_path, exc_info=True)
            continue
        if not isinstance(loaded, dict):
            logger.warning("Ignoring %s: top level must be a mapping", config_path)
            continue
        logger.debug("Loaded project config from %s", config_path)
        _cached_config = loaded
        return _cached_config

    _cached_config = {}
    return _cached_config


def user_agent() -> str:
    """User-Agent string sent with every request."""
    return f"{PRODUCT_NAME}/{PRODUCT_VERSION} python/{platform.python_version()}"
