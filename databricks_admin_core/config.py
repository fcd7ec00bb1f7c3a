"""
Workspace Configuration

Explicit, immutable-by-convention session configuration passed to the request
dispatcher: host, credentials, API version and account id.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from databricks.sdk.core import Config
from pydantic import BaseModel, PrivateAttr, field_validator

from .errors import ConfigurationError
from .identity import load_project_config

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2.0"
DEFAULT_TIMEOUT = 60

_ENV_VARS = {
    "host": "DATABRICKS_HOST",
    "token": "DATABRICKS_TOKEN",
    "account_id": "DATABRICKS_ACCOUNT_ID",
    "api_version": "DATABRICKS_API_VERSION",
    "profile": "DATABRICKS_CONFIG_PROFILE",
}

# Keys a project yaml file may provide
_PROJECT_KEYS = ("api_version", "account_id", "timeout")


class WorkspaceConfig(BaseModel):
    """Connection settings for one Databricks workspace (or account console)."""

    host: str
    token: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION
    account_id: Optional[str] = None
    profile: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    _sdk_config: Optional[Config] = PrivateAttr(default=None)

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, value: str) -> str:
        value = (value or "").strip().rstrip("/")
        if not value:
            raise ValueError("host must not be empty")
        if not value.startswith(("https://", "http://")):
            value = f"https://{value}"
        return value

    @field_validator("api_version", mode="before")
    @classmethod
    def _normalize_api_version(cls, value: str) -> str:
        return str(value).strip().strip("/")

    @classmethod
    def from_environment(cls, **overrides: Any) -> "WorkspaceConfig":
        """
        Build a config from overrides, environment and config files.

        Resolution priority (first non-empty value wins, per field):
        1. Explicit keyword overrides
        2. DATABRICKS_HOST / DATABRICKS_TOKEN / DATABRICKS_ACCOUNT_ID /
           DATABRICKS_API_VERSION / DATABRICKS_CONFIG_PROFILE env vars
        3. Profile from ~/.databrickscfg (host, token, account_id); the DEFAULT
           section when neither host nor profile is given
        4. ``.databricks-admin-core.yaml`` project file (api_version, account_id, timeout)

        Raises:
            ConfigurationError: If no host can be resolved
        """
        values: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}

        for field, env_var in _ENV_VARS.items():
            if field not in values and os.getenv(env_var):
                values[field] = os.environ[env_var]

        if values.get("profile") and (not values.get("host") or not values.get("token")):
            profile_host, profile_token, profile_account = _load_profile(values["profile"])
            values.setdefault("host", profile_host)
            if profile_token:
                values.setdefault("token", profile_token)
            if profile_account:
                values.setdefault("account_id", profile_account)

        if not values.get("host") and not values.get("profile"):
            _apply_default_profile(values)

        project = load_project_config()
        for key in _PROJECT_KEYS:
            if key not in values and project.get(key) is not None:
                values[key] = project[key]

        if not values.get("host"):
            raise ConfigurationError(
                "Databricks host must be provided via:\n"
                "  1. Keyword argument (host)\n"
                "  2. Environment variable (DATABRICKS_HOST)\n"
                "  3. Config profile (profile argument or DATABRICKS_CONFIG_PROFILE env var)"
            )

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid workspace configuration: {e}") from e

    def auth_headers(self) -> Dict[str, str]:
        """
        Authentication headers for one request.

        A static token is sent as a bearer token. Without one, the Databricks SDK
        resolves credentials (OAuth M2M env vars, profile, Azure CLI, ...) and
        returns fresh headers on every call.
        """
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}

        if self._sdk_config is None:
            try:
                self._sdk_config = Config(host=self.host, profile=self.profile)
            except ValueError as e:
                raise ConfigurationError(f"Could not resolve Databricks credentials for {self.host}: {e}") from e
        return self._sdk_config.authenticate()

    def resolve_api_version(self, api_version: Optional[str] = None) -> str:
        """Return the per-call API version, falling back to the configured default."""
        return (api_version or self.api_version).strip("/")


def _load_profile(profile_name: str) -> Tuple[str, str, str]:
    """
    Load credentials from a ~/.databrickscfg profile.

    Args:
        profile_name: Profile name (e.g., "DEFAULT", "prod")

    Returns:
        Tuple of (host, token, account_id); token and account_id may be empty

    Raises:
        ConfigurationError: If the file or profile doesn't exist
    """
    config_path = _config_path()
    if not config_path.exists():
        raise ConfigurationError(f"Databricks config file not found: {config_path}")

    parser = configparser.ConfigParser()
    parser.read(config_path)

    if profile_name not in parser:
        available = ", ".join(parser.sections())
        raise ConfigurationError(
            f"Profile '{profile_name}' not found in {config_path}\nAvailable profiles: {available}"
        )

    profile = parser[profile_name]
    logger.debug(f"Loaded profile '{profile_name}' from {config_path}")
    return (
        profile.get("host", "").strip(),
        profile.get("token", "").strip(),
        profile.get("account_id", "").strip(),
    )


def _config_path() -> Path:
    return Path(os.getenv("DATABRICKS_CONFIG_FILE", str(Path.home() / ".databrickscfg")))


def _apply_default_profile(values: Dict[str, Any]) -> None:
    """Fill host, token and account_id from the DEFAULT section, if the file has one."""
    config_path = _config_path()
    if not config_path.exists():
        return
    parser = configparser.ConfigParser()
    parser.read(config_path)
    defaults = parser.defaults()
    if not defaults.get("host", "").strip():
        return

    logger.debug(f"Using DEFAULT profile from {config_path}")
    for field in ("host", "token", "account_id"):
        value = defaults.get(field, "").strip()
        if value:
            values.setdefault(field, value)
