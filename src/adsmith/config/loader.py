"""Configuration loader with YAML and environment variable support.

This module reads ~/.config/adsmith/config.yaml and allows environment
variable overrides using the ADSMITH_* prefix.

Environment variables:
- ADSMITH_API_BASE_URL: Override API base URL
- ADSMITH_API_TOKEN: Override API bearer token
- ADSMITH_API_TIMEOUT: Override request timeout (seconds)
- ADSMITH_SESSION_ROLE: Override the session role
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from adsmith.models.config import Config
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


def default_config_path() -> Path:
    """Return ~/.config/adsmith/config.yaml."""
    return Path.home() / ".config" / "adsmith" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/adsmith/config.yaml

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If no config file exists and no ADSMITH_* variables are set
        PermissionError: If a config file holding a token is group/world readable
        ValueError: If config file is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        # Config.load performs the permission check on token-bearing files
        data = Config.load(config_path).model_dump(mode="json")
    else:
        data = {}

    overridden = _apply_env_overrides(data)

    if not overridden.get("api", {}).get("base_url"):
        raise FileNotFoundError(
            f"Configuration file not found at {config_path} and ADSMITH_API_BASE_URL is not set.\n"
            "Either create a config file or set environment variables."
        )

    logger.debug("config_resolved", path=str(config_path), from_file=config_path.exists())
    return Config(**overridden)


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: ADSMITH_SECTION_KEY
    For example: ADSMITH_API_TOKEN sets data['api']['token']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    data = dict(data)
    data["api"] = dict(data.get("api") or {})
    data["session"] = dict(data.get("session") or {})

    if env_base_url := os.getenv("ADSMITH_API_BASE_URL"):
        data["api"]["base_url"] = env_base_url

    if env_token := os.getenv("ADSMITH_API_TOKEN"):
        data["api"]["token"] = env_token

    if env_timeout := os.getenv("ADSMITH_API_TIMEOUT"):
        try:
            data["api"]["timeout"] = float(env_timeout)
        except ValueError:
            logger.warning("config_env_override_ignored", variable="ADSMITH_API_TIMEOUT", value=env_timeout)

    if env_role := os.getenv("ADSMITH_SESSION_ROLE"):
        data["session"]["role"] = env_role

    return data
