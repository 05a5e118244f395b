"""Configuration loading."""

from adsmith.config.loader import default_config_path, load_config

__all__ = ["default_config_path", "load_config"]
