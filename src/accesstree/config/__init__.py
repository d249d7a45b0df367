"""Configuration package for accesstree."""
from __future__ import annotations

from accesstree.config.config_loader import AccessConfig, ConfigError, ConfigLoader

__all__ = [
    "AccessConfig",
    "ConfigError",
    "ConfigLoader",
]
