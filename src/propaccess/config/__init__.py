"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float
from .errors import ConfigurationError
from .logging import configure_logging
from .resolver import ResolverConfig, get_resolver_config
from .shell import SubProcessConfig, get_subprocess_config

__all__ = [
    "ConfigurationError",
    "ResolverConfig",
    "SubProcessConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_resolver_config",
    "get_subprocess_config",
]
