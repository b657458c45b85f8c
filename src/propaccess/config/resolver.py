"""Property resolver configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .env import env_flag
from .errors import ConfigurationError

NAMING_ENV_VAR: Final[str] = "PROPACCESS_NAMING"
CACHE_ENV_VAR: Final[str] = "PROPACCESS_CACHE"
DEFAULT_NAMING: Final[str] = "snake"
KNOWN_NAMINGS: Final[frozenset[str]] = frozenset({"snake", "camel"})


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Settings for :class:`propaccess.PropertyResolver`.

    ``cache_enabled=False`` recomputes every access decision, which is the
    only safe choice for types whose methods change after first use.
    """

    naming: str = DEFAULT_NAMING
    cache_enabled: bool = True

    def __post_init__(self) -> None:
        if self.naming not in KNOWN_NAMINGS:
            known = ", ".join(sorted(KNOWN_NAMINGS))
            raise ConfigurationError(f"Unknown naming convention {self.naming!r} (known: {known})")


def get_resolver_config() -> ResolverConfig:
    naming = (os.getenv(NAMING_ENV_VAR) or DEFAULT_NAMING).strip().lower()
    return ResolverConfig(
        naming=naming,
        cache_enabled=env_flag(CACHE_ENV_VAR, default=True),
    )
