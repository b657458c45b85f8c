"""Worker sub process configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_float
from .errors import ConfigurationError

TIMEOUT_ENV_VAR: Final[str] = "PROPACCESS_SUBPROCESS_TIMEOUT"
DEFAULT_LAUNCH_TIMEOUT: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class SubProcessConfig:
    launch_timeout: float = DEFAULT_LAUNCH_TIMEOUT
    ready_marker: str = "READY"
    quit_command: str = "QUIT"

    def __post_init__(self) -> None:
        if self.launch_timeout <= 0:
            raise ConfigurationError("Sub process launch timeout must be positive")


def get_subprocess_config() -> SubProcessConfig:
    return SubProcessConfig(
        launch_timeout=env_float(TIMEOUT_ENV_VAR, default=DEFAULT_LAUNCH_TIMEOUT),
    )
