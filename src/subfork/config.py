"""Runtime configuration for task execution."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_ERROR_EXIT_CODE = 1
DEFAULT_SIGNAL_EXIT_CODE = 1
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class Settings:
    """Exit code conventions and log verbosity shared by all tasks of a manager."""

    error_exit_code: int = DEFAULT_ERROR_EXIT_CODE
    signal_exit_code: int = DEFAULT_SIGNAL_EXIT_CODE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults matching plain ``exit(1)`` failures."""

        return cls(
            error_exit_code=_env_int("SUBFORK_ERROR_EXIT_CODE", DEFAULT_ERROR_EXIT_CODE),
            signal_exit_code=_env_int("SUBFORK_SIGNAL_EXIT_CODE", DEFAULT_SIGNAL_EXIT_CODE),
            log_level=os.getenv("SUBFORK_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error if an exit code or the log level is unusable."""

        if not 1 <= self.error_exit_code <= 255:  # noqa: PLR2004
            raise ValueError("SUBFORK_ERROR_EXIT_CODE must be within 1..255.")
        if not 1 <= self.signal_exit_code <= 255:  # noqa: PLR2004
            raise ValueError("SUBFORK_SIGNAL_EXIT_CODE must be within 1..255.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"SUBFORK_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}: {self.log_level!r}",
            )


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error
