"""Runtime configuration for pyprocesses."""

import logging
import os

from pydantic import BaseModel, field_validator

ENV_PREFIX = "PYPROCESSES_"
DEFAULT_LOG_LEVEL = "WARNING"
TRUTHY = {"1", "true", "yes", "on"}


class ProcessesConfig(BaseModel):
    """Settings shared by builders, killers and the child launcher."""

    interpreter: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    handle_sigterm: bool = False

    @field_validator("interpreter")
    @classmethod
    def _blank_interpreter_means_default(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def load_config() -> ProcessesConfig:
    """Build the configuration from PYPROCESSES_* environment variables."""
    values: dict[str, object] = {}
    interpreter = os.environ.get(f"{ENV_PREFIX}PYTHON")
    if interpreter is not None:
        values["interpreter"] = interpreter
    log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level
    handle_sigterm = os.environ.get(f"{ENV_PREFIX}HANDLE_SIGTERM")
    if handle_sigterm is not None:
        values["handle_sigterm"] = handle_sigterm.strip().lower() in TRUTHY
    return ProcessesConfig(**values)
