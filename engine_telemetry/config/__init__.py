"""Configuration helpers for engine telemetry."""

from .environment import (
    EnvironmentConfig,
    InvalidEnvironmentValueError,
    MissingEnvironmentVariableError,
    TelemetryConfigurationError,
    load_dotenv_file,
)

__all__ = [
    "EnvironmentConfig",
    "InvalidEnvironmentValueError",
    "MissingEnvironmentVariableError",
    "TelemetryConfigurationError",
    "load_dotenv_file",
]
