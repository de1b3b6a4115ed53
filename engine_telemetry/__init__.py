"""Runtime usage telemetry for the process engine.

The package counts command invocations and business-metric events and builds
immutable :class:`~engine_telemetry.telemetry.models.TelemetryData` snapshots
on demand. Transport, scheduling and persistence of those snapshots belong to
the embedding engine.
"""

from __future__ import annotations

from .config import EnvironmentConfig, TelemetryConfigurationError
from .instrumentation import CommandCounterInterceptor, counted_command
from .service import TelemetryService
from .telemetry import (
    ApplicationServer,
    CommandInvocationTracker,
    Counter,
    CounterRegistry,
    Database,
    DynamicStateRegistry,
    Jdk,
    LicenseKeyData,
    SnapshotAssembler,
    StaticTelemetryData,
    TelemetryData,
)

__all__ = [
    "ApplicationServer",
    "CommandCounterInterceptor",
    "CommandInvocationTracker",
    "Counter",
    "CounterRegistry",
    "Database",
    "DynamicStateRegistry",
    "EnvironmentConfig",
    "Jdk",
    "LicenseKeyData",
    "SnapshotAssembler",
    "StaticTelemetryData",
    "TelemetryConfigurationError",
    "TelemetryData",
    "TelemetryService",
    "counted_command",
]

__version__ = "0.1.0"
