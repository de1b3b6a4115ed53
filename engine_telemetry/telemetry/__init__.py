"""Usage telemetry primitives for the process engine.

Counters, the command tracker, the dynamic state registry and the snapshot
model are all plain in-memory objects. They are created by the owning engine
and passed explicitly to every collaborator that records or reads usage data.
"""

from __future__ import annotations

from .assembler import SnapshotAssembler, StaticTelemetryData
from .commands import CommandInvocationTracker, command_name_for
from .exporters import (
    TelemetryRegistryCollector,
    register_observable_counters,
    register_prometheus_collector,
)
from .metrics import (
    ACTIVITY_INSTANCE_START,
    BUSINESS_METRICS,
    EXECUTED_DECISION_ELEMENTS,
    EXECUTED_DECISION_INSTANCES,
    ROOT_PROCESS_INSTANCE_START,
    Counter,
    CounterRegistry,
)
from .models import (
    ApplicationServer,
    Database,
    FrozenMapping,
    Internals,
    Jdk,
    LicenseKeyData,
    Product,
    TelemetryData,
)
from .state import DynamicState, DynamicStateRegistry

__all__ = [
    "ACTIVITY_INSTANCE_START",
    "ApplicationServer",
    "BUSINESS_METRICS",
    "CommandInvocationTracker",
    "Counter",
    "CounterRegistry",
    "Database",
    "DynamicState",
    "DynamicStateRegistry",
    "EXECUTED_DECISION_ELEMENTS",
    "EXECUTED_DECISION_INSTANCES",
    "FrozenMapping",
    "Internals",
    "Jdk",
    "LicenseKeyData",
    "Product",
    "ROOT_PROCESS_INSTANCE_START",
    "SnapshotAssembler",
    "StaticTelemetryData",
    "TelemetryData",
    "TelemetryRegistryCollector",
    "command_name_for",
    "register_observable_counters",
    "register_prometheus_collector",
]
