"""Facade combining the telemetry registries behind one service object."""

from __future__ import annotations

import logging
from typing import Optional

from .config.environment import EnvironmentConfig
from .telemetry.assembler import SnapshotAssembler, StaticTelemetryData
from .telemetry.commands import CommandInvocationTracker
from .telemetry.metrics import CounterRegistry
from .telemetry.models import ApplicationServer, Database, FrozenMapping, Jdk, LicenseKeyData, TelemetryData
from .telemetry.state import DynamicStateRegistry

_LOGGER = logging.getLogger(__name__)


class TelemetryService:
    """Entry point used by the engine, its interceptors and reporters.

    The service owns no global state. The engine constructs one instance at
    startup, optionally injecting pre-built registries, and hands it to every
    collaborator that records or reads usage data.

    Examples
    --------
    >>> service = TelemetryService(
    ...     StaticTelemetryData("cb07ce31-c8e3-4f5f-94c2-1b28175c2022", "Runtime")
    ... )
    >>> service.record_metric("rootProcessInstanceStart")
    >>> dict(service.get_data().internals.metrics)
    {'rootProcessInstanceStart': 1}
    """

    def __init__(
        self,
        static_data: StaticTelemetryData,
        *,
        commands: Optional[CommandInvocationTracker] = None,
        metrics: Optional[CounterRegistry] = None,
        state: Optional[DynamicStateRegistry] = None,
    ) -> None:
        self._commands = commands if commands is not None else CommandInvocationTracker()
        self._metrics = metrics if metrics is not None else CounterRegistry(kind="metric")
        self._state = state if state is not None else DynamicStateRegistry()
        self._assembler = SnapshotAssembler(static_data, self._commands, self._metrics, self._state)

    @classmethod
    def from_environment(cls, config: Optional[EnvironmentConfig] = None) -> "TelemetryService":
        """Build a service from ``ENGINE_TELEMETRY_*`` settings."""

        config = config if config is not None else EnvironmentConfig.from_env()
        static = StaticTelemetryData(
            installation_id=config.installation_id,
            product_name=config.product_name,
            product_version=config.product_version,
            product_edition=config.product_edition,
            database=Database(vendor=config.database_vendor, version=config.database_version),
            jdk=Jdk(vendor=config.jdk_vendor, version=config.jdk_version),
            application_server=(
                ApplicationServer.from_server_info(config.application_server)
                if config.application_server
                else None
            ),
        )
        state = DynamicStateRegistry(
            telemetry_enabled=config.telemetry_enabled,
            webapps=config.webapps,
        )
        return cls(static, state=state)

    @property
    def commands(self) -> CommandInvocationTracker:
        return self._commands

    @property
    def metrics(self) -> CounterRegistry:
        return self._metrics

    @property
    def state(self) -> DynamicStateRegistry:
        return self._state

    @property
    def static_data(self) -> StaticTelemetryData:
        return self._assembler.static_data

    @static_data.setter
    def static_data(self, value: StaticTelemetryData) -> None:
        self._assembler.static_data = value

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------
    def get_data(self) -> TelemetryData:
        """Return a new snapshot; counters are left untouched."""

        return self._assembler.assemble()

    def get_and_clear_metrics(self) -> FrozenMapping[int]:
        """Read and reset every business metric, for the periodic reporter."""

        return self._metrics.get_and_clear_all()

    def get_and_clear_commands(self) -> FrozenMapping[int]:
        """Read and reset every command counter, for the periodic reporter."""

        return self._commands.get_and_clear_all()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------
    def record_command_executed(self, command_name: str) -> None:
        self._commands.record_command_executed(command_name)

    def record_metric(self, metric_name: str, delta: int = 1) -> None:
        self._metrics.increment(metric_name, delta)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------
    def set_telemetry_enabled(self, enabled: bool) -> None:
        self._state.set_telemetry_enabled(enabled)

    toggle_telemetry = set_telemetry_enabled

    def is_telemetry_enabled(self) -> bool:
        return self._state.is_telemetry_enabled()

    def register_webapp(self, name: str) -> None:
        self._state.add_webapp(name)

    def set_license_key(self, license_key: Optional[LicenseKeyData]) -> None:
        self._assembler.update_license_key(license_key)

    def set_application_server(self, application_server: Optional[ApplicationServer]) -> None:
        self._assembler.update_application_server(application_server)

    def reset(self) -> None:
        """Drop all counters and registered web applications."""

        self._commands.clear()
        self._metrics.clear()
        self._state.clear_webapps()
        _LOGGER.info("Telemetry registries reset")
