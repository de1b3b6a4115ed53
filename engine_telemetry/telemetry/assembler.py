"""Compose immutable :class:`TelemetryData` snapshots from live registries."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from ..config.environment import TelemetryConfigurationError
from .commands import CommandInvocationTracker
from .metrics import CounterRegistry
from .models import ApplicationServer, Database, Internals, Jdk, LicenseKeyData, Product, TelemetryData
from .state import DynamicStateRegistry

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StaticTelemetryData:
    """Identity and environment descriptors fixed at engine startup.

    Parameters
    ----------
    installation_id:
        Stable UUID of the installation. Generated and persisted by the
        engine, never by this package.
    product_name, product_version, product_edition:
        Product descriptor reported with every snapshot.
    database, jdk:
        Descriptors detected by external collaborators.
    application_server:
        Container descriptor, ``None`` for embedded engines.
    license_key:
        License descriptor, ``None`` when no license is installed.
    """

    installation_id: str
    product_name: str
    product_version: str = ""
    product_edition: str = ""
    database: Database = Database(vendor="", version="")
    jdk: Jdk = Jdk(vendor="", version="")
    application_server: Optional[ApplicationServer] = None
    license_key: Optional[LicenseKeyData] = None


class SnapshotAssembler:
    """Read the registries and static data and build a :class:`TelemetryData`.

    Assembly is side-effect free with respect to counters: it only uses the
    non-destructive ``snapshot`` reads.
    """

    def __init__(
        self,
        static_data: StaticTelemetryData,
        commands: CommandInvocationTracker,
        metrics: CounterRegistry,
        state: DynamicStateRegistry,
    ) -> None:
        self._lock = Lock()
        self._static = static_data
        self._commands = commands
        self._metrics = metrics
        self._state = state

    @property
    def static_data(self) -> StaticTelemetryData:
        with self._lock:
            return self._static

    @static_data.setter
    def static_data(self, value: StaticTelemetryData) -> None:
        with self._lock:
            self._static = value
        _LOGGER.info("Replaced static telemetry data for installation %s", value.installation_id)

    def update_license_key(self, license_key: Optional[LicenseKeyData]) -> None:
        with self._lock:
            self._static = dataclasses.replace(self._static, license_key=license_key)

    def update_application_server(self, application_server: Optional[ApplicationServer]) -> None:
        with self._lock:
            self._static = dataclasses.replace(self._static, application_server=application_server)

    def assemble(self) -> TelemetryData:
        static = self.static_data
        _require(static.installation_id, "installation id")
        _require(static.product_name, "product name")

        metrics = self._metrics.snapshot()
        commands = self._commands.snapshot()
        state = self._state.snapshot()

        internals = Internals(
            database=static.database,
            jdk=static.jdk,
            application_server=static.application_server,
            license_key=static.license_key,
            commands=commands,
            metrics=metrics,
            webapps=state.webapps,
            telemetry_enabled=state.telemetry_enabled,
        )
        product = Product(
            name=static.product_name,
            version=static.product_version,
            edition=static.product_edition,
            internals=internals,
        )
        return TelemetryData(installation=static.installation_id, product=product)


def _require(value: Optional[str], label: str) -> None:
    if not isinstance(value, str):
        raise TelemetryConfigurationError(
            f"Cannot assemble telemetry data: {label} must be a string, got {type(value).__name__}"
        )
    if not value.strip():
        raise TelemetryConfigurationError(
            f"Cannot assemble telemetry data: {label} is not configured"
        )
