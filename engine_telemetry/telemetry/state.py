"""Transient runtime facts that are not modelled as counters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import FrozenSet, Iterable, Set

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DynamicState:
    """Copy of the registry contents at one point in time."""

    webapps: FrozenSet[str]
    telemetry_enabled: bool


class DynamicStateRegistry:
    """Hold the enabled web applications and the telemetry switch.

    The flag has two stable states and only changes through
    :meth:`set_telemetry_enabled`. Web applications are normally registered
    once at startup by the discovery collaborator.
    """

    def __init__(self, *, telemetry_enabled: bool = False, webapps: Iterable[str] = ()) -> None:
        self._lock = Lock()
        self._telemetry_enabled = bool(telemetry_enabled)
        self._webapps: Set[str] = set(webapps)

    def set_telemetry_enabled(self, enabled: bool) -> None:
        enabled = bool(enabled)
        with self._lock:
            previous = self._telemetry_enabled
            self._telemetry_enabled = enabled
        if previous != enabled:
            _LOGGER.info("Telemetry %s", "enabled" if enabled else "disabled")

    def is_telemetry_enabled(self) -> bool:
        with self._lock:
            return self._telemetry_enabled

    def add_webapp(self, name: str) -> None:
        with self._lock:
            self._webapps.add(name)

    def webapps(self) -> Set[str]:
        """Return a copy of the registered web applications."""
        with self._lock:
            return set(self._webapps)

    def clear_webapps(self) -> None:
        with self._lock:
            self._webapps.clear()

    def snapshot(self) -> DynamicState:
        with self._lock:
            return DynamicState(
                webapps=frozenset(self._webapps),
                telemetry_enabled=self._telemetry_enabled,
            )
