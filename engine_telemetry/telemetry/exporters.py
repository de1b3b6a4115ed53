"""Expose telemetry counters to Prometheus and OpenTelemetry.

Both bridges read the registries through :meth:`CounterRegistry.snapshot`
when a scrape or collection happens. They never reset counters, so the
destructive reporting path keeps full ownership of ``get_and_clear``.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional, Tuple

from opentelemetry.metrics import CallbackOptions, Meter, ObservableCounter, Observation
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import REGISTRY, Collector, CollectorRegistry

from .metrics import CounterRegistry
from .state import DynamicStateRegistry

DEFAULT_NAMESPACE = "engine"


class TelemetryRegistryCollector(Collector):
    """Prometheus collector rendering command and metric counters."""

    def __init__(
        self,
        commands: CounterRegistry,
        metrics: CounterRegistry,
        state: Optional[DynamicStateRegistry] = None,
        *,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._commands = commands
        self._metrics = metrics
        self._state = state
        self._namespace = namespace

    def collect(self) -> Iterator[object]:
        commands = CounterMetricFamily(
            f"{self._namespace}_command_invocations",
            "Number of executed engine commands by command name",
            labels=["command"],
        )
        for name, value in self._commands.snapshot().items():
            commands.add_metric([name], value)
        yield commands

        metrics = CounterMetricFamily(
            f"{self._namespace}_metric_events",
            "Number of recorded business metric events by metric name",
            labels=["metric"],
        )
        for name, value in self._metrics.snapshot().items():
            metrics.add_metric([name], value)
        yield metrics

        if self._state is not None:
            yield GaugeMetricFamily(
                f"{self._namespace}_telemetry_enabled",
                "Whether usage telemetry collection is enabled",
                value=1 if self._state.is_telemetry_enabled() else 0,
            )


def register_prometheus_collector(
    commands: CounterRegistry,
    metrics: CounterRegistry,
    state: Optional[DynamicStateRegistry] = None,
    *,
    registry: Optional[CollectorRegistry] = None,
    namespace: str = DEFAULT_NAMESPACE,
) -> TelemetryRegistryCollector:
    """Register a :class:`TelemetryRegistryCollector` and return it."""

    collector = TelemetryRegistryCollector(commands, metrics, state, namespace=namespace)
    (registry if registry is not None else REGISTRY).register(collector)
    return collector


def register_observable_counters(
    commands: CounterRegistry,
    metrics: CounterRegistry,
    meter: Meter,
    *,
    prefix: str = DEFAULT_NAMESPACE,
) -> Tuple[ObservableCounter, ObservableCounter]:
    """Create OpenTelemetry observable counters backed by the registries."""

    def observe_commands(options: CallbackOptions) -> Iterable[Observation]:
        return [
            Observation(value, {"command": name})
            for name, value in commands.snapshot().items()
        ]

    def observe_metrics(options: CallbackOptions) -> Iterable[Observation]:
        return [
            Observation(value, {"metric": name})
            for name, value in metrics.snapshot().items()
        ]

    command_counter = meter.create_observable_counter(
        f"{prefix}.command.invocations",
        callbacks=[observe_commands],
        unit="1",
        description="Number of executed engine commands by command name",
    )
    metric_counter = meter.create_observable_counter(
        f"{prefix}.metric.events",
        callbacks=[observe_metrics],
        unit="1",
        description="Number of recorded business metric events by metric name",
    )
    return command_counter, metric_counter
