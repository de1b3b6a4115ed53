"""Thread-safe counters for command invocations and business metrics.

A :class:`Counter` owns a single value guarded by its own lock. The
:class:`CounterRegistry` maps names to counters in registration order and
only synchronises on the registry level when a name is seen for the first
time, when the registry is cleared, or when the entry list is copied for a
snapshot. Increments on an already registered counter never contend with
increments on other counters.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Iterator, List, Tuple

from .models import FrozenMapping

_LOGGER = logging.getLogger(__name__)

ROOT_PROCESS_INSTANCE_START = "rootProcessInstanceStart"
ACTIVITY_INSTANCE_START = "activityInstanceStart"
EXECUTED_DECISION_INSTANCES = "executedDecisionInstances"
EXECUTED_DECISION_ELEMENTS = "executedDecisionElements"

BUSINESS_METRICS = (
    ROOT_PROCESS_INSTANCE_START,
    ACTIVITY_INSTANCE_START,
    EXECUTED_DECISION_INSTANCES,
    EXECUTED_DECISION_ELEMENTS,
)


def _validate_delta(delta: int) -> int:
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValueError(f"Counter delta must be an integer, got {delta!r}")
    if delta < 0:
        raise ValueError(f"Counter delta must not be negative, got {delta}")
    return delta


class Counter:
    """Named accumulator with atomic increment and read-and-reset."""

    __slots__ = ("_name", "_value", "_lock")

    def __init__(self, name: str) -> None:
        self._name = name
        self._value = 0
        self._lock = Lock()

    @property
    def name(self) -> str:
        return self._name

    def increment(self, delta: int = 1) -> None:
        _validate_delta(delta)
        with self._lock:
            self._value += delta

    def get(self) -> int:
        with self._lock:
            return self._value

    def get_and_clear(self) -> int:
        """Return the current value and reset it to zero in one step."""
        with self._lock:
            value = self._value
            self._value = 0
            return value

    def __repr__(self) -> str:
        return f"Counter(name={self._name!r}, value={self.get()})"


class CounterRegistry:
    """Insertion-ordered mapping of counter names to :class:`Counter` objects.

    Unknown names are never an error: :meth:`increment` and :meth:`register`
    create the counter on first use. Two threads racing to register the same
    name always end up with the same instance.

    Examples
    --------
    >>> registry = CounterRegistry()
    >>> registry.increment("activityInstanceStart")
    >>> registry.increment("activityInstanceStart", 2)
    >>> dict(registry.snapshot())
    {'activityInstanceStart': 3}
    """

    def __init__(self, kind: str = "metric") -> None:
        self._kind = kind
        self._lock = Lock()
        self._counters: Dict[str, Counter] = {}

    @property
    def kind(self) -> str:
        """Label describing the namespace held by this registry."""

        return self._kind

    def register(self, name: str) -> Counter:
        """Return the counter for ``name``, creating it when absent."""

        counter = self._counters.get(name)
        if counter is not None:
            return counter
        with self._lock:
            counter = self._counters.get(name)
            if counter is None:
                counter = Counter(name)
                self._counters[name] = counter
                _LOGGER.debug("Registered %s counter %r", self._kind, name)
            return counter

    def increment(self, name: str, delta: int = 1) -> None:
        """Add ``delta`` to the counter called ``name``."""

        self.register(name).increment(delta)

    def get(self, name: str) -> int:
        """Return the current value of ``name`` or ``0`` when unknown."""

        counter = self._counters.get(name)
        return counter.get() if counter is not None else 0

    def get_and_clear(self, name: str) -> int:
        """Destructively read one counter.

        Unknown names report ``0`` and are not registered as a side effect.
        """

        counter = self._counters.get(name)
        return counter.get_and_clear() if counter is not None else 0

    def get_and_clear_all(self) -> FrozenMapping[int]:
        """Destructively read every counter in registration order."""

        return FrozenMapping(
            (counter.name, counter.get_and_clear()) for counter in self._entries()
        )

    def snapshot(self) -> FrozenMapping[int]:
        """Return the current values in registration order without resetting."""

        return FrozenMapping((counter.name, counter.get()) for counter in self._entries())

    def clear(self) -> None:
        """Drop every registered counter."""

        with self._lock:
            self._counters = {}
        _LOGGER.debug("Cleared %s counter registry", self._kind)

    def names(self) -> Tuple[str, ...]:
        return tuple(counter.name for counter in self._entries())

    def _entries(self) -> List[Counter]:
        with self._lock:
            return list(self._counters.values())

    def __contains__(self, name: object) -> bool:
        return name in self._counters

    def __len__(self) -> int:
        return len(self._counters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
