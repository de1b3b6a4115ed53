"""Counters keyed by internal command names."""

from __future__ import annotations

import inspect
from typing import Any, Optional

from .metrics import CounterRegistry

LAMBDA_NAME = "<lambda>"


def command_name_for(command: Any) -> Optional[str]:
    """Derive the tracked name of ``command``.

    Functions and classes contribute their ``__name__``; any other object is
    named after its class. Dotted and nested qualifiers are reduced to the last
    component. Anonymous callables (lambdas) have no stable name and yield
    ``None``.
    """

    if isinstance(command, str):
        name = command
    elif inspect.isroutine(command) or inspect.isclass(command):
        name = command.__name__
    else:
        name = type(command).__name__
    name = name.rsplit(".", 1)[-1]
    if not name or name == LAMBDA_NAME:
        return None
    return name


class CommandInvocationTracker(CounterRegistry):
    """Registry of command counters, fed once per finished command execution.

    The tracker does not decide which commands are tracked; whatever name the
    interceptor supplies becomes a counter.
    """

    def __init__(self) -> None:
        super().__init__(kind="command")

    def record_command_executed(self, command_name: str) -> None:
        self.increment(command_name)
