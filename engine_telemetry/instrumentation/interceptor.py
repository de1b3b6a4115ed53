"""Count engine command executions and wrap them in OpenTelemetry spans."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, TracerProvider

from ..telemetry.commands import CommandInvocationTracker, command_name_for

COMMAND_NAME_ATTR = "engine.command.name"
ERROR_FLAG_ATTR = "error"
ERROR_TYPE_ATTR = "error.type"
ERROR_MESSAGE_ATTR = "error.message"

DEFAULT_TRACER_NAME = "engine_telemetry.commands"
ANONYMOUS_SPAN_NAME = "command.anonymous"

CallableT = Callable[..., Any]
DecoratorT = Callable[[CallableT], CallableT]


class CommandCounterInterceptor:
    """Execute commands and record each finished execution in the tracker.

    A command is either an object exposing ``execute(*args)`` or a plain
    callable. The invocation is counted once it finishes, whether it returned
    or raised. Anonymous callables are executed but not counted.
    """

    def __init__(
        self,
        tracker: CommandInvocationTracker,
        *,
        tracer_name: str = DEFAULT_TRACER_NAME,
        tracer_provider: Optional[TracerProvider] = None,
    ) -> None:
        self._tracker = tracker
        self._tracer_name = tracer_name
        self._tracer_provider = tracer_provider

    def execute(self, command: Any, *args: Any, **kwargs: Any) -> Any:
        target = _resolve_target(command)
        name = command_name_for(command)
        tracer = trace.get_tracer(self._tracer_name, tracer_provider=self._tracer_provider)
        span_name = f"command.{name}" if name else ANONYMOUS_SPAN_NAME
        with tracer.start_as_current_span(span_name, attributes=_span_attributes(name)) as span:
            try:
                result = target(*args, **kwargs)
            except Exception as exc:
                _annotate_exception(span, exc)
                raise
            else:
                span.set_status(Status(StatusCode.OK))
                return result
            finally:
                if name is not None:
                    self._tracker.record_command_executed(name)


def counted_command(
    tracker: CommandInvocationTracker,
    command_name: Optional[str] = None,
    *,
    tracer_name: str = DEFAULT_TRACER_NAME,
    tracer_provider: Optional[TracerProvider] = None,
) -> DecoratorT:
    """Decorate a function so every finished call counts as a command."""

    def decorator(func: CallableT) -> CallableT:
        resolved_name = command_name or command_name_for(func)
        span_name = f"command.{resolved_name}" if resolved_name else ANONYMOUS_SPAN_NAME
        attributes = _span_attributes(resolved_name)

        def record() -> None:
            if resolved_name is not None:
                tracker.record_command_executed(resolved_name)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)
            with tracer.start_as_current_span(span_name, attributes=attributes) as span:
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    _annotate_exception(span, exc)
                    raise
                else:
                    span.set_status(Status(StatusCode.OK))
                    return result
                finally:
                    record()

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)
            with tracer.start_as_current_span(span_name, attributes=attributes) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as exc:
                    _annotate_exception(span, exc)
                    raise
                else:
                    span.set_status(Status(StatusCode.OK))
                    return result
                finally:
                    record()

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper  # type: ignore[return-value]

    return decorator


def _resolve_target(command: Any) -> CallableT:
    if inspect.isclass(command):
        raise TypeError(f"Pass a {command.__name__} instance, not the class itself")
    execute = getattr(command, "execute", None)
    if callable(execute) and not inspect.isroutine(command):
        return execute
    if callable(command):
        return command
    raise TypeError(f"{type(command).__name__} is neither callable nor exposes execute()")


def _span_attributes(name: Optional[str]) -> dict:
    return {COMMAND_NAME_ATTR: name} if name else {}


def _annotate_exception(span: Span, exc: Exception) -> None:
    span.set_attribute(ERROR_FLAG_ATTR, True)
    span.set_attribute(ERROR_TYPE_ATTR, exc.__class__.__name__)
    span.set_attribute(ERROR_MESSAGE_ATTR, str(exc))
    span.set_status(Status(StatusCode.ERROR, str(exc)))
