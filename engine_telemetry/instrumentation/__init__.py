"""Instrumentation hooks feeding the command invocation tracker."""

from .interceptor import CommandCounterInterceptor, counted_command

__all__ = ["CommandCounterInterceptor", "counted_command"]
