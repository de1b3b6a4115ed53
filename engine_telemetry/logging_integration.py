"""Structured OpenTelemetry logging tagged with the installation identity."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Union

from opentelemetry.exporter.otlp.proto.http import Compression
from opentelemetry.exporter.otlp.proto.http._log_exporter import (
    OTLPLogExporter as HTTPOtLPLogExporter,
)
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler, LogRecordProcessor
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, LogExporter
from opentelemetry.sdk.resources import (
    SERVICE_INSTANCE_ID,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)

from .telemetry.assembler import StaticTelemetryData

PRODUCT_EDITION_ATTR = "engine.product.edition"

# Attributes the stdlib attaches to every record. Everything else on a record
# is caller supplied ``extra`` and is forwarded as structured metadata.
_STANDARD_RECORD_FIELDS = {
    "args",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "message",
    "module",
    "msecs",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


class StructuredLogFilter(logging.Filter):
    """Turn log records into structured bodies carrying resource metadata."""

    def __init__(self, resource: Resource) -> None:
        super().__init__()
        self._resource_attributes: Dict[str, object] = dict(resource.attributes)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        formatted_message = record.getMessage()

        extra_attributes: Dict[str, object] = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_FIELDS
        }

        structured_body: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "severity_text": record.levelname,
            "logger_name": record.name,
            "message": formatted_message,
        }
        if self._resource_attributes:
            structured_body["resource"] = dict(self._resource_attributes)
        if extra_attributes:
            structured_body["attributes"] = dict(extra_attributes)

        record.msg = structured_body
        record.args = None
        record.message = formatted_message

        instance_id = self._resource_attributes.get(SERVICE_INSTANCE_ID)
        if instance_id is not None:
            record.__dict__[SERVICE_INSTANCE_ID] = instance_id
        return True


@dataclass
class LoggingSetup:
    """Container holding the OpenTelemetry logging infrastructure."""

    logger_provider: LoggerProvider
    handler: LoggingHandler
    log_processor: LogRecordProcessor
    resource: Resource
    logger_name: str

    def configure_logger(self, logger: logging.Logger) -> logging.Logger:
        """Attach the OpenTelemetry handler to *logger* and disable propagation."""

        if self.handler not in logger.handlers:
            logger.addHandler(self.handler)
        logger.setLevel(self.handler.level)
        logger.propagate = False
        return logger

    def force_flush(self) -> None:
        self.logger_provider.force_flush()

    def shutdown(self) -> None:
        logger = logging.getLogger(self.logger_name)
        if self.handler in logger.handlers:
            logger.removeHandler(self.handler)
        self.logger_provider.shutdown()


def telemetry_resource(
    static_data: StaticTelemetryData,
    extra_attributes: Optional[Mapping[str, object]] = None,
) -> Resource:
    """Build an OpenTelemetry resource describing this installation."""

    attributes: Dict[str, object] = {
        SERVICE_NAME: static_data.product_name,
        SERVICE_INSTANCE_ID: static_data.installation_id,
    }
    if static_data.product_version:
        attributes[SERVICE_VERSION] = static_data.product_version
    if static_data.product_edition:
        attributes[PRODUCT_EDITION_ATTR] = static_data.product_edition
    if extra_attributes:
        attributes.update(extra_attributes)
    return Resource.create(attributes)


def create_otlp_log_exporter(
    endpoint: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    compression: Union[Compression, str, None] = "gzip",
    timeout: Optional[int] = None,
) -> LogExporter:
    """Factory for an OTLP/HTTP log exporter."""

    return HTTPOtLPLogExporter(
        endpoint=endpoint,
        headers=dict(headers) if headers else None,
        compression=Compression(compression) if isinstance(compression, str) else compression,
        timeout=timeout,
    )


def configure_otel_logging(
    static_data: StaticTelemetryData,
    *,
    endpoint: Optional[str] = None,
    log_exporter: Optional[LogExporter] = None,
    log_processor: Optional[LogRecordProcessor] = None,
    resource_attributes: Optional[Mapping[str, object]] = None,
    log_level: int = logging.INFO,
    logger_name: str = "engine_telemetry",
) -> LoggingSetup:
    """Route the ``engine_telemetry`` loggers through OpenTelemetry.

    Either ``endpoint`` (an OTLP/HTTP logs URL), ``log_exporter`` or
    ``log_processor`` must be supplied.
    """

    if endpoint is None and log_exporter is None and log_processor is None:
        raise ValueError("configure_otel_logging needs an endpoint, exporter or processor")

    resource = telemetry_resource(static_data, resource_attributes)
    logger_provider = LoggerProvider(resource=resource)

    if log_processor is None:
        exporter = log_exporter or create_otlp_log_exporter(endpoint)  # type: ignore[arg-type]
        log_processor = BatchLogRecordProcessor(exporter)
    logger_provider.add_log_record_processor(log_processor)

    handler = LoggingHandler(level=log_level, logger_provider=logger_provider)
    handler.addFilter(StructuredLogFilter(resource))

    setup = LoggingSetup(
        logger_provider=logger_provider,
        handler=handler,
        log_processor=log_processor,
        resource=resource,
        logger_name=logger_name,
    )
    setup.configure_logger(logging.getLogger(logger_name))
    return setup


__all__ = [
    "LoggingSetup",
    "StructuredLogFilter",
    "configure_otel_logging",
    "create_otlp_log_exporter",
    "telemetry_resource",
]
