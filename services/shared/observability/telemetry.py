"""
Telemetry bootstrap for the personalization service.

`setup_telemetry` installs JSON logging whose records carry the request id, the
reference-table version the engines ran with and, when `ENABLE_TELEMETRY` is set,
the active trace/span ids from OpenTelemetry tracing of the FastAPI app.
"""

from __future__ import annotations

import logging
import os
from contextvars import ContextVar, Token
from uuid import uuid4

from fastapi import FastAPI, Request
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, SpanContext
from pythonjsonlogger import jsonlogger

CORRELATION_ID_HEADER = "x-request-id"
RequestContextToken = Token

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(service_name)s %(tables_version)s %(request_id)s %(trace_id)s %(span_id)s"
)
DEFAULT_OTLP_ENDPOINT = "http://localhost:4318/v1/traces"

_logging_configured = False
_request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def setup_telemetry(app: FastAPI, service_name: str, tables_version: str | None = None) -> None:
    """
    Configure JSON logging and, optionally, tracing for the provided app.

    Args:
        app: FastAPI app whose requests should produce spans.
        service_name: Service identifier stamped on log records and the OTLP resource.
        tables_version: Version of the reference tables in use; stamped on every log
            record and reported as the OTLP service version.
    """

    service_label = os.getenv("OTEL_SERVICE_NAME", service_name)
    traces_enabled = _parse_bool(os.getenv("ENABLE_TELEMETRY", "false"))

    _configure_logging(
        _RequestContextFilter(service_label, tables_version, traces_enabled),
        os.getenv("LOG_LEVEL", "INFO").upper(),
    )

    if traces_enabled:
        _configure_tracing(
            service_label,
            tables_version,
            console_export=_parse_bool(os.getenv("OTEL_CONSOLE_EXPORT", "false")),
        )
        FastAPIInstrumentor.instrument_app(app)


def ensure_request_id(request: Request | None, header_name: str = CORRELATION_ID_HEADER) -> str:
    """Reuse the caller's request id header, otherwise mint a UUID4 and remember it on the request."""

    cached = getattr(request.state, "request_id", None) if request is not None else None
    request_id = (request.headers.get(header_name) if request is not None else None) or cached or str(uuid4())
    if request is not None:
        request.state.request_id = request_id
    return request_id


def bind_request_context(request_id: str | None) -> RequestContextToken:
    return _request_id_ctx_var.set(request_id)


def reset_request_context(token: RequestContextToken | None) -> None:
    if token is not None:
        _request_id_ctx_var.reset(token)


def _configure_logging(context_filter: logging.Filter, log_level: str) -> None:
    global _logging_configured
    if _logging_configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler.addFilter(context_filter)

    logging.basicConfig(level=log_level, handlers=[handler], force=True)
    _logging_configured = True


def _configure_tracing(service_name: str, tables_version: str | None, console_export: bool) -> None:
    # A provider installed earlier (by another app instance or the host) wins.
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return

    attributes = {SERVICE_NAME: service_name}
    if tables_version:
        attributes[SERVICE_VERSION] = tables_version
    provider = TracerProvider(resource=Resource.create(attributes))
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT)))
    )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class _RequestContextFilter(logging.Filter):
    """Stamp service, table version, request and trace identifiers onto every record."""

    def __init__(self, service_name: str, tables_version: str | None, traces_enabled: bool) -> None:
        super().__init__()
        self._service_name = service_name
        self._tables_version = tables_version
        self._traces_enabled = traces_enabled

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self._service_name
        record.tables_version = self._tables_version
        record.request_id = _request_id_ctx_var.get()
        record.trace_id, record.span_id = self._current_span_ids()
        return True

    def _current_span_ids(self) -> tuple[str | None, str | None]:
        if not self._traces_enabled:
            return None, None
        span = trace.get_current_span()
        context = span.get_span_context() if isinstance(span, Span) else None
        if not isinstance(context, SpanContext) or not context.is_valid:
            return None, None
        return format(context.trace_id, "032x"), format(context.span_id, "016x")
