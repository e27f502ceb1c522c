"""OpenTelemetry tracing configuration for s3mock.

Environment Variables:
    S3MOCK_OTEL_ENABLED: Set to "1" to enable tracing (default: disabled)
    S3MOCK_REQUIRE_OTEL: Set to "1" to raise if tracing cannot initialize
    S3MOCK_OTEL_SERVICE_NAME: Service name for spans (default: "s3mock")
    S3MOCK_OTEL_EXPORTER: Exporter type - "otlp" or "console" (default: "otlp")
    S3MOCK_OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint URL (optional)
    S3MOCK_OTEL_EXPORTER_OTLP_PROTOCOL: "grpc" or "http" (default: "http")
    S3MOCK_OTEL_RESOURCE_ATTRS: Comma-separated k=v pairs for resource attributes
    S3MOCK_OTEL_TEST_CAPTURE: Set to "1" to use in-memory exporter for tests

Span attributes never include absolute filesystem paths or raw object keys.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from s3mock.config import get_env_bool, get_env_str

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor

logger = logging.getLogger(__name__)

_provider_installed: bool = False
_capture_exporter: Any = None  # InMemorySpanExporter when S3MOCK_OTEL_TEST_CAPTURE=1


class TracingConfigError(Exception):
    """Raised when tracing setup fails and S3MOCK_REQUIRE_OTEL=1."""


def is_tracing_enabled() -> bool:
    return get_env_bool("S3MOCK_OTEL_ENABLED", False)


def _parse_resource_attrs(attrs_str: str) -> dict[str, str]:
    """Parse comma-separated k=v resource attributes; malformed pairs are skipped."""
    attrs: dict[str, str] = {}
    for pair in attrs_str.split(","):
        name, sep, value = pair.partition("=")
        if sep:
            attrs[name.strip()] = value.strip()
    return attrs


@dataclass(frozen=True)
class TracingSettings:
    """Tracing options read from S3MOCK_OTEL_* variables."""

    service_name: str = "s3mock"
    exporter: str = "otlp"
    otlp_endpoint: str | None = None
    otlp_protocol: str = "http"
    test_capture: bool = False
    require: bool = False
    resource_attrs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> TracingSettings:
        return cls(
            service_name=get_env_str("S3MOCK_OTEL_SERVICE_NAME", "s3mock"),
            exporter=get_env_str("S3MOCK_OTEL_EXPORTER", "otlp"),
            otlp_endpoint=get_env_str("S3MOCK_OTEL_EXPORTER_OTLP_ENDPOINT") or None,
            otlp_protocol=get_env_str("S3MOCK_OTEL_EXPORTER_OTLP_PROTOCOL", "http"),
            test_capture=get_env_bool("S3MOCK_OTEL_TEST_CAPTURE", False),
            require=get_env_bool("S3MOCK_REQUIRE_OTEL", False),
            resource_attrs=_parse_resource_attrs(get_env_str("S3MOCK_OTEL_RESOURCE_ATTRS")),
        )

    @property
    def exporter_label(self) -> str:
        return "in-memory" if self.test_capture else self.exporter


def _otlp_exporter(settings: TracingSettings) -> Any:
    kwargs: dict[str, Any] = {}
    if settings.otlp_endpoint:
        kwargs["endpoint"] = settings.otlp_endpoint

    if settings.otlp_protocol == "grpc":
        # Needs the "grpc" extra
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(**kwargs)


def _span_processor(settings: TracingSettings) -> SpanProcessor:
    """Pick the span processor: in-memory capture, console, or batched OTLP."""
    global _capture_exporter

    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    if settings.test_capture:
        from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
            InMemorySpanExporter,
        )

        _capture_exporter = InMemorySpanExporter()
        return SimpleSpanProcessor(_capture_exporter)
    if settings.exporter == "console":
        return SimpleSpanProcessor(ConsoleSpanExporter())
    return BatchSpanProcessor(_otlp_exporter(settings))


def configure_tracing() -> bool:
    """Install an OpenTelemetry tracer provider if S3MOCK_OTEL_ENABLED is set.

    Safe to call repeatedly: the global provider can only be set once per
    process, so later calls reuse it.

    Returns:
        True if tracing is enabled and configured, False otherwise.

    Raises:
        TracingConfigError: If S3MOCK_REQUIRE_OTEL=1 and setup fails.
    """
    global _provider_installed

    if not is_tracing_enabled():
        logger.debug("OpenTelemetry tracing disabled (S3MOCK_OTEL_ENABLED not set)")
        return False
    if _provider_installed:
        return True

    settings = TracingSettings.from_env()
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider

        attrs = {"service.name": settings.service_name, **settings.resource_attrs}
        provider = TracerProvider(resource=Resource.create(attrs))
        provider.add_span_processor(_span_processor(settings))
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        if settings.require:
            raise TracingConfigError(
                f"OpenTelemetry tracing required but configuration failed: {e}"
            ) from e
        return False

    _provider_installed = True
    logger.info(
        "OpenTelemetry tracing configured: service=%s, exporter=%s",
        settings.service_name,
        settings.exporter_label,
    )
    return True


def get_test_spans() -> list[ReadableSpan]:
    """Return spans captured while S3MOCK_OTEL_TEST_CAPTURE=1, else an empty list."""
    if _capture_exporter is None:
        return []
    return list(_capture_exporter.get_finished_spans())


def clear_test_spans() -> None:
    if _capture_exporter is not None:
        _capture_exporter.clear()


def reset_tracing() -> None:
    """Drop captured spans between tests.

    The installed provider and its capture exporter stay in place because
    OpenTelemetry refuses to replace a global provider.
    """
    clear_test_spans()
