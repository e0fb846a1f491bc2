"""Tracing for the request path, built on the OpenTelemetry API.

Modules take a tracer once at import time::

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("rpc.request") as span:
        span.set_attribute(ATTR_RPC_METHOD, "tools/call")

Until :func:`configure_telemetry` installs an SDK provider, the API hands out
no-op tracers, so instrumented code costs nothing in a plain install. The SDK
and exporters come with the ``otel`` extra (``pip install discord-mcp[otel]``).

Console export writes to stderr: stdout belongs to the JSON-RPC stream.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# Span attribute keys
ATTR_RPC_METHOD = "discord_mcp.rpc.method"
ATTR_RPC_ID = "discord_mcp.rpc.id"
ATTR_RPC_ERROR_CODE = "discord_mcp.rpc.error_code"
ATTR_TOOL_NAME = "discord_mcp.tool.name"
ATTR_TOOL_OUTCOME = "discord_mcp.tool.outcome"

_INSTRUMENTATION_NAME = "discord_mcp"

_SDK_HINT = "Install it with: pip install discord-mcp[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name* (the package name by default); a no-op until configured."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "discord-mcp",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global SDK tracer provider. Call once, at startup.

    Spans go to stderr as JSON when *export_to_console* is set, and to an
    OTLP/gRPC collector at *otlp_endpoint* when one is given.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_SDK_HINT}"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)
    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)
    trace.set_tracer_provider(provider)


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter(out=sys.stderr)))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_SDK_HINT}"
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
