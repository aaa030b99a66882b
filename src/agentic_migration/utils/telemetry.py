"""Tracing for the walkthrough.

The facade and the scene engine open spans through :func:`get_tracer`; with
no SDK provider installed those spans are no-ops, so tests and plain
``amig play`` runs pay nothing.  ``amig play --telemetry`` (or
``telemetry.enabled: true`` in the settings YAML) calls
:func:`configure_telemetry`, which needs the ``otel`` extra.

Spans and the ``amig.*`` attributes they carry:

* ``scene.enter`` with :data:`ATTR_SCENE_ID`, :data:`ATTR_GENERATION`,
  :data:`ATTR_MESSAGE_COUNT` and :data:`ATTR_TASK_ID`.
* ``action.dispatch`` with :data:`ATTR_ACTION_ID`, :data:`ATTR_ACTION_KIND`
  and :data:`ATTR_NEXT_STATE`.
* ``user.message`` with no attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from agentic_migration.config import TelemetrySettings

ATTR_SCENE_ID = "amig.scene.id"
ATTR_GENERATION = "amig.generation"
ATTR_MESSAGE_COUNT = "amig.message.count"
ATTR_TASK_ID = "amig.task.id"
ATTR_ACTION_ID = "amig.action.id"
ATTR_ACTION_KIND = "amig.action.kind"
ATTR_NEXT_STATE = "amig.action.next_state"

_OTEL_EXTRA_HINT = "Install it with: pip install agentic-migration[otel]"


def get_tracer(name: str) -> trace.Tracer:
    """Tracer for module *name*; a no-op until :func:`configure_telemetry` runs."""
    return trace.get_tracer(name)


def configure_telemetry(settings: TelemetrySettings) -> None:
    """Install a tracer provider that exports walkthrough spans.

    Spans go to stdout when ``settings.export_to_console`` is set and to
    ``settings.otlp_endpoint`` over OTLP/gRPC when one is given.

    Raises:
        ImportError: If ``opentelemetry-sdk``, or the OTLP exporter when an
            endpoint is set, is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for walkthrough tracing. {_OTEL_EXTRA_HINT}"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))

    if settings.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_OTEL_EXTRA_HINT}"
            raise ImportError(msg) from exc
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
        )

    if settings.export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
