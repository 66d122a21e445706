"""
OpenTelemetry tracing for the cost subsystem.

Tracing mode is controlled by the TRACING_MODE setting:
- "off": Tracing is disabled (no-op)
- "console": Spans are printed to stdout (for development)
- "gcp": Spans are exported to Google Cloud Trace (for production)

Typical usage:

    from gangrate.tracing import span, traced

    with span("load_gang_slices", gang_id=str(gang_id)):
        fighters = list(Fighter.objects.filter(gang_id=gang_id))

    @traced("compute_gang_rating")
    def compute_gang_rating(gang, fighters, gang_vehicles):
        ...

Exceptions raised inside a span are recorded on it and re-raised.
"""

import logging
import os
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

_tracing_enabled = False
_tracer = None
_initialized = False


def _get_tracing_mode() -> str:
    return getattr(settings, "TRACING_MODE", "off")


def _build_span_processor(tracing_mode: str):
    """Build the exporter and processor pair for the given mode.

    Console mode exports synchronously so spans show up next to the log lines
    that produced them; gcp mode batches.
    """
    if tracing_mode == "console":
        from opentelemetry.sdk.trace.export import (
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        exporter = ConsoleSpanExporter()
        return exporter, SimpleSpanProcessor(exporter)

    from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    exporter = CloudTraceSpanExporter(project_id=os.getenv("GOOGLE_CLOUD_PROJECT"))
    return exporter, BatchSpanProcessor(exporter)


def _init_tracing() -> None:
    """Initialize OpenTelemetry tracing based on the TRACING_MODE setting.

    Sets the Cloud Trace propagator (so X-Cloud-Trace-Context is honoured),
    installs the exporter, and instruments Django and logging. Called on
    module import; a no-op when TRACING_MODE is "off".
    """
    global _tracing_enabled, _tracer, _initialized

    if _initialized:
        return

    _initialized = True

    tracing_mode = _get_tracing_mode()
    if tracing_mode == "off":
        logger.debug("Tracing disabled (TRACING_MODE=off)")
        return

    try:
        from opentelemetry import trace
        from opentelemetry.instrumentation.django import DjangoInstrumentor
        from opentelemetry.instrumentation.logging import LoggingInstrumentor
        from opentelemetry.propagate import set_global_textmap
        from opentelemetry.propagators.cloud_trace_propagator import (
            CloudTraceFormatPropagator,
        )
        from opentelemetry.sdk.trace import TracerProvider

        set_global_textmap(CloudTraceFormatPropagator())

        provider = TracerProvider()
        exporter, processor = _build_span_processor(tracing_mode)
        provider.add_span_processor(processor)
        trace.set_tracer_provider(provider)

        DjangoInstrumentor().instrument()
        LoggingInstrumentor().instrument(set_logging_format=False)

        _tracer = trace.get_tracer("gangrate.tracing")
        _tracing_enabled = True

        logger.info(
            f"OpenTelemetry tracing enabled (mode={tracing_mode}) "
            f"with {exporter.__class__.__name__}"
        )

    except ImportError as e:
        logger.warning(f"OpenTelemetry packages not installed: {e}")
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry tracing: {e}", exc_info=True)


@contextmanager
def span(
    name: str, *, record_exception: bool = True, **attributes: Any
) -> Generator[Optional[Any], None, None]:
    """Create a custom span as a context manager.

    Args:
        name: Span name (e.g., "load_campaign", "purge_tags")
        record_exception: If True, record exceptions on the span before re-raising
        **attributes: Key-value attributes to attach to the span

    Yields:
        The span object (or None if tracing is disabled)
    """
    if not _tracing_enabled or _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span(name) as current_span:
        for key, value in attributes.items():
            current_span.set_attribute(key, str(value))

        try:
            yield current_span
        except Exception as e:
            if record_exception:
                from opentelemetry.trace import Status, StatusCode

                current_span.record_exception(e)
                current_span.set_status(Status(StatusCode.ERROR))
            raise


def traced(name: Optional[str] = None, **default_attributes: Any) -> Callable:
    """Decorator to trace a function call as a span.

    Example:
        @traced("get_gang_rating", cache="cost")
        def get_gang_rating(self, gang_id):
            ...
    """

    def decorator(func: Callable) -> Callable:
        span_name = name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with span(span_name, **default_attributes):
                return func(*args, **kwargs)

        return wrapper

    return decorator


def is_tracing_enabled() -> bool:
    return _tracing_enabled


def _reset_tracing() -> None:
    """Reset module state so tests can re-initialize with different settings."""
    global _tracing_enabled, _tracer, _initialized
    _tracing_enabled = False
    _tracer = None
    _initialized = False


_init_tracing()
