"""OpenTelemetry spans for object store operations.

Span attributes are safe to export: the bucket name, a SHA256 of the object
key (never the raw key), the backend name and result fingerprints. Absolute
filesystem paths are never recorded.
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

from opentelemetry import trace

from s3mock.observability.tracing import is_tracing_enabled
from s3mock.storage.models import GetObjectResponse, ListEntry, ObjectResponse

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

TRACER_NAME = "s3mock.object_store"


def traced_store_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace an async store method with OpenTelemetry.

    The wrapped method must take the object key (or listing prefix) as its
    first argument after ``self``.

    Args:
        operation: Operation name (e.g., "create_object", "list").
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, key: str, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return await func(self, key, *args, **kwargs)

            tracer = trace.get_tracer(TRACER_NAME)
            with tracer.start_as_current_span(f"{TRACER_NAME}.{operation}") as span:
                span.set_attribute("s3mock.bucket", getattr(self, "bucket", "unknown"))
                span.set_attribute(
                    "s3mock.object_key_sha256",
                    hashlib.sha256(key.encode("utf-8")).hexdigest(),
                )
                span.set_attribute("storage.backend", getattr(self, "backend_name", "unknown"))

                try:
                    result = await func(self, key, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any) -> None:
    """Add result fingerprints (etag, size, content type, count) to a span."""
    if isinstance(result, (ObjectResponse, GetObjectResponse)):
        if result.etag is not None:
            span.set_attribute("s3mock.object_etag", result.etag)
        if result.content_type:
            span.set_attribute("s3mock.object_content_type", result.content_type)
    if isinstance(result, GetObjectResponse):
        span.set_attribute("s3mock.object_size_bytes", result.size)
    if isinstance(result, list) and all(isinstance(item, ListEntry) for item in result):
        span.set_attribute("s3mock.object_count", len(result))
