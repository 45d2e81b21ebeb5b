"""OpenTelemetry spans for accessor operations.

Raw paths never leave the process in span attributes; only their SHA256.
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from opentelemetry import trace

from s3vfs.models import FileSystemObject
from s3vfs.observability.tracing import is_tracing_enabled

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def path_digest(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()


def traced_storage_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace accessor operations with OpenTelemetry.

    The wrapped method must take the full path as its first argument.

    Args:
        operation: Operation name (e.g., "get_object", "read", "delete").

    Returns:
        Decorated function that emits spans when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, full_path: str, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(self, full_path, *args, **kwargs)

            tracer = trace.get_tracer("s3vfs.accessor")
            with tracer.start_as_current_span(f"s3vfs.accessor.{operation}") as span:
                span.set_attribute("s3vfs.bucket", getattr(self, "name", "unknown"))
                span.set_attribute("s3vfs.path_sha256", path_digest(full_path))
                span.set_attribute("storage.backend", getattr(self, "backend_name", "unknown"))

                try:
                    result = func(self, full_path, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                if result is not None:
                    _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any) -> None:
    """Add size/kind/count attributes derived from the result."""
    try:
        if isinstance(result, FileSystemObject):
            span.set_attribute("s3vfs.object_kind", result.kind.value)
            if result.size is not None:
                span.set_attribute("s3vfs.object_size", result.size)
        elif isinstance(result, bytes):
            span.set_attribute("s3vfs.object_size", len(result))
        elif isinstance(result, list):
            span.set_attribute("s3vfs.child_count", len(result))
    except Exception as e:
        logger.debug("Failed to add result attributes to span: %s", e)
