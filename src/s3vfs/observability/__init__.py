"""s3vfs observability module.

Provides opt-in OpenTelemetry tracing for storage operations.
"""

from s3vfs.observability.tracing import configure_tracing, is_tracing_enabled

__all__ = ["configure_tracing", "is_tracing_enabled"]
