"""s3mock observability module.

Provides opt-in OpenTelemetry tracing for storage operations.
"""

from s3mock.observability.tracing import configure_tracing, reset_tracing

__all__ = ["configure_tracing", "reset_tracing"]
