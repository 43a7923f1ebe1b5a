"""
Shared observability helpers (telemetry, privacy utilities).

The personalization service imports from this package so request ids, JSON
logs and payload hashing behave the same everywhere.
"""

from .privacy import hash_payload
from .telemetry import (
    CORRELATION_ID_HEADER,
    RequestContextToken,
    bind_request_context,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

__all__ = [
    "hash_payload",
    "CORRELATION_ID_HEADER",
    "RequestContextToken",
    "bind_request_context",
    "ensure_request_id",
    "reset_request_context",
    "setup_telemetry",
]
