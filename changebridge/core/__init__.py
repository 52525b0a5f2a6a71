"""Core domain logic for the changebridge adapter.

This package contains zero external dependencies: health classification,
record translation and the port interfaces. Transports and event buses
are provided by the adapters package.
"""

from .errors import AdapterError, MalformedPayloadError, TransportError
from .models import (
    CHANGE_TICKET_FIELDS,
    HIBERNATING,
    SENTINEL_SELECTOR,
    AdapterProperties,
    ChangeTicket,
    FieldMapping,
    HealthCheckResult,
    HealthStatus,
    TransportResponse,
)

__all__ = [
    "CHANGE_TICKET_FIELDS",
    "HIBERNATING",
    "SENTINEL_SELECTOR",
    "AdapterError",
    "AdapterProperties",
    "ChangeTicket",
    "FieldMapping",
    "HealthCheckResult",
    "HealthStatus",
    "MalformedPayloadError",
    "TransportError",
    "TransportResponse",
]
