"""Port interfaces for the changebridge adapter.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - TransportPort: Read and create records on the ticketing system
   - EventBusPort: Publish status events to the host platform

2. **Driving Ports** (host platform calls into core)
   - TicketAdapterPort: Lifecycle and record operations
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from .models import (
    ChangeTicket,
    EventHandler,
    HealthCheckResult,
    RequestCallback,
    TransportResponse,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class TransportPort(ABC):
    """Port for talking to the ticketing system's REST API.

    Implementations own connection setup, authentication and timeouts.
    They do not retry; a failed call surfaces immediately.
    """

    @abstractmethod
    async def get(self, selector: str | int | None = None) -> TransportResponse:
        """Read records from the configured table.

        Args:
            selector: None, "" or 0 for all records; a positive integer
                (or digit string) for that many records; anything else
                is treated as a ticket number selecting one record.

        Returns:
            The raw response.

        Raises:
            TransportError: On network failure or a non-2xx response.
        """

    @abstractmethod
    async def post(
        self, payload: Mapping[str, Any] | None = None
    ) -> TransportResponse:
        """Create a record in the configured table.

        Args:
            payload: External field values for the new record (optional).

        Returns:
            The raw response.

        Raises:
            TransportError: On network failure or a non-2xx response.
        """

    @abstractmethod
    def is_hibernating(self, response: TransportResponse) -> bool:
        """Report whether a successful response comes from a suspended instance."""

    async def close(self) -> None:
        """Release any held connections."""


class EventBusPort(ABC):
    """Port for publishing adapter events to the host platform.

    Publishing is fire-and-forget: a publisher never sees handler results
    or handler failures.
    """

    @abstractmethod
    def subscribe(self, event: str, handler: EventHandler) -> None:
        """Register a handler for an event name."""

    @abstractmethod
    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler. Unknown handlers are ignored."""

    @abstractmethod
    def publish(self, event: str, payload: Mapping[str, Any]) -> None:
        """Deliver a payload to every handler registered for the event."""


# ============================================================================
# DRIVING PORTS (Host platform calls into core)
# ============================================================================


class TicketAdapterPort(ABC):
    """Port the host platform drives: connect, health and record operations.

    Callbacks follow the host's data-first convention
    ``callback(response_data, error_message)``; exactly one of the two
    arguments is non-None.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Run a single health check and emit ONLINE or OFFLINE."""

    @abstractmethod
    async def healthcheck(
        self, callback: RequestCallback | None = None
    ) -> HealthCheckResult:
        """Probe the ticketing system and emit its availability."""

    @abstractmethod
    async def get_record(
        self,
        selector: str | int | None = None,
        callback: RequestCallback | None = None,
    ) -> list[ChangeTicket] | None:
        """Read change tickets, translated to canonical shape.

        Returns None when the transport failed.

        Raises:
            MalformedPayloadError: If the response body cannot be translated.
        """

    @abstractmethod
    async def post_record(
        self,
        callback: RequestCallback | None = None,
        fields: Mapping[str, Any] | None = None,
    ) -> ChangeTicket | None:
        """Create a change ticket and return it in canonical shape.

        Returns None when the transport failed.

        Raises:
            MalformedPayloadError: If the response body cannot be translated.
        """
