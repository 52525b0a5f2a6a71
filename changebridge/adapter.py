"""ServiceNow change request adapter.

The host platform instantiates one ``ChangeRequestAdapter`` per configured
ServiceNow instance. The adapter owns exactly one transport, publishes
ONLINE/OFFLINE events through an event bus it holds (rather than being
an event emitter itself), and hands records back in canonical shape.

Callbacks follow the host's data-first convention::

    def callback(response_data, error_message): ...

Translation happens only after the transport result has arrived, and the
translated structure is what the callback receives.
"""

import logging
from collections.abc import Mapping
from typing import Any

from changebridge.adapters.events.memory import InMemoryEventBus
from changebridge.adapters.transport.servicenow import ServiceNowConnector
from changebridge.core.errors import TransportError
from changebridge.core.health import HealthMonitor, StatusEmitter
from changebridge.core.models import (
    AdapterProperties,
    ChangeTicket,
    EventHandler,
    HealthCheckResult,
    HealthStatus,
    RequestCallback,
)
from changebridge.core.ports import EventBusPort, TicketAdapterPort, TransportPort
from changebridge.core.translator import RecordTranslator


class ChangeRequestAdapter(TicketAdapterPort):
    """Adapter between the host platform and a ServiceNow change request table."""

    def __init__(
        self,
        id: str,
        properties: AdapterProperties | Mapping[str, Any],
        transport: TransportPort | None = None,
        event_bus: EventBusPort | None = None,
        logger: logging.Logger | None = None,
        translator: RecordTranslator | None = None,
    ):
        """Initialize the adapter.

        Args:
            id: Adapter instance id. Appears in every event and log message.
            properties: AdapterProperties, or the host's raw
                ``{url, auth: {username, password}, serviceNowTable}`` dict.
            transport: Transport to use. Defaults to a ServiceNowConnector
                built from the properties.
            event_bus: Where status events are published. Defaults to a
                private InMemoryEventBus.
            logger: Logger for per-instance messages.
            translator: Record translator. Defaults to the change ticket table.
        """
        if not id or not str(id).strip():
            raise ValueError("Adapter id must be provided")
        if not isinstance(properties, AdapterProperties):
            properties = AdapterProperties.from_dict(properties)

        self.id = id
        self.props = properties
        self.logger = logger or logging.getLogger(__name__)
        self.connector = transport or ServiceNowConnector(
            url=properties.url,
            username=properties.username,
            password=properties.password,
            service_now_table=properties.service_now_table,
        )
        self.event_bus = event_bus or InMemoryEventBus()
        self.translator = translator or RecordTranslator()
        self.emitter = StatusEmitter(self.id, self.event_bus, self.logger)
        self.health_monitor = HealthMonitor(
            self.id, self.connector, self.emitter, self.logger
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.connector.close()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, event: HealthStatus | str, handler: EventHandler) -> None:
        """Listen for ONLINE/OFFLINE events from this adapter."""
        self.event_bus.subscribe(_event_name(event), handler)

    def unsubscribe(self, event: HealthStatus | str, handler: EventHandler) -> None:
        self.event_bus.unsubscribe(_event_name(event), handler)

    def emit_status(self, status: HealthStatus | str) -> None:
        self.emitter.emit_status(status)

    def emit_online(self) -> None:
        self.emitter.emit_online()

    def emit_offline(self) -> None:
        self.emitter.emit_offline()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Complete a single health check and emit ONLINE or OFFLINE.

        All connection details were supplied at construction, so there
        is nothing to pass here.
        """
        await self.healthcheck()

    async def healthcheck(
        self, callback: RequestCallback | None = None
    ) -> HealthCheckResult:
        return await self.health_monitor.check(callback)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def get_record(
        self,
        selector: str | int | None = None,
        callback: RequestCallback | None = None,
    ) -> list[ChangeTicket] | None:
        """Retrieve change tickets from ServiceNow.

        Args:
            selector: Empty or zero for all tickets, a count for that many,
                or a ticket number for one specific ticket.
            callback: Receives ``(tickets, None)`` or ``(None, error)``.
        """
        try:
            response = await self.connector.get(selector)
        except TransportError as e:
            self.logger.error(
                f"Failed to get records for ServiceNow adapter instance {self.id}: {e}",
                extra={"adapter_id": self.id, "status_code": e.status_code},
            )
            if callback is not None:
                callback(None, e)
            return None

        tickets = self.translator.translate_many(response)
        self.logger.debug(
            f"Retrieved {len(tickets)} change tickets for ServiceNow adapter instance {self.id}"
        )
        if callback is not None:
            callback(tickets, None)
        return tickets

    async def post_record(
        self,
        callback: RequestCallback | None = None,
        fields: Mapping[str, Any] | None = None,
    ) -> ChangeTicket | None:
        """Create a change ticket in ServiceNow.

        Args:
            callback: Receives ``(ticket, None)`` or ``(None, error)``.
            fields: Canonical field values for the new ticket. Fields outside
                the field table are dropped.
        """
        payload = self.translator.to_external(fields) if fields else None
        try:
            response = await self.connector.post(payload)
        except TransportError as e:
            self.logger.error(
                f"Failed to create record for ServiceNow adapter instance {self.id}: {e}",
                extra={"adapter_id": self.id, "status_code": e.status_code},
            )
            if callback is not None:
                callback(None, e)
            return None

        ticket = self.translator.translate_one(response)
        self.logger.info(
            f"Created change ticket {ticket.get('change_ticket_number', '<unknown>')} "
            f"for ServiceNow adapter instance {self.id}"
        )
        if callback is not None:
            callback(ticket, None)
        return ticket


def _event_name(event: HealthStatus | str) -> str:
    return event.value if isinstance(event, HealthStatus) else event


__all__ = ["ChangeRequestAdapter"]
