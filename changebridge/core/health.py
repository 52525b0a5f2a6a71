"""Health monitoring for an adapter instance.

A health check is a single read of the sentinel record followed by
a fixed classification:

1. transport error  -> OFFLINE, callback(None, error)
2. hibernating      -> OFFLINE, callback(None, "hibernating")
3. anything else    -> ONLINE,  callback(response, None)

Nothing is remembered between checks.
"""

import logging
from collections.abc import Mapping

from .errors import TransportError
from .models import (
    HIBERNATING,
    SENTINEL_SELECTOR,
    HealthCheckResult,
    HealthStatus,
    RequestCallback,
)
from .ports import EventBusPort, TransportPort


class StatusEmitter:
    """Publishes ONLINE/OFFLINE events tagged with the adapter id."""

    def __init__(
        self,
        adapter_id: str,
        event_bus: EventBusPort,
        logger: logging.Logger,
    ):
        self.adapter_id = adapter_id
        self.event_bus = event_bus
        self.logger = logger

    def emit_status(self, status: HealthStatus | str) -> None:
        event = status.value if isinstance(status, HealthStatus) else status
        payload: Mapping[str, str] = {"id": self.adapter_id}
        self.event_bus.publish(event, payload)

    def emit_online(self) -> None:
        self.emit_status(HealthStatus.ONLINE)
        self.logger.info(f"ServiceNow: Instance {self.adapter_id} is available.")

    def emit_offline(self) -> None:
        self.emit_status(HealthStatus.OFFLINE)
        self.logger.warning(f"ServiceNow: Instance {self.adapter_id} is unavailable.")


class HealthMonitor:
    """Runs single-shot health checks against the ticketing system."""

    def __init__(
        self,
        adapter_id: str,
        transport: TransportPort,
        emitter: StatusEmitter,
        logger: logging.Logger,
        sentinel_selector: str = SENTINEL_SELECTOR,
    ):
        self.adapter_id = adapter_id
        self.transport = transport
        self.emitter = emitter
        self.logger = logger
        self.sentinel_selector = sentinel_selector

    async def check(self, callback: RequestCallback | None = None) -> HealthCheckResult:
        """Probe the backend once, emit the outcome and report it.

        Transport failures, including unexpected errors from a host-supplied
        transport, are absorbed into an OFFLINE result; they never propagate
        to the caller. Cancellation still propagates.
        """
        try:
            response = await self.transport.get(self.sentinel_selector)
        except TransportError as e:
            result = self._offline_on_error(e, e.status_code)
        except Exception as e:
            result = self._offline_on_error(e, None, exc_info=True)
        else:
            if self.transport.is_hibernating(response):
                self.emitter.emit_offline()
                self.logger.error(
                    f"ServiceNow adapter instance {self.adapter_id} is hibernating",
                    extra={"adapter_id": self.adapter_id},
                )
                result = HealthCheckResult(status=HealthStatus.OFFLINE, error=HIBERNATING)
            else:
                self.emitter.emit_online()
                self.logger.debug(
                    f"Healthy status for ServiceNow adapter instance {self.adapter_id}"
                )
                result = HealthCheckResult(status=HealthStatus.ONLINE, response=response)

        if callback is not None:
            callback(result.response, result.error)
        return result

    def _offline_on_error(
        self, error: Exception, status_code: int | None, exc_info: bool = False
    ) -> HealthCheckResult:
        self.emitter.emit_offline()
        self.logger.error(
            f"Error returned from ServiceNow health check: {error!r} "
            f"for ServiceNow adapter instance {self.adapter_id}",
            extra={"adapter_id": self.adapter_id, "status_code": status_code},
            exc_info=exc_info,
        )
        return HealthCheckResult(status=HealthStatus.OFFLINE, error=error)
