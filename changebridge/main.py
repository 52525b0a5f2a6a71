"""Composition root for the changebridge adapter.

This module is the ONLY location that wires configuration, concrete
adapters and the ChangeRequestAdapter together.

Module Structure:
- Configuration loading via config module
- Logging setup
- Transport and event bus instantiation
- Run mode selection (healthcheck, get, post)
"""

import asyncio
import json
import logging
import sys
from collections.abc import Mapping
from typing import Any

from changebridge.adapter import ChangeRequestAdapter
from changebridge.adapters.events.memory import InMemoryEventBus
from changebridge.adapters.transport.servicenow import ServiceNowConnector
from changebridge.config import Settings, load_settings
from changebridge.core.models import HealthStatus


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_adapter(settings: Settings) -> ChangeRequestAdapter:
    """Instantiate the adapter and its collaborators from settings."""
    properties = settings.adapter_properties()
    transport = ServiceNowConnector(
        url=properties.url,
        username=properties.username,
        password=properties.password,
        service_now_table=properties.service_now_table,
        timeout=settings.request_timeout_seconds,
    )
    return ChangeRequestAdapter(
        settings.adapter_id,
        properties,
        transport=transport,
        event_bus=InMemoryEventBus(),
        logger=logging.getLogger("changebridge.adapter"),
    )


async def bootstrap(settings: Settings | None = None) -> int:
    """Load configuration, wire the adapter and run the selected mode.

    Returns:
        Process exit code: 0 on success, 1 if the instance is offline
        or the request failed.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting changebridge adapter {settings.adapter_id} in {settings.run_mode} mode")

    adapter = build_adapter(settings)
    statuses: list[str] = []

    def _record_status(payload: Mapping[str, Any]) -> None:
        statuses.append(payload["id"])

    adapter.subscribe(HealthStatus.ONLINE, _record_status)

    async with adapter:
        if settings.run_mode == "healthcheck":
            await adapter.connect()
            online = bool(statuses)
            print(json.dumps({"id": adapter.id, "status": "ONLINE" if online else "OFFLINE"}))
            return 0 if online else 1

        elif settings.run_mode == "get":
            tickets = await adapter.get_record(settings.record_selector)
            if tickets is None:
                return 1
            print(json.dumps(tickets, indent=2, default=str))
            return 0

        elif settings.run_mode == "post":
            ticket = await adapter.post_record()
            if ticket is None:
                return 1
            print(json.dumps(ticket, indent=2, default=str))
            return 0

        logger.error(f"Unknown run mode: {settings.run_mode}")
        return 1


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Success
        1: Instance offline, request failed, or fatal error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        sys.exit(asyncio.run(bootstrap()))
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
