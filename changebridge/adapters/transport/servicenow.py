"""ServiceNow Table API transport adapter.

Implements TransportPort against ``/api/now/table/{table}`` using HTTP
basic authentication. Requests are issued once; there is no retry.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from changebridge.core.errors import TransportError
from changebridge.core.models import TransportResponse
from changebridge.core.ports import TransportPort

logger = logging.getLogger(__name__)

HIBERNATION_MARKERS = ("Instance Hibernating page", "<html>")

# Plain ticket numbers only; encoded-query operators such as ^ are rejected.
TICKET_NUMBER_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class ServiceNowConnector(TransportPort):
    """ServiceNow-backed transport via the Table REST API."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        service_now_table: str,
        timeout: float = 30.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the connector.

        Args:
            url: ServiceNow instance URL (e.g., https://dev12345.service-now.com)
            username: Login username.
            password: Login password.
            service_now_table: Table holding change requests (e.g., change_request)
            timeout: Per-request timeout in seconds.
            http_transport: Optional httpx transport, used to stub the network.
        """
        if not service_now_table or not service_now_table.strip():
            raise ValueError("ServiceNow table must be provided")
        self.url = url.rstrip("/")
        self.username = username
        self.service_now_table = service_now_table
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            base_url=self.url,
            auth=httpx.BasicAuth(username, password),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=http_transport,
        )

    @property
    def table_path(self) -> str:
        return f"/api/now/table/{self.service_now_table}"

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    async def get(self, selector: str | int | None = None) -> TransportResponse:
        """Read records selected by ``selector`` from the change request table."""
        params = self.build_query(selector)
        return await self._send("GET", params=params)

    async def post(
        self, payload: Mapping[str, Any] | None = None
    ) -> TransportResponse:
        """Create a record in the change request table."""
        return await self._send("POST", json=dict(payload or {}))

    def is_hibernating(self, response: TransportResponse) -> bool:
        """Detect the hibernation page a sleeping developer instance serves.

        The page is returned with HTTP 200, so it passes status checks.
        """
        body = response.body or ""
        return response.status_code == 200 and all(
            marker in body for marker in HIBERNATION_MARKERS
        )

    @staticmethod
    def build_query(selector: str | int | None) -> dict[str, str]:
        """Translate a record selector into Table API query parameters.

        - None, "", 0 or "0": all records
        - positive integer or digit string: that many records
        - any other string: the record with that ticket number

        Raises:
            ValueError: If the selector is negative or not a plain ticket number.
        """
        if selector is None:
            return {}
        if isinstance(selector, bool):
            raise ValueError(f"Invalid record selector: {selector!r}")
        if isinstance(selector, int):
            if selector < 0:
                raise ValueError(f"Record count must be non-negative, got {selector}")
            return {"sysparm_limit": str(selector)} if selector else {}

        selector = selector.strip()
        if not selector or selector == "0":
            return {}
        if selector.isascii() and selector.isdigit():
            return {"sysparm_limit": str(int(selector))}
        if not TICKET_NUMBER_PATTERN.fullmatch(selector):
            raise ValueError(f"Invalid ticket number selector: {selector!r}")
        return {"sysparm_query": f"number={selector}"}

    async def _send(self, method: str, **kwargs: Any) -> TransportResponse:
        try:
            response = await self.client.request(method, self.table_path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"ServiceNow {method} {self.table_path} failed: {e}")
            raise TransportError(f"ServiceNow request failed: {e}") from e

        result = TransportResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )
        if not response.is_success:
            logger.warning(
                f"ServiceNow {method} {self.table_path} returned {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise TransportError(
                f"ServiceNow returned HTTP {response.status_code}",
                response=result,
            )
        return result
