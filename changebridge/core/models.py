"""Domain models for the changebridge adapter.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, TypeAlias

# Marker reported instead of an error object when the backend is hibernating.
HIBERNATING = "hibernating"

# Selector used by the health check: "one record, any record".
SENTINEL_SELECTOR = "1"


class HealthStatus(Enum):
    """Availability signal emitted by the health monitor.

    The value doubles as the event name published on the event bus.
    """

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class FieldMapping:
    """One row of the external-to-canonical field table."""

    external: str
    canonical: str

    def __post_init__(self) -> None:
        """Validate field names on creation."""
        if not self.external or not self.external.strip():
            raise ValueError("external must be a non-empty string")
        if not self.canonical or not self.canonical.strip():
            raise ValueError("canonical must be a non-empty string")


CHANGE_TICKET_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("number", "change_ticket_number"),
    FieldMapping("active", "active"),
    FieldMapping("priority", "priority"),
    FieldMapping("description", "description"),
    FieldMapping("work_start", "work_start"),
    FieldMapping("work_end", "work_end"),
    FieldMapping("sys_id", "change_ticket_key"),
)


@dataclass(frozen=True)
class AdapterProperties:
    """Connection properties for one adapter instance."""

    url: str
    username: str
    password: str
    service_now_table: str

    def __post_init__(self) -> None:
        """Validate connection properties on creation."""
        if not self.url or not self.url.strip():
            raise ValueError("url must be a non-empty string")
        if not self.service_now_table or not self.service_now_table.strip():
            raise ValueError("service_now_table must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AdapterProperties":
        """Build properties from the host's ``{url, auth, serviceNowTable}`` shape.

        Raises:
            ValueError: If a required key is missing.
        """
        try:
            auth = data["auth"]
            return cls(
                url=data["url"],
                username=auth["username"],
                password=auth["password"],
                service_now_table=data["serviceNowTable"],
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid adapter properties: missing {e}") from e

    def __repr__(self) -> str:
        return (
            f"AdapterProperties(url={self.url!r}, username={self.username!r}, "
            f"password='***', service_now_table={self.service_now_table!r})"
        )


@dataclass(frozen=True)
class TransportResponse:
    """HTTP-like response handed back by a transport.

    ``body`` is the raw response text; translation parses it lazily.
    """

    status_code: int
    body: str | None
    headers: dict[str, str] | MappingProxyType[str, str] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        """Convert headers dict to read-only proxy."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, "headers", MappingProxyType(self.headers))


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one health check run.

    Exactly one of ``response`` and ``error`` is set.
    """

    status: HealthStatus
    response: TransportResponse | None = None
    error: Any = None

    @property
    def is_online(self) -> bool:
        return self.status is HealthStatus.ONLINE


ChangeTicket: TypeAlias = dict[str, Any]

# Data-first callback: (response_data, error_message).
RequestCallback: TypeAlias = Callable[[Any, Any], None]

EventHandler: TypeAlias = Callable[[Mapping[str, Any]], None]
