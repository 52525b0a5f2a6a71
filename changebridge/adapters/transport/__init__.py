"""Transport adapters for the ticketing system REST API."""

from .servicenow import ServiceNowConnector

__all__ = ["ServiceNowConnector"]
