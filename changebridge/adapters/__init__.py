"""External adapters for the changebridge adapter.

This package contains all external dependencies and provides
implementations of the core port interfaces.

Adapter Organization:

- transport/: Adapters for the ticketing system's REST API (ServiceNow)
- events/: Adapters for publishing status events to the host
"""
