"""Fake implementations of core ports for testing.

- FakeTransportPort: Canned responses and injectable failures
- FakeEventBus: Captured published events for assertion
"""

from .events import FakeEventBus
from .transport import FakeTransportPort, json_response

__all__ = [
    "FakeEventBus",
    "FakeTransportPort",
    "json_response",
]
