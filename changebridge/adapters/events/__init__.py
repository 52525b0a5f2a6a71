"""Event bus adapters for publishing adapter status."""

from .memory import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
