"""Test suite for the changebridge adapter.

Organized into three categories:

1. core/: Unit tests for health classification and record translation
   - Uses in-memory fakes for ports

2. adapters/: Tests for the ServiceNow transport and the event bus
   - HTTP is stubbed with httpx.MockTransport

3. fakes/: Port implementations for testing
"""
