"""In-memory messaging adapter for testing."""

from __future__ import annotations

from .broker import InMemoryBrokerClient

__all__ = ["InMemoryBrokerClient"]
