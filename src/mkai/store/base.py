"""Abstract base class for key-value storage backends.

This module defines the interface the message store persists through.
The abstraction hides:
- Storage format (SQLite table, in-process dict)
- Persistence mechanism (file, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract key-value backend scoped to the local device.

    Values are opaque strings; callers own serialization.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, overwriting any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
