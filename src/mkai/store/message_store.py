"""Append-only conversation log persisted through a key-value backend.

The whole conversation lives under a single key as a JSON array of
messages. Every mutation rewrites that key before returning.
"""

import logging

from pydantic import TypeAdapter

from ..chat.models import ChatMessage, HistoryWindow
from ..config import HISTORY_STORAGE_KEY, HISTORY_WINDOW_SIZE
from .base import KeyValueStore

logger = logging.getLogger(__name__)

_conversation_adapter = TypeAdapter(list[ChatMessage])


def serialize_conversation(messages: list[ChatMessage]) -> str:
    """Serialize messages to the persisted JSON array format."""
    return _conversation_adapter.dump_json(messages, by_alias=True, exclude_none=True).decode("utf-8")


def deserialize_conversation(raw: str) -> list[ChatMessage]:
    """Parse the persisted JSON array format.

    Raises:
        pydantic.ValidationError: If the stored value is not a valid conversation
    """
    return _conversation_adapter.validate_json(raw)


class MessageStore:
    """Owner of the conversation.

    Messages are kept in insertion order, which is chronological order.
    Callers never mutate the list directly; they go through ``append`` and
    ``clear``.
    """

    def __init__(self, backend: KeyValueStore, key: str = HISTORY_STORAGE_KEY):
        self._backend = backend
        self._key = key
        self._messages: list[ChatMessage] = []

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Snapshot of the conversation, oldest first."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    async def load(self) -> list[ChatMessage]:
        """Read the persisted conversation. An absent key loads as empty."""
        raw = await self._backend.get(self._key)
        self._messages = deserialize_conversation(raw) if raw else []
        logger.debug("Loaded %d messages from %s store", len(self._messages), self._backend.backend_type)
        return list(self._messages)

    async def append(self, message: ChatMessage) -> ChatMessage:
        """Append a message and flush the conversation to storage."""
        self._messages.append(message)
        await self._backend.set(self._key, serialize_conversation(self._messages))
        return message

    async def clear(self) -> None:
        """Drop every message and delete the persisted copy."""
        self._messages = []
        await self._backend.delete(self._key)
        logger.info("Conversation cleared")

    def history_window(self, limit: int = HISTORY_WINDOW_SIZE) -> HistoryWindow:
        """Project the most recent messages to role/content pairs.

        Args:
            limit: Maximum number of turns

        Returns:
            Up to ``limit`` turns, oldest first
        """
        if limit <= 0:
            return []
        return [message.to_history_turn() for message in self._messages[-limit:]]

    def find(self, message_id: str) -> ChatMessage | None:
        """Look up a message by id."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None
