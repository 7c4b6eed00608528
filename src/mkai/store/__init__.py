"""Conversation storage module for mkai.

Provides the message store and the key-value backends it persists through.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .message_store import MessageStore, deserialize_conversation, serialize_conversation

__all__ = [
    "KeyValueStore",
    "MessageStore",
    "create_key_value_store",
    "deserialize_conversation",
    "serialize_conversation",
]
