"""Data models for conversation turns.

These models define the structure of stored messages and the history
projection sent to the model, independent of the storage backend used.
"""

import time
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from uuid_extensions import uuid7


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class Role(str, Enum):
    """Sender of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One conversation turn.

    Serialized with camelCase keys so a stored conversation reads as a plain
    JSON array of ``{id, role, content, timestamp, image, generatedImage}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid7()), description="Creation-ordered identifier")
    role: Role = Field(description="Sender of the turn")
    content: str = Field(default="", description="Text body, or the caption of a generated image")
    timestamp: int = Field(default_factory=now_ms, description="Creation time in epoch milliseconds")
    image: str | None = Field(default=None, description="User attachment as a data URI")
    generated_image: str | None = Field(
        default=None,
        alias="generatedImage",
        description="Watermarked AI image as a data URI",
    )

    @model_validator(mode="after")
    def _check_attachments(self) -> "ChatMessage":
        if self.image is not None and self.generated_image is not None:
            raise ValueError("a message cannot carry both image and generatedImage")
        if self.role == Role.USER:
            if self.generated_image is not None:
                raise ValueError("only assistant messages may carry generatedImage")
            if not self.content.strip() and self.image is None:
                raise ValueError("a user message needs text or an attached image")
        else:
            if self.image is not None:
                raise ValueError("only user messages may carry image")
            if not self.content:
                raise ValueError("assistant content must not be empty")
        return self

    @classmethod
    def user(cls, content: str, image: str | None = None) -> "ChatMessage":
        """Create a user turn stamped with a fresh id and the current time."""
        return cls(role=Role.USER, content=content, image=image)

    @classmethod
    def assistant(cls, content: str, generated_image: str | None = None) -> "ChatMessage":
        """Create an assistant turn stamped with a fresh id and the current time."""
        return cls(role=Role.ASSISTANT, content=content, generated_image=generated_image)

    @property
    def display_time(self) -> str:
        """Local wall-clock time of the turn as HH:MM."""
        return datetime.fromtimestamp(self.timestamp / 1000).strftime("%H:%M")

    def to_history_turn(self) -> "HistoryTurn":
        """Project to the role/content pair sent as model context."""
        return HistoryTurn(role=self.role, content=self.content)


class HistoryTurn(BaseModel):
    """A single {role, content} entry of the history window. Images are excluded."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


HistoryWindow = list[HistoryTurn]
