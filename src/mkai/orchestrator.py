"""Conversation orchestration.

Drives one submission through the pipeline:

    user turn -> text model -> reply interpretation
        -> text reply, spoken aloud
        -> image prompt -> image model -> watermark -> captioned image

Only ServiceError is treated as a failure; it becomes a fixed in-persona
apology. A missing image and an empty reply are absorbed silently.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .chat.models import ChatMessage, HistoryWindow
from .config import GLITCH_REPLY, HISTORY_WINDOW_SIZE, IMAGE_CAPTION_TEMPLATE
from .gateway.base import ModelGateway
from .gateway.errors import ServiceError
from .interpreter import ReplyKind, interpret_reply
from .media import parse_data_uri
from .store.message_store import MessageStore
from .voice.adapter import VoiceIO
from .watermark import apply_watermark_data_uri

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class OutcomeKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    NO_IMAGE = "no_image"
    FAILED = "failed"


class SubmissionOutcome(BaseModel):
    """What one accepted submission added to the conversation."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    user_message: ChatMessage
    reply: ChatMessage | None = None


class ConversationOrchestrator:
    """Owner of the message store, the gateway and the voice handles.

    Submissions are not serialized: two in flight at once may append their
    replies in completion order. ``is_composing`` stays true while any
    submission is in flight so the front end can hold back its prompt.
    """

    def __init__(
        self,
        store: MessageStore,
        gateway: ModelGateway,
        voice: VoiceIO | None = None,
        on_composing: Callable[[bool], None] | None = None,
        history_size: int = HISTORY_WINDOW_SIZE,
    ):
        self._store = store
        self._gateway = gateway
        self._voice = voice
        self._on_composing = on_composing
        self._history_size = history_size
        self._in_flight = 0

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def voice(self) -> VoiceIO | None:
        return self._voice

    @property
    def state(self) -> OrchestratorState:
        return OrchestratorState.SENDING if self._in_flight else OrchestratorState.IDLE

    @property
    def is_composing(self) -> bool:
        return self.state == OrchestratorState.SENDING

    def _enter_sending(self) -> None:
        self._in_flight += 1
        if self._in_flight == 1 and self._on_composing:
            self._on_composing(True)

    def _leave_sending(self) -> None:
        self._in_flight -= 1
        if self._in_flight == 0 and self._on_composing:
            self._on_composing(False)

    def _speak(self, text: str) -> None:
        if self._voice is not None:
            self._voice.speak(text)

    async def start(self) -> list[ChatMessage]:
        """Load the persisted conversation."""
        return await self._store.load()

    async def submit(
        self,
        text: str | None = None,
        image: str | None = None,
    ) -> SubmissionOutcome | None:
        """Process one user submission.

        Args:
            text: Message text (may be empty when an image is attached)
            image: Attached image as a data URI

        Returns:
            The outcome, or None when both text and image are empty

        Raises:
            InvalidDataURI: If ``image`` is not a base64 data URI; nothing is stored
        """
        content = text or ""
        if not content.strip() and not image:
            return None
        if image:
            parse_data_uri(image)

        history = self._store.history_window(self._history_size)
        user_message = await self._store.append(ChatMessage.user(content, image=image))

        self._enter_sending()
        try:
            return await self._respond(user_message, history)
        finally:
            self._leave_sending()

    async def _respond(self, user_message: ChatMessage, history: HistoryWindow) -> SubmissionOutcome:
        try:
            response = await self._gateway.generate_reply(
                user_message.content,
                history,
                attached_image=user_message.image,
            )
            reply = interpret_reply(response.text)

            if reply.kind == ReplyKind.IMAGE:
                return await self._respond_with_image(user_message, reply.image_prompt or "")

            message = await self._store.append(ChatMessage.assistant(reply.content))
            self._speak(message.content)
            return SubmissionOutcome(kind=OutcomeKind.TEXT, user_message=user_message, reply=message)

        except ServiceError:
            logger.exception("Model call failed; replying with the glitch message")
            message = await self._store.append(ChatMessage.assistant(GLITCH_REPLY))
            return SubmissionOutcome(kind=OutcomeKind.FAILED, user_message=user_message, reply=message)

    async def _respond_with_image(self, user_message: ChatMessage, prompt: str) -> SubmissionOutcome:
        raw = await self._gateway.generate_image(prompt)
        if raw is None:
            logger.info("No image produced for %r; nothing appended", prompt)
            return SubmissionOutcome(kind=OutcomeKind.NO_IMAGE, user_message=user_message)

        watermarked = await asyncio.to_thread(apply_watermark_data_uri, raw)
        message = await self._store.append(ChatMessage.assistant(
            IMAGE_CAPTION_TEMPLATE.format(prompt=prompt),
            generated_image=watermarked,
        ))
        self._speak(message.content)
        return SubmissionOutcome(kind=OutcomeKind.IMAGE, user_message=user_message, reply=message)

    async def listen_and_submit(self) -> SubmissionOutcome | None:
        """Capture one utterance and submit its transcript as text.

        Returns None when there is no voice adapter or nothing was recognized.
        """
        if self._voice is None:
            return None
        transcript = await self._voice.capture()
        if transcript is None:
            return None
        return await self.submit(text=transcript.text)

    async def reset(self) -> None:
        """Clear the conversation and its persisted copy."""
        await self._store.clear()
