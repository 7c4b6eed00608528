"""Pytest configuration and shared fixtures."""
import io
import os

import pytest
from PIL import Image

from mkai.gateway import GatewayResponse, ModelGateway
from mkai.media import to_data_uri
from mkai.store import MessageStore
from mkai.store.in_memory import InMemoryKeyValueStore
from mkai.voice import Transcript


def make_png(width: int, height: int, color: tuple[int, int, int] = (30, 90, 160)) -> bytes:
    """Encode a solid-color PNG of the given size."""
    out = io.BytesIO()
    Image.new("RGB", (width, height), color).save(out, format="PNG")
    return out.getvalue()


class FakeGateway(ModelGateway):
    """In-process stand-in for the remote models.

    Records every call and, for reply calls, how many messages the store
    held at the moment the call was made.
    """

    def __init__(
        self,
        reply: str = "",
        image: str | None = None,
        reply_error: Exception | None = None,
        image_error: Exception | None = None,
        store: MessageStore | None = None,
    ):
        self.reply = reply
        self.image = image
        self.reply_error = reply_error
        self.image_error = image_error
        self.store = store
        self.reply_calls: list[dict] = []
        self.image_calls: list[str] = []
        self.store_sizes_at_call: list[int] = []

    async def generate_reply(self, prompt, history, attached_image=None):
        self.reply_calls.append({"prompt": prompt, "history": list(history), "image": attached_image})
        if self.store is not None:
            self.store_sizes_at_call.append(len(self.store))
        if self.reply_error is not None:
            raise self.reply_error
        return GatewayResponse(text=self.reply, model="fake-text")

    async def generate_image(self, prompt):
        self.image_calls.append(prompt)
        if self.image_error is not None:
            raise self.image_error
        return self.image

    async def close(self) -> None:
        pass


class FakeVoice:
    """Voice adapter stand-in that records what would be spoken."""

    def __init__(self, transcript: Transcript | None = None):
        self.transcript = transcript
        self.spoken: list[str] = []
        self.captures = 0
        self.cancelled = 0

    def speak(self, text: str) -> None:
        self.spoken.append(text)

    def cancel_playback(self) -> None:
        self.cancelled += 1

    async def capture(self) -> Transcript | None:
        self.captures += 1
        return self.transcript


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
    }


@pytest.fixture
def png_factory():
    """Return the PNG encoder helper."""
    return make_png


@pytest.fixture
def png_data_uri():
    """A 64x48 PNG as a data URI."""
    return to_data_uri(make_png(64, 48), "image/png")


@pytest.fixture
def kv_backend():
    """Empty in-memory key-value backend."""
    return InMemoryKeyValueStore()


@pytest.fixture
def message_store(kv_backend):
    """Message store over the in-memory backend."""
    return MessageStore(kv_backend)


@pytest.fixture
def fake_voice():
    return FakeVoice()


@pytest.fixture
def gateway_factory(message_store):
    """Build a FakeGateway bound to the shared message store."""
    def _make(**kwargs) -> FakeGateway:
        return FakeGateway(store=message_store, **kwargs)
    return _make
