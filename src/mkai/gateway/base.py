from abc import ABC, abstractmethod
from typing import Any

from ..chat.models import HistoryWindow
from .models import GatewayResponse


class ModelGateway(ABC):
    """Abstract adapter over the remote text and image models.

    This module hides the design decision of which AI service answers.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Role mapping and request format conversion
    - Mapping every transport or service failure to ServiceError

    Supports async context manager protocol for proper resource cleanup:
        async with gateway:
            response = await gateway.generate_reply("hello", [])
    """

    @abstractmethod
    async def generate_reply(
        self,
        prompt: str,
        history: HistoryWindow,
        attached_image: str | None = None,
    ) -> GatewayResponse:
        """Generate the assistant's text for a new user turn.

        Args:
            prompt: Text of the new user turn
            history: Prior turns, oldest first (no images)
            attached_image: Optional data URI attached to the new turn only

        Returns:
            GatewayResponse with the raw generated text

        Raises:
            ServiceError: On any transport or service failure
        """

    @abstractmethod
    async def generate_image(self, prompt: str) -> str | None:
        """Generate an image from a text prompt alone.

        Args:
            prompt: Image description

        Returns:
            The first inline image as a data URI, or None if the model
            produced no image

        Raises:
            ServiceError: On any transport or service failure
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ModelGateway":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup, a
        known harmless race in httpx/anyio shutdown.
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
