"""Google Gemini gateway implementation.

Uses the official Google GenAI SDK for async text and image generation.
Reference: https://github.com/googleapis/python-genai
"""

import logging
from typing import Any

from google import genai
from google.genai import types

from ..chat.models import HistoryWindow, Role
from ..config import DEFAULT_IMAGE_MODEL, DEFAULT_TEXT_MODEL, REPLY_TEMPERATURE
from ..media import DEFAULT_IMAGE_MIME, parse_data_uri, to_data_uri
from ..prompts import get_persona_prompt
from .base import ModelGateway
from .errors import ServiceError
from .models import GatewayRequest, GatewayResponse

logger = logging.getLogger(__name__)


class GeminiGateway(ModelGateway):
    """Google Gemini gateway.

    Hidden design decisions:
    - Google GenAI client initialization
    - Role mapping (assistant turns become the 'model' role)
    - Where the attached image goes (an inline-data part of the final user turn)
    - How an image is located in a multi-part response
    """

    def __init__(
        self,
        api_key: str | None = None,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        client: genai.Client | None = None,
        **client_kwargs: Any
    ):
        """Initialize Gemini gateway.

        Args:
            api_key: Google AI API key (ignored when client is given)
            text_model: Model used for replies
            image_model: Model used for image generation
            client: Optional pre-built client for dependency injection
            **client_kwargs: Additional kwargs for Client
        """
        if client is None and not api_key:
            raise TypeError("GeminiGateway requires 'api_key' or 'client'")
        self._text_model = text_model
        self._image_model = image_model
        self._client = client or genai.Client(api_key=api_key, **client_kwargs)

    @property
    def text_model(self) -> str:
        return self._text_model

    @property
    def image_model(self) -> str:
        return self._image_model

    def _build_contents(self, request: GatewayRequest) -> list[types.Content]:
        """Convert a request to Gemini contents, history first."""
        contents = [
            types.Content(
                role="model" if turn.role == Role.ASSISTANT else "user",
                parts=[types.Part(text=turn.content)]
            )
            for turn in request.history
        ]

        user_parts = [types.Part(text=request.prompt)]
        if request.attached_image:
            mime_type, raw = parse_data_uri(request.attached_image)
            user_parts.append(types.Part.from_bytes(data=raw, mime_type=mime_type))

        contents.append(types.Content(role="user", parts=user_parts))
        return contents

    def _extract_text(self, response: types.GenerateContentResponse) -> str:
        """Join the text parts of the first candidate. Empty string if there are none."""
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if part.text]
                if texts:
                    return "".join(texts)

        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def generate_reply(
        self,
        prompt: str,
        history: HistoryWindow,
        attached_image: str | None = None,
    ) -> GatewayResponse:
        request = GatewayRequest(prompt=prompt, history=history, attached_image=attached_image)
        config = types.GenerateContentConfig(
            temperature=REPLY_TEMPERATURE,
            system_instruction=get_persona_prompt(),
        )

        try:
            contents = self._build_contents(request)
            response = await self._client.aio.models.generate_content(
                model=self._text_model,
                contents=contents,
                config=config
            )
            text = self._extract_text(response)
        except Exception as exc:
            raise ServiceError(f"Text generation failed: {exc}") from exc

        logger.debug("Reply from %s: %d chars", self._text_model, len(text))
        return GatewayResponse(text=text, model=self._text_model)

    async def generate_image(self, prompt: str) -> str | None:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._image_model,
                contents=types.Content(role="user", parts=[types.Part(text=prompt)]),
            )
        except Exception as exc:
            raise ServiceError(f"Image generation failed: {exc}") from exc

        candidates = response.candidates or []
        parts = candidates[0].content.parts if candidates and candidates[0].content else None
        for part in parts or []:
            if part.inline_data and part.inline_data.data:
                mime_type = part.inline_data.mime_type or DEFAULT_IMAGE_MIME
                return to_data_uri(part.inline_data.data, mime_type)

        logger.info("Image model returned no image for prompt %r", prompt)
        return None

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
