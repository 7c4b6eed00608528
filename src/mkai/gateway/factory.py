from typing import Any

from .base import ModelGateway
from .gemini import GeminiGateway


def create_model_gateway(provider: str = "gemini", **config: Any) -> ModelGateway:
    """Create a model gateway instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type (only 'gemini' is supported)
        **config: Provider-specific configuration
            For Gemini:
                - api_key: str (required unless client is given)
                - text_model: str (default: 'gemini-3-flash-preview')
                - image_model: str (default: 'gemini-2.5-flash-image')
                - client: google.genai.Client | None

    Returns:
        Initialized gateway instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> gateway = create_model_gateway(
        ...     "gemini",
        ...     api_key="...",
        ...     text_model="gemini-3-flash-preview"
        ... )
    """
    if provider.lower() == "gemini":
        if "api_key" not in config and "client" not in config:
            raise TypeError("Gemini gateway requires 'api_key' in config")
        return GeminiGateway(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'gemini'"
    )
