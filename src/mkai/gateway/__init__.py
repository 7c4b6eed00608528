from .base import ModelGateway
from .errors import ServiceError
from .factory import create_model_gateway
from .gemini import GeminiGateway
from .models import GatewayRequest, GatewayResponse

__all__ = [
    "ModelGateway",
    "ServiceError",
    "create_model_gateway",
    "GeminiGateway",
    "GatewayRequest",
    "GatewayResponse",
]
