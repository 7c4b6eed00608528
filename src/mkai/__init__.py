"""
MK AI: a terminal chat client for Google Gemini.

Forwards text, image and voice input to the hosted model, renders the
replies, speaks them aloud and watermarks generated images.
"""

__version__ = "0.1.0"

from .chat import ChatMessage, Role
from .gateway import ModelGateway, ServiceError, create_model_gateway
from .interpreter import InterpretedReply, ReplyKind, interpret_reply
from .orchestrator import ConversationOrchestrator, OrchestratorState, OutcomeKind, SubmissionOutcome
from .store import MessageStore, create_key_value_store
from .watermark import apply_watermark, apply_watermark_data_uri

__all__ = [
    "ChatMessage",
    "ConversationOrchestrator",
    "InterpretedReply",
    "MessageStore",
    "ModelGateway",
    "OrchestratorState",
    "OutcomeKind",
    "ReplyKind",
    "Role",
    "ServiceError",
    "SubmissionOutcome",
    "apply_watermark",
    "apply_watermark_data_uri",
    "create_key_value_store",
    "create_model_gateway",
    "interpret_reply",
]
