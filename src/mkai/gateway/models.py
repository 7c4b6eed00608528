from pydantic import BaseModel, ConfigDict, Field

from ..chat.models import HistoryTurn


class GatewayRequest(BaseModel):
    """One reply request: the new prompt plus its context."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(description="Text of the new user turn")
    history: list[HistoryTurn] = Field(default_factory=list, description="Prior turns, oldest first")
    attached_image: str | None = Field(
        default=None,
        description="Data URI sent as an extra part of the final user turn"
    )


class GatewayResponse(BaseModel):
    """Raw text produced by the text model."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Generated text, possibly empty")
    model: str = Field(description="Model that generated the response")
