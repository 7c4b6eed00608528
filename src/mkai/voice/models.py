"""Data models for speech capture and playback."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Name fragments that engines use for their better-sounding voices
QUALITY_TAGS = ("Google", "Premium", "Enhanced", "Neural")


class CaptureState(str, Enum):
    INACTIVE = "inactive"
    CAPTURING = "capturing"


class Transcript(BaseModel):
    """Final result of one speech capture."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Recognized utterance")
    locale: str = Field(description="Locale the utterance was recognized in, e.g. en-US")
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class Voice(BaseModel):
    """A text-to-speech voice offered by the engine."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name of the voice")
    locale: str = Field(description="Locale tag as reported by the engine (en_US, en-us, en)")
    identifier: str | None = Field(default=None, description="Value the engine expects to select it")

    @property
    def language(self) -> str:
        """Lower-case language subtag of the locale."""
        return self.locale.replace("_", "-").split("-")[0].lower()

    @property
    def quality_tagged(self) -> bool:
        return any(tag in self.name for tag in QUALITY_TAGS)
