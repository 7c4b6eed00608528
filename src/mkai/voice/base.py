"""Abstract speech engines.

The abstraction hides:
- Which recognition service turns audio into text
- How audio is captured from the microphone
- Which speech command or library produces audio
"""

from abc import ABC, abstractmethod

from .models import Transcript, Voice


class SpeechRecognizer(ABC):
    """Blocking, single-utterance speech-to-text."""

    @abstractmethod
    def listen_once(self, locale: str) -> Transcript | None:
        """Capture one utterance and recognize it.

        Non-continuous and final-only: returns after the first phrase.

        Args:
            locale: Recognition locale, e.g. en-US

        Returns:
            Transcript, or None when nothing intelligible was heard

        Raises:
            SpeechCaptureError: On microphone or recognition service failure
        """


class SpeechSynthesizer(ABC):
    """Non-blocking text-to-speech."""

    @abstractmethod
    def list_voices(self) -> list[Voice]:
        """Voices the engine offers, in engine order."""

    @abstractmethod
    def speak(
        self,
        text: str,
        voice: Voice | None = None,
        rate: float = 1.0,
        pitch: float = 1.0,
    ) -> None:
        """Start speaking and return immediately.

        Args:
            text: Text to speak
            voice: Voice to use (None uses the engine default)
            rate: Speed multiplier, 1.0 is the engine's normal speed
            pitch: Pitch multiplier, 1.0 is the engine's normal pitch

        Raises:
            SpeechPlaybackError: If the engine cannot be started
        """

    @abstractmethod
    def cancel(self) -> None:
        """Stop any in-progress speech. No-op when idle."""

    @property
    @abstractmethod
    def is_speaking(self) -> bool:
        """Whether speech is currently playing."""
