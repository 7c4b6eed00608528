"""Google Web Speech recognition through the SpeechRecognition package.

Microphone capture needs PyAudio (install the ``voice`` extra).
"""

import logging

import speech_recognition as sr

from .base import SpeechRecognizer
from .errors import SpeechCaptureError
from .models import Transcript

logger = logging.getLogger(__name__)


class GoogleSpeechRecognizer(SpeechRecognizer):
    """Single-utterance microphone recognizer.

    Args:
        timeout: Seconds to wait for speech to start before giving up
        phrase_time_limit: Maximum seconds of a single utterance
        energy_threshold: Microphone energy level treated as speech
    """

    def __init__(
        self,
        timeout: float = 8.0,
        phrase_time_limit: float = 15.0,
        energy_threshold: int = 300,
    ):
        self._timeout = timeout
        self._phrase_time_limit = phrase_time_limit
        self._recognizer = sr.Recognizer()
        self._recognizer.energy_threshold = energy_threshold
        self._recognizer.dynamic_energy_threshold = False

    def listen_once(self, locale: str) -> Transcript | None:
        try:
            with sr.Microphone() as source:
                audio = self._recognizer.listen(
                    source,
                    timeout=self._timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
        except sr.WaitTimeoutError:
            logger.debug("No speech within %.1fs", self._timeout)
            return None
        except (OSError, AttributeError) as exc:
            # SpeechRecognition raises AttributeError when PyAudio is missing
            raise SpeechCaptureError(f"Microphone unavailable: {exc}") from exc

        try:
            text = self._recognizer.recognize_google(audio, language=locale)
        except sr.UnknownValueError:
            logger.debug("Speech not understood")
            return None
        except sr.RequestError as exc:
            raise SpeechCaptureError(f"Recognition service failed: {exc}") from exc

        return Transcript(text=text, locale=locale)
