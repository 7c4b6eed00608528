"""Voice I/O for the conversation.

Capture is a task the caller awaits: it yields a Transcript or None. The
recognizer runs on a dedicated worker thread, and the adapter reports
CAPTURING until that thread has returned, even after an explicit stop.
Playback is fire-and-forget.
"""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from ..config import DEFAULT_VOICE_LOCALE, SPEECH_PITCH, SPEECH_RATE
from .base import SpeechRecognizer, SpeechSynthesizer
from .errors import SpeechCaptureError, SpeechPlaybackError
from .models import CaptureState, Transcript, Voice

logger = logging.getLogger(__name__)


def select_voice(voices: list[Voice], locale: str) -> Voice | None:
    """Pick the first quality-tagged voice or voice in the locale's language.

    Returns None to let the engine use its default voice.
    """
    language = locale.replace("_", "-").split("-")[0].lower()
    for voice in voices:
        if voice.quality_tagged or voice.language == language:
            return voice
    return None


class VoiceIO:
    """Speech capture and playback in one fixed locale.

    Only one capture session runs at a time. A stopped session keeps the
    microphone until the recognizer returns, and no new session starts
    before then.
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer | None,
        synthesizer: SpeechSynthesizer,
        locale: str = DEFAULT_VOICE_LOCALE,
    ):
        self._recognizer = recognizer
        self._synthesizer = synthesizer
        self._locale = locale
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mkai-capture")
        self._session: Future | None = None
        self._waiter: asyncio.Future | None = None
        self._stop_requested = False
        self._voices: list[Voice] | None = None

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def capture_state(self) -> CaptureState:
        if self._session is not None and not self._session.done():
            return CaptureState.CAPTURING
        return CaptureState.INACTIVE

    @property
    def is_capturing(self) -> bool:
        return self.capture_state == CaptureState.CAPTURING

    @property
    def can_capture(self) -> bool:
        return self._recognizer is not None

    async def capture(self) -> Transcript | None:
        """Run one single-utterance capture.

        Returns:
            The transcript of the first recognized phrase, or None on error,
            silence, explicit stop, or when a session is still running
        """
        if self._recognizer is None:
            logger.warning("Voice capture requested but no recognizer is configured")
            return None
        if self.is_capturing:
            logger.debug("Capture already in progress; ignoring second request")
            return None

        self._stop_requested = False
        self._session = self._executor.submit(self._recognizer.listen_once, self._locale)
        self._waiter = asyncio.wrap_future(self._session)
        try:
            transcript = await self._waiter
        except asyncio.CancelledError:
            if self._stop_requested:
                logger.debug("Capture stopped; microphone released when the recognizer returns")
                return None
            raise
        except SpeechCaptureError as exc:
            logger.warning("Voice capture failed: %s", exc)
            return None
        finally:
            self._waiter = None
            self._stop_requested = False

        if transcript is None or not transcript.text.strip():
            return None
        return transcript

    def stop_capture(self) -> None:
        """Stop waiting for the active capture, if any."""
        if self._waiter is not None and not self._waiter.done():
            self._stop_requested = True
            self._waiter.cancel()

    def _available_voices(self) -> list[Voice]:
        if self._voices is None:
            try:
                self._voices = self._synthesizer.list_voices()
            except SpeechPlaybackError as exc:
                logger.warning("Cannot list voices, using engine default: %s", exc)
                self._voices = []
        return self._voices

    def speak(self, text: str) -> None:
        """Speak text, interrupting anything already playing. Does not wait."""
        if not text:
            return
        self._synthesizer.cancel()
        voice = select_voice(self._available_voices(), self._locale)
        try:
            self._synthesizer.speak(text, voice=voice, rate=SPEECH_RATE, pitch=SPEECH_PITCH)
        except SpeechPlaybackError as exc:
            logger.warning("Playback failed: %s", exc)

    def cancel_playback(self) -> None:
        self._synthesizer.cancel()
