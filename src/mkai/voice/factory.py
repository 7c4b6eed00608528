"""Factory for the voice adapter."""

from ..config import DEFAULT_VOICE_LOCALE
from .adapter import VoiceIO
from .base import SpeechSynthesizer
from .recognizer import GoogleSpeechRecognizer
from .synthesizer import MutedSynthesizer, SystemSpeechSynthesizer


def create_voice_io(
    locale: str = DEFAULT_VOICE_LOCALE,
    mute: bool = False,
    capture: bool = True,
) -> VoiceIO:
    """Create a voice adapter with the default engines.

    Args:
        locale: Locale for recognition and voice selection
        mute: Replace playback with a silent synthesizer
        capture: Attach a microphone recognizer

    Returns:
        VoiceIO instance
    """
    synthesizer: SpeechSynthesizer = MutedSynthesizer() if mute else SystemSpeechSynthesizer()
    recognizer = GoogleSpeechRecognizer() if capture else None
    return VoiceIO(recognizer=recognizer, synthesizer=synthesizer, locale=locale)
