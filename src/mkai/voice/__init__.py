"""Voice input and output for mkai.

Wraps speech-to-text capture and text-to-speech playback behind
engine-neutral interfaces.
"""

from .adapter import VoiceIO, select_voice
from .base import SpeechRecognizer, SpeechSynthesizer
from .errors import SpeechCaptureError, SpeechPlaybackError
from .factory import create_voice_io
from .models import CaptureState, Transcript, Voice
from .recognizer import GoogleSpeechRecognizer
from .synthesizer import MutedSynthesizer, SystemSpeechSynthesizer

__all__ = [
    "CaptureState",
    "GoogleSpeechRecognizer",
    "MutedSynthesizer",
    "SpeechCaptureError",
    "SpeechPlaybackError",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "SystemSpeechSynthesizer",
    "Transcript",
    "Voice",
    "VoiceIO",
    "create_voice_io",
    "select_voice",
]
