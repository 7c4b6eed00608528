class SpeechCaptureError(Exception):
    """Microphone or recognition service failure during capture."""


class SpeechPlaybackError(Exception):
    """The speech engine could not be started or queried."""
