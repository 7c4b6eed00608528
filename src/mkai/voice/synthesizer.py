"""Text-to-speech through the platform speech command.

macOS ships ``say``; elsewhere ``espeak-ng`` or ``espeak`` is used when
installed. Each utterance is a child process, so cancelling playback means
terminating that process.
"""

import logging
import platform
import re
import shutil
import subprocess

from .base import SpeechSynthesizer
from .errors import SpeechPlaybackError
from .models import Voice

logger = logging.getLogger(__name__)

BASE_WORDS_PER_MINUTE = 175  # normal speed of both say and espeak
BASE_ESPEAK_PITCH = 50  # espeak pitch scale is 0-99

# "Samantha            en_US    # Hello, my name is Samantha."
_SAY_VOICE_LINE = re.compile(r"^(?P<name>.+?)\s{2,}(?P<locale>[a-z]{2,3}(?:[_-]\w+)?)\s+#")


def detect_speech_command() -> str | None:
    """Find the speech command for this platform, or None if there is none."""
    if platform.system() == "Darwin" and shutil.which("say"):
        return "say"
    for candidate in ("espeak-ng", "espeak"):
        if shutil.which(candidate):
            return candidate
    return None


def parse_say_voices(output: str) -> list[Voice]:
    """Parse the listing printed by ``say -v ?``."""
    voices = []
    for line in output.splitlines():
        match = _SAY_VOICE_LINE.match(line)
        if match:
            name = match.group("name").strip()
            voices.append(Voice(name=name, locale=match.group("locale"), identifier=name))
    return voices


def parse_espeak_voices(output: str) -> list[Voice]:
    """Parse the table printed by ``espeak --voices``.

    Columns: Pty Language Age/Gender VoiceName File [Other Languages]
    """
    voices = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 5:
            continue
        voices.append(Voice(name=parts[3], locale=parts[1], identifier=parts[4]))
    return voices


class SystemSpeechSynthesizer(SpeechSynthesizer):
    """Speech through ``say`` or ``espeak``.

    Args:
        command: Speech command to run (default: detected for the platform)
    """

    def __init__(self, command: str | None = None):
        self._command = command or detect_speech_command()
        self._process: subprocess.Popen | None = None

    @property
    def command(self) -> str | None:
        return self._command

    @property
    def _is_say(self) -> bool:
        return self._command is not None and self._command.endswith("say")

    def list_voices(self) -> list[Voice]:
        if self._command is None:
            return []

        args = [self._command, "-v", "?"] if self._is_say else [self._command, "--voices"]
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=10, check=True)
        except (OSError, subprocess.SubprocessError) as exc:
            raise SpeechPlaybackError(f"Cannot list voices with {self._command}: {exc}") from exc

        if self._is_say:
            return parse_say_voices(result.stdout)
        return parse_espeak_voices(result.stdout)

    def build_command(
        self,
        text: str,
        voice: Voice | None = None,
        rate: float = 1.0,
        pitch: float = 1.0,
    ) -> list[str]:
        """Command line that speaks ``text`` with the given settings."""
        if self._command is None:
            raise SpeechPlaybackError("No speech command available on this system")

        args = [self._command, "-r" if self._is_say else "-s", str(round(BASE_WORDS_PER_MINUTE * rate))]
        if not self._is_say:
            # say has no pitch option
            args += ["-p", str(round(BASE_ESPEAK_PITCH * pitch))]
        if voice is not None:
            args += ["-v", voice.identifier or voice.name]
        args.append(text)
        return args

    def speak(
        self,
        text: str,
        voice: Voice | None = None,
        rate: float = 1.0,
        pitch: float = 1.0,
    ) -> None:
        args = self.build_command(text, voice=voice, rate=rate, pitch=pitch)
        try:
            self._process = subprocess.Popen(args, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            raise SpeechPlaybackError(f"Cannot start {self._command}: {exc}") from exc

    def cancel(self) -> None:
        if self._process is not None and self._process.poll() is None:
            self._process.terminate()
            try:
                self._process.wait(timeout=1)
            except subprocess.TimeoutExpired:
                self._process.kill()
                self._process.wait()
        self._process = None

    @property
    def is_speaking(self) -> bool:
        return self._process is not None and self._process.poll() is None


class MutedSynthesizer(SpeechSynthesizer):
    """Synthesizer that never makes a sound. Used for --mute."""

    def list_voices(self) -> list[Voice]:
        return []

    def speak(
        self,
        text: str,
        voice: Voice | None = None,
        rate: float = 1.0,
        pitch: float = 1.0,
    ) -> None:
        logger.debug("Muted playback of %d chars", len(text))

    def cancel(self) -> None:
        pass

    @property
    def is_speaking(self) -> bool:
        return False
