"""Unit tests for the voice adapter and speech engines."""
import asyncio
import subprocess
import threading
from unittest.mock import Mock

import pytest

from mkai.voice import (
    CaptureState,
    MutedSynthesizer,
    SpeechCaptureError,
    SpeechPlaybackError,
    SpeechRecognizer,
    SpeechSynthesizer,
    SystemSpeechSynthesizer,
    Transcript,
    Voice,
    VoiceIO,
    select_voice,
)
from mkai.voice.synthesizer import parse_espeak_voices, parse_say_voices


class ScriptedRecognizer(SpeechRecognizer):
    """Recognizer that returns a fixed result, optionally after a gate opens."""

    def __init__(self, result=None, error: Exception | None = None, gate: threading.Event | None = None):
        self.result = result
        self.error = error
        self.gate = gate
        self.locales: list[str] = []

    def listen_once(self, locale: str):
        self.locales.append(locale)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.result


class RecordingSynthesizer(SpeechSynthesizer):

    def __init__(self, voices=None, fail: bool = False):
        self.voices = voices or []
        self.fail = fail
        self.events: list[tuple] = []

    def list_voices(self):
        return self.voices

    def speak(self, text, voice=None, rate=1.0, pitch=1.0):
        if self.fail:
            raise SpeechPlaybackError("no engine")
        self.events.append(("speak", text, voice, rate, pitch))

    def cancel(self):
        self.events.append(("cancel",))

    @property
    def is_speaking(self):
        return False


class TestSelectVoice:

    def test_prefers_first_quality_or_locale_match(self):
        voices = [
            Voice(name="Thomas", locale="fr_FR"),
            Voice(name="Samantha", locale="en_US"),
            Voice(name="Google UK English", locale="en-GB"),
        ]
        assert select_voice(voices, "en-US").name == "Samantha"

    def test_quality_tag_in_other_language_counts(self):
        voices = [Voice(name="Google Deutsch", locale="de-DE"), Voice(name="Alex", locale="en_US")]
        assert select_voice(voices, "en-US").name == "Google Deutsch"

    def test_falls_back_to_engine_default(self):
        assert select_voice([Voice(name="Thomas", locale="fr_FR")], "en-US") is None
        assert select_voice([], "en-US") is None


class TestVoiceListings:

    def test_parse_say_voices(self):
        output = (
            "Alex                en_US    # Most people recognize me by my voice.\n"
            "Amélie              fr_CA    # Bonjour, je m'appelle Amélie.\n"
            "Lekha (Enhanced)    hi_IN    # नमस्ते, मेरा नाम लेखा है।\n"
        )
        voices = parse_say_voices(output)

        assert [(v.name, v.locale) for v in voices] == [
            ("Alex", "en_US"),
            ("Amélie", "fr_CA"),
            ("Lekha (Enhanced)", "hi_IN"),
        ]
        assert voices[2].quality_tagged

    def test_parse_espeak_voices(self):
        output = (
            "Pty Language       Age/Gender VoiceName          File                 Other Languages\n"
            " 5  af              --/M      Afrikaans          gmw/af\n"
            " 2  en-us           --/M      English_(America)  gmw/en-US            (en 3)\n"
            " 5  hi              --/M      Hindi              inc/hi\n"
        )
        voices = parse_espeak_voices(output)

        assert [v.identifier for v in voices] == ["gmw/af", "gmw/en-US", "inc/hi"]
        assert voices[1].language == "en"


class TestSystemSpeechSynthesizer:

    def test_say_command_line(self):
        synth = SystemSpeechSynthesizer(command="say")
        args = synth.build_command("hello", voice=Voice(name="Alex", locale="en_US", identifier="Alex"))
        assert args == ["say", "-r", "175", "-v", "Alex", "hello"]

    def test_espeak_command_line(self):
        synth = SystemSpeechSynthesizer(command="espeak-ng")
        args = synth.build_command("hello", rate=1.0, pitch=1.0)
        assert args == ["espeak-ng", "-s", "175", "-p", "50", "hello"]

    def test_missing_engine(self, monkeypatch):
        monkeypatch.setattr("mkai.voice.synthesizer.detect_speech_command", lambda: None)
        synth = SystemSpeechSynthesizer()

        assert synth.list_voices() == []
        with pytest.raises(SpeechPlaybackError):
            synth.speak("hello")

    def test_cancel_when_idle_is_noop(self):
        synth = SystemSpeechSynthesizer(command="say")
        synth.cancel()
        assert not synth.is_speaking

    def test_cancel_reaps_terminated_process(self):
        synth = SystemSpeechSynthesizer(command="say")
        process = Mock()
        process.poll.return_value = None
        synth._process = process

        synth.cancel()

        process.terminate.assert_called_once()
        process.wait.assert_called_once_with(timeout=1)
        assert not synth.is_speaking

    def test_cancel_kills_process_that_ignores_terminate(self):
        synth = SystemSpeechSynthesizer(command="espeak")
        process = Mock()
        process.poll.return_value = None
        process.wait.side_effect = [subprocess.TimeoutExpired("espeak", 1), 0]
        synth._process = process

        synth.cancel()

        process.kill.assert_called_once()
        assert process.wait.call_count == 2


class TestPlayback:

    def test_speak_cancels_then_speaks_with_selected_voice(self):
        voice = Voice(name="Samantha", locale="en_US")
        synth = RecordingSynthesizer(voices=[Voice(name="Thomas", locale="fr_FR"), voice])
        voice_io = VoiceIO(recognizer=None, synthesizer=synth, locale="en-US")

        voice_io.speak("Hi there!")

        assert synth.events == [("cancel",), ("speak", "Hi there!", voice, 1.0, 1.0)]

    def test_empty_text_is_not_spoken(self):
        synth = RecordingSynthesizer()
        VoiceIO(recognizer=None, synthesizer=synth).speak("")
        assert synth.events == []

    def test_playback_failure_is_absorbed(self):
        synth = RecordingSynthesizer(fail=True)
        VoiceIO(recognizer=None, synthesizer=synth).speak("hello")
        assert synth.events == [("cancel",)]

    def test_muted_synthesizer_is_silent(self):
        synth = MutedSynthesizer()
        VoiceIO(recognizer=None, synthesizer=synth).speak("hello")
        assert not synth.is_speaking

    def test_cancel_playback_stops_synthesizer(self):
        synth = RecordingSynthesizer()
        VoiceIO(recognizer=None, synthesizer=synth).cancel_playback()
        assert synth.events == [("cancel",)]


class TestCapture:

    @pytest.mark.asyncio
    async def test_returns_transcript_and_deactivates(self):
        transcript = Transcript(text="hello", locale="en-US")
        recognizer = ScriptedRecognizer(result=transcript)
        voice_io = VoiceIO(recognizer=recognizer, synthesizer=MutedSynthesizer(), locale="en-US")

        assert await voice_io.capture() == transcript
        assert recognizer.locales == ["en-US"]
        assert voice_io.capture_state == CaptureState.INACTIVE

    @pytest.mark.asyncio
    async def test_error_returns_none(self):
        recognizer = ScriptedRecognizer(error=SpeechCaptureError("no microphone"))
        voice_io = VoiceIO(recognizer=recognizer, synthesizer=MutedSynthesizer())

        assert await voice_io.capture() is None
        assert not voice_io.is_capturing

    @pytest.mark.asyncio
    async def test_blank_transcript_returns_none(self):
        recognizer = ScriptedRecognizer(result=Transcript(text="  ", locale="en-US"))
        voice_io = VoiceIO(recognizer=recognizer, synthesizer=MutedSynthesizer())
        assert await voice_io.capture() is None

    @pytest.mark.asyncio
    async def test_without_recognizer_returns_none(self):
        voice_io = VoiceIO(recognizer=None, synthesizer=MutedSynthesizer())
        assert not voice_io.can_capture
        assert await voice_io.capture() is None

    @pytest.mark.asyncio
    async def test_second_capture_refused_while_first_runs(self):
        gate = threading.Event()
        recognizer = ScriptedRecognizer(result=Transcript(text="hello", locale="en-US"), gate=gate)
        voice_io = VoiceIO(recognizer=recognizer, synthesizer=MutedSynthesizer())

        first = asyncio.create_task(voice_io.capture())
        while not recognizer.locales:
            await asyncio.sleep(0.01)

        assert await voice_io.capture() is None
        gate.set()
        assert (await first).text == "hello"
        assert len(recognizer.locales) == 1

    @pytest.mark.asyncio
    async def test_stopped_session_holds_microphone_until_recognizer_returns(self):
        gate = threading.Event()
        recognizer = ScriptedRecognizer(result=Transcript(text="late", locale="en-US"), gate=gate)
        voice_io = VoiceIO(recognizer=recognizer, synthesizer=MutedSynthesizer())

        first = asyncio.create_task(voice_io.capture())
        while not recognizer.locales:
            await asyncio.sleep(0.01)

        voice_io.stop_capture()
        assert await first is None

        # The recognizer thread is still listening
        assert voice_io.capture_state == CaptureState.CAPTURING
        assert await voice_io.capture() is None
        assert len(recognizer.locales) == 1

        gate.set()
        while voice_io.is_capturing:
            await asyncio.sleep(0.01)

        recognizer.gate = None
        assert (await voice_io.capture()).text == "late"
        assert len(recognizer.locales) == 2
