# =============================================================================
# core/player/narration.py - Speech Narration Commands
# =============================================================================
# The browser does the actual text-to-speech. The server decides WHAT to say
# and WHEN, and sends the client small speech commands:
#
#   {"action": "speak", "text": "Breathe in", "voice": "Samantha", "rate": 0.85, ...}
#   {"action": "pause"} / {"action": "resume"} / {"action": "stop"}
#
# speak always cancels whatever is still being spoken, so a phase change
# never queues behind a long meditation script.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Callable, Iterable

from app.config import settings

logger = logging.getLogger(__name__)

# Voice names that sound calm in the common browser engines
PREFERRED_VOICE_NAMES = ("Samantha", "Karen", "Daniel", "Google")

# Gap between utterances in speak_sequence
SEQUENCE_DELAY_MS = 500


@dataclass(frozen=True)
class Voice:
    """A speech voice available on the client."""
    name: str
    lang: str = ""


@dataclass
class SpeechSettings:
    """Utterance parameters. Rate defaults below 1 for a slower, calmer pace."""
    voice: str | None = None
    rate: float = 0.85
    pitch: float = 1.0
    volume: float = 1.0

    @classmethod
    def from_settings(cls) -> "SpeechSettings":
        return cls(
            rate=settings.SPEECH_RATE,
            pitch=settings.SPEECH_PITCH,
            volume=settings.SPEECH_VOLUME,
        )


def choose_voice(voices: Iterable[Voice]) -> Voice | None:
    """
    Pick the narration voice.

    Preference order: an English voice whose name contains one of
    PREFERRED_VOICE_NAMES, then any English voice, then the first voice.

    Example:
        choose_voice([Voice("Alex", "en-US"), Voice("Samantha", "en-US")])
        # -> Voice("Samantha", "en-US")
    """
    voices = list(voices)
    if not voices:
        return None

    english = [voice for voice in voices if voice.lang.startswith("en")]
    for voice in english:
        if any(name in voice.name for name in PREFERRED_VOICE_NAMES):
            return voice

    return english[0] if english else voices[0]


class Narrator:
    """
    Turns player narration into speech commands.

    Commands go to `send` when given (the player WebSocket passes one),
    and are always kept in `commands` for inspection.
    """

    def __init__(
        self,
        send: Callable[[dict[str, Any]], None] | None = None,
        speech: SpeechSettings | None = None,
    ):
        self._send = send
        self.speech = speech or SpeechSettings.from_settings()
        self.commands: list[dict[str, Any]] = []
        self.speaking = False
        self.paused = False

    def set_voices(self, voices: Iterable[Voice]) -> Voice | None:
        """Choose a voice from what the client reports it has."""
        voice = choose_voice(voices)
        self.speech.voice = voice.name if voice else None
        logger.debug(f"Narration voice set to {self.speech.voice}")
        return voice

    def _emit(self, command: dict[str, Any]) -> None:
        self.commands.append(command)
        if self._send is not None:
            self._send(command)

    def speak(self, text: str) -> None:
        """Speak text, cancelling any ongoing speech first."""
        if not text:
            return
        self.speaking = True
        self.paused = False
        self._emit({"action": "speak", "text": text, "cancel": True, **asdict(self.speech)})

    def speak_sequence(self, texts: Iterable[str], delay_ms: int = SEQUENCE_DELAY_MS) -> None:
        """Speak several texts one after another with a short gap."""
        texts = [text for text in texts if text]
        if not texts:
            return
        self.speaking = True
        self.paused = False
        self._emit({
            "action": "speak_sequence",
            "texts": texts,
            "delay_ms": delay_ms,
            "cancel": True,
            **asdict(self.speech),
        })

    def pause(self) -> None:
        self.paused = True
        self._emit({"action": "pause"})

    def resume(self) -> None:
        self.paused = False
        self._emit({"action": "resume"})

    def stop(self) -> None:
        self.speaking = False
        self.paused = False
        self._emit({"action": "stop"})
