import asyncio
import base64
import binascii
import random
from typing import Optional, Sequence, Tuple

from app.asr.base import Payload, TranscriptionResult, TranscriptionSource
from app.asr.vosk_adapter import VoskSttSource
from app.config import settings
from app.exceptions import InvalidEventError, TranscriptionUnavailable, UnknownSourceError

DEMO_TEXTS: Tuple[str, ...] = (
    "Patient reports chest pain that started this morning",
    "Pain is described as sharp and radiating to the left arm",
    "Patient has history of hypertension and diabetes",
    "Blood pressure is 140 over 90",
    "Heart rate is 88 beats per minute",
    "No shortness of breath reported",
    "Patient took aspirin at home before coming in",
    "Recommending EKG and chest X-ray",
    "Will start patient on nitroglycerin if needed",
    "Follow up in cardiology clinic next week",
)


class BrowserSpeechSource(TranscriptionSource):
    """
    Text already recognised by the browser's speech API.

    Accepts either {"text": ...} or {"audioData": <base64 of the UTF-8 text>},
    the latter being what the web client sends for final results.
    """

    name = "browser"

    async def transcribe(self, payload: Payload) -> Optional[TranscriptionResult]:
        if not isinstance(payload, dict):
            raise InvalidEventError("browser source expects JSON text events")

        text = payload.get("text")
        if text is None and payload.get("audioData"):
            if not isinstance(payload["audioData"], str):
                raise InvalidEventError("audioData must be a base64 string")
            try:
                text = base64.b64decode(payload["audioData"], validate=True).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise InvalidEventError("audioData is not base64-encoded UTF-8 text") from e

        if not isinstance(text, str) or not text.strip():
            return None

        confidence = payload.get("confidence", 1.0)
        if not isinstance(confidence, (int, float)):
            confidence = 1.0
        return self.result(text.strip(), float(confidence))


class DemoPlaybackSource(TranscriptionSource):
    """Replays canned dictation, one sentence per tick, with a simulated delay."""

    name = "demo"

    def __init__(
        self,
        texts: Sequence[str] = DEMO_TEXTS,
        delay_range: Tuple[float, float] = (0.5, 1.5),
        rng: Optional[random.Random] = None,
        extractor=None,
    ):
        super().__init__(extractor)
        self.texts = tuple(texts)
        self.delay_range = delay_range
        self.rng = rng or random.Random()
        self.current_index = 0

    async def transcribe(self, payload: Payload) -> Optional[TranscriptionResult]:
        low, high = self.delay_range
        if high > 0:
            await asyncio.sleep(self.rng.uniform(low, high))

        if self.current_index >= len(self.texts):
            return None

        text = self.texts[self.current_index]
        self.current_index += 1
        return self.result(text, 0.85 + self.rng.random() * 0.1)

    def reset(self) -> None:
        self.current_index = 0


class UnimplementedSource(TranscriptionSource):
    name = "unimplemented"

    async def transcribe(self, payload: Payload) -> Optional[TranscriptionResult]:
        raise TranscriptionUnavailable("Real audio processing is not implemented")


SOURCE_NAMES = ("browser", "demo", "vosk", "unimplemented")


def create_source(name: Optional[str] = None) -> TranscriptionSource:
    if name is not None and not isinstance(name, str):
        raise UnknownSourceError(f"Transcription source must be a name, got {name!r}")
    name = (name or settings.TRANSCRIPTION_SOURCE).lower()

    if name == "browser":
        return BrowserSpeechSource()
    if name == "demo":
        return DemoPlaybackSource(
            delay_range=(settings.DEMO_DELAY_MIN, settings.DEMO_DELAY_MAX),
        )
    if name == "vosk":
        return VoskSttSource(settings.VOSK_MODEL_PATH, settings.VOSK_SAMPLE_RATE)
    if name == "unimplemented":
        return UnimplementedSource()

    raise UnknownSourceError(f"Unknown transcription source {name!r}, expected one of {SOURCE_NAMES}")
