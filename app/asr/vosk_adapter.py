import json
import logging
from functools import lru_cache
from typing import Optional

from vosk import Model, KaldiRecognizer

from app.asr.base import Payload, TranscriptionResult, TranscriptionSource
from app.exceptions import InvalidEventError, TranscriptionUnavailable

logger = logging.getLogger("mediscribe.asr.vosk")


@lru_cache(maxsize=4)
def load_model(model_path: str) -> Model:
    try:
        return Model(model_path)
    except Exception as e:
        logger.error("Failed to load vosk model at %s: %s", model_path, e)
        raise TranscriptionUnavailable(f"Speech model unavailable: {model_path}") from e


class VoskSttSource(TranscriptionSource):
    """Local Kaldi recognizer over raw 16-bit mono PCM frames."""

    name = "vosk"

    def __init__(self, model_path: str, sample_rate: int = 16000, extractor=None):
        super().__init__(extractor)
        self.model_path = model_path
        self.sample_rate = sample_rate
        self._recognizer: Optional[KaldiRecognizer] = None

    def _get_recognizer(self) -> KaldiRecognizer:
        if self._recognizer is None:
            recognizer = KaldiRecognizer(load_model(self.model_path), self.sample_rate)
            recognizer.SetPartialWords(True)
            self._recognizer = recognizer
        return self._recognizer

    async def transcribe(self, payload: Payload) -> Optional[TranscriptionResult]:
        if not isinstance(payload, (bytes, bytearray)):
            raise InvalidEventError("vosk source expects binary audio frames")

        recognizer = self._get_recognizer()

        if recognizer.AcceptWaveform(bytes(payload)):
            result = json.loads(recognizer.Result())
            text = result.get("text", "").strip()
            if text:
                return self.result(text, 1.0)
            return None

        partial = json.loads(recognizer.PartialResult())
        if partial.get("partial"):
            return self.result(partial["partial"], 0.0, partial=True)
        return None

    def reset(self) -> None:
        self._recognizer = None
