from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from app.pipeline.extractor import TermExtractor

Payload = Union[bytes, Dict[str, Any]]


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    confidence: float
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    medical_terms_detected: Tuple[str, ...] = ()
    partial: bool = False


class TranscriptionSource(ABC):
    """
    Where session text comes from. One instance per session, since sources
    like the demo playback and the vosk recognizer keep per-stream state.
    """

    name = "base"

    def __init__(self, extractor: Optional[TermExtractor] = None):
        self.extractor = extractor or TermExtractor()

    @abstractmethod
    async def transcribe(self, payload: Payload) -> Optional[TranscriptionResult]:
        """Return recognised text for one client frame, or None if there is nothing yet."""

    def reset(self) -> None:
        pass

    def detect_terms(self, text: str) -> Tuple[str, ...]:
        return self.extractor.extract(text).all_terms()

    def result(self, text: str, confidence: float, partial: bool = False) -> TranscriptionResult:
        return TranscriptionResult(
            text=text,
            confidence=confidence,
            medical_terms_detected=() if partial else self.detect_terms(text),
            partial=partial,
        )
