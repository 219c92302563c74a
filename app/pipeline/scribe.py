from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from app.config import settings
from app.models import ExtractionResult, SoapNote
from app.pipeline.composer import NoteComposer
from app.pipeline.extractor import TermExtractor


class Scribe:
    """Extractor and composer wired together for a whole transcript."""

    def __init__(
        self,
        extractor: Optional[TermExtractor] = None,
        composer: Optional[NoteComposer] = None,
    ):
        self.extractor = extractor or TermExtractor()
        self.composer = composer or NoteComposer()

    def analyze(self, text: str) -> Tuple[ExtractionResult, SoapNote]:
        extraction = self.extractor.extract(text)
        return extraction, self.composer.compose(text, extraction)

    def medical_notes(self, text: str, extraction: Optional[ExtractionResult] = None) -> Dict[str, Any]:
        extraction = extraction or self.extractor.extract(text)
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "rawTranscription": text,
            "extractedData": extraction.to_dict(),
        }


@lru_cache(maxsize=1)
def get_scribe() -> Scribe:
    return Scribe(composer=NoteComposer(scoring=settings.SCORING_STRATEGY))
