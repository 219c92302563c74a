from typing import Optional, Tuple

from app.models import ExtractionResult, Vocabulary
from app.pipeline.vitals import DEFAULT_VITAL_PATTERNS, VitalPattern, extract_vitals
from app.pipeline.vocabulary import DEFAULT_VOCABULARY


def _phrases_in(lowered: str, phrases: Tuple[str, ...]) -> Tuple[str, ...]:
    found = []
    for phrase in phrases:
        # plain containment, "pain" also matches "painful"
        if phrase in lowered and phrase not in found:
            found.append(phrase)
    return tuple(found)


class TermExtractor:
    def __init__(
        self,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        vital_patterns: Tuple[VitalPattern, ...] = DEFAULT_VITAL_PATTERNS,
    ):
        self.vocabulary = vocabulary
        self.vital_patterns = vital_patterns

    def extract(self, text: Optional[str]) -> ExtractionResult:
        """
        Find vocabulary phrases and vital-sign readings in a transcript.

        Never raises: unmatched categories are empty and missing vitals are
        simply absent from the map.
        """
        text = text or ""
        lowered = text.lower()
        vocab = self.vocabulary

        return ExtractionResult(
            symptoms=_phrases_in(lowered, vocab.symptom),
            conditions=_phrases_in(lowered, vocab.condition),
            medications=_phrases_in(lowered, vocab.medication),
            procedures=_phrases_in(lowered, vocab.procedure),
            vital_labels=_phrases_in(lowered, vocab.vital_sign_label),
            vitals=extract_vitals(text, self.vital_patterns),
        )
