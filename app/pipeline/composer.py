import re
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from app.models import (
    Assessment,
    ExtractionResult,
    Objective,
    Plan,
    SoapNote,
    Subjective,
)
from app.pipeline.confidence import DEFAULT_STRATEGY, ConfidenceStrategy, get_strategy
from app.pipeline.rules import (
    DEFAULT_RULEBOOK,
    NoteContext,
    RuleBook,
    all_matches,
    first_match,
)

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NoteComposer:
    """
    Turns a transcript and its extraction into a SOAP note.

    Every field comes from an ordered rule list in the RuleBook; the first
    matching rule wins (all matching rules for the physical exam) and each
    field has a placeholder when nothing matches.

    Placeholders do not pin the confidence: under the default "saturating"
    strategy a transcript with no matches still scores
    0.85 + 0.001 * len(text), e.g. 0.876 for "The weather is nice today.".
    Only the empty transcript scores exactly 0.85.
    """

    def __init__(
        self,
        rulebook: RuleBook = DEFAULT_RULEBOOK,
        scoring: Union[str, ConfidenceStrategy] = DEFAULT_STRATEGY,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.rulebook = rulebook
        self.scoring = get_strategy(scoring) if isinstance(scoring, str) else scoring
        self.clock = clock

    def compose(self, text: Optional[str], extraction: ExtractionResult) -> SoapNote:
        text = text or ""
        ctx = NoteContext.build(text, extraction)
        book = self.rulebook
        empty = book.placeholders

        complaint, hpi = first_match(
            book.complaint,
            ctx,
            (empty.chief_complaint, empty.history_of_present_illness),
        )

        findings = all_matches(book.exam, ctx)
        exam = ". ".join(findings) + "." if findings else empty.physical_examination

        return SoapNote(
            subjective=Subjective(
                chief_complaint=complaint,
                history_of_present_illness=hpi,
                past_medical_history=self._history(text) or empty.past_medical_history,
                medications=", ".join(extraction.medications) or empty.medications,
            ),
            objective=Objective(
                physical_examination=exam,
                vital_signs=dict(extraction.vitals),
            ),
            assessment=Assessment(
                primary_diagnosis=first_match(book.assessment, ctx, empty.primary_diagnosis),
                secondary_diagnoses=", ".join(extraction.conditions) or empty.secondary_diagnoses,
            ),
            plan=Plan(
                immediate_actions=first_match(book.plan, ctx, empty.immediate_actions),
                procedures=", ".join(extraction.procedures) or empty.procedures,
            ),
            generated_at=self.clock().isoformat(),
            confidence=self.scoring(text, extraction),
            medical_terms_found=extraction.all_terms(),
        )

    def _history(self, text: str) -> str:
        keywords = self.rulebook.history_keywords
        sentences = [s.strip() for s in SENTENCE_SPLIT_RE.split(text)]
        hits = [s for s in sentences if s and any(k in s.lower() for k in keywords)]
        return ". ".join(hits)
