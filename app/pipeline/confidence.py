from typing import Callable, Dict

from app.models import ExtractionResult

ConfidenceStrategy = Callable[[str, ExtractionResult], float]

SATURATING_CAP = 0.98
TIERED_CAP = 0.95


def saturating_confidence(text: str, extraction: ExtractionResult) -> float:
    score = 0.85 + 0.02 * extraction.term_count + 0.001 * len(text)
    return round(min(score, SATURATING_CAP), 3)


def tiered_confidence(text: str, extraction: ExtractionResult) -> float:
    score = 0.5 + min(0.05 * extraction.term_count, 0.3)
    if len(text) > 100:
        score += 0.1
    if len(text) > 300:
        score += 0.1
    return round(min(score, TIERED_CAP), 3)


STRATEGIES: Dict[str, ConfidenceStrategy] = {
    "saturating": saturating_confidence,
    "tiered": tiered_confidence,
}

DEFAULT_STRATEGY = "saturating"


def get_strategy(name: str) -> ConfidenceStrategy:
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown scoring strategy {name!r}, expected one of {sorted(STRATEGIES)}"
        )
