import pytest

from app.models import ExtractionResult
from app.pipeline.composer import NoteComposer
from app.pipeline.confidence import (
    SATURATING_CAP,
    TIERED_CAP,
    get_strategy,
    saturating_confidence,
    tiered_confidence,
)


def _extraction(n_terms):
    return ExtractionResult(symptoms=tuple(f"term{i}" for i in range(n_terms)))


def test_saturating_formula():
    assert saturating_confidence("", _extraction(0)) == 0.85
    assert saturating_confidence("x" * 40, _extraction(2)) == pytest.approx(0.85 + 0.04 + 0.04)


def test_saturating_cap():
    assert saturating_confidence("x" * 5000, _extraction(20)) == SATURATING_CAP


def test_tiered_formula():
    assert tiered_confidence("", _extraction(0)) == 0.5
    assert tiered_confidence("", _extraction(3)) == pytest.approx(0.65)
    # term bonus saturates at 0.3
    assert tiered_confidence("", _extraction(12)) == pytest.approx(0.8)
    assert tiered_confidence("x" * 101, _extraction(0)) == pytest.approx(0.6)
    assert tiered_confidence("x" * 301, _extraction(0)) == pytest.approx(0.7)


def test_tiered_cap():
    assert tiered_confidence("x" * 400, _extraction(10)) == TIERED_CAP


@pytest.mark.parametrize("strategy", [saturating_confidence, tiered_confidence])
def test_monotonic_in_terms_and_length(strategy):
    scores = [strategy("", _extraction(terms)) for terms in range(0, 25)]
    assert scores == sorted(scores)

    scores = [strategy("x" * length, _extraction(2)) for length in range(0, 600, 7)]
    assert scores == sorted(scores)


def test_get_strategy():
    assert get_strategy("saturating") is saturating_confidence
    assert get_strategy("tiered") is tiered_confidence
    with pytest.raises(ValueError):
        get_strategy("bayesian")


def test_composer_rejects_unknown_strategy():
    with pytest.raises(ValueError):
        NoteComposer(scoring="nope")


def test_composer_accepts_callable():
    composer = NoteComposer(scoring=lambda text, extraction: 0.42)
    assert composer.compose("chest pain", ExtractionResult()).confidence == 0.42
