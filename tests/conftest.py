from datetime import datetime, timezone

import pytest

from app.pipeline.composer import NoteComposer
from app.pipeline.extractor import TermExtractor
from app.storage.session_registry import clear_sessions

FIXED_NOW = datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_registry():
    clear_sessions()
    yield
    clear_sessions()


@pytest.fixture
def extractor():
    return TermExtractor()


@pytest.fixture
def composer():
    return NoteComposer(clock=lambda: FIXED_NOW)
