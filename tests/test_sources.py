import asyncio
import base64
import random

import pytest

from app.asr.sources import (
    DEMO_TEXTS,
    BrowserSpeechSource,
    DemoPlaybackSource,
    UnimplementedSource,
    create_source,
)
from app.asr.vosk_adapter import VoskSttSource
from app.exceptions import InvalidEventError, TranscriptionUnavailable, UnknownSourceError


def run(coro):
    return asyncio.run(coro)


def test_browser_plain_text():
    result = run(BrowserSpeechSource().transcribe({"text": "  Patient reports chest pain "}))
    assert result.text == "Patient reports chest pain"
    assert result.partial is False
    assert "chest pain" in result.medical_terms_detected


def test_browser_base64_text():
    encoded = base64.b64encode("Heart rate is 88 bpm".encode("utf-8")).decode("ascii")
    result = run(BrowserSpeechSource().transcribe({"audioData": encoded, "isFinal": True}))
    assert result.text == "Heart rate is 88 bpm"


def test_browser_rejects_bad_payloads():
    source = BrowserSpeechSource()
    with pytest.raises(InvalidEventError):
        run(source.transcribe({"audioData": "%%% not base64 %%%"}))
    with pytest.raises(InvalidEventError):
        run(source.transcribe(b"\x00\x01"))
    with pytest.raises(InvalidEventError):
        run(source.transcribe({"audioData": 12345}))


def test_browser_blank_text_is_ignored():
    assert run(BrowserSpeechSource().transcribe({"text": "   "})) is None
    assert run(BrowserSpeechSource().transcribe({})) is None


def test_demo_playback_in_order_then_exhausted():
    source = DemoPlaybackSource(texts=("one", "two"), delay_range=(0, 0), rng=random.Random(7))

    first = run(source.transcribe({}))
    second = run(source.transcribe({}))
    assert [first.text, second.text] == ["one", "two"]
    assert 0.85 <= first.confidence < 0.95
    assert run(source.transcribe({})) is None

    source.reset()
    assert run(source.transcribe({})).text == "one"


def test_demo_default_script():
    source = DemoPlaybackSource(delay_range=(0, 0))
    texts = [run(source.transcribe({})).text for _ in DEMO_TEXTS]
    assert texts == list(DEMO_TEXTS)


def test_unimplemented_source_raises():
    with pytest.raises(TranscriptionUnavailable):
        run(UnimplementedSource().transcribe(b"audio"))


def test_vosk_source_requires_binary_frames():
    source = VoskSttSource("does/not/exist")
    with pytest.raises(InvalidEventError):
        run(source.transcribe({"text": "hello"}))


def test_vosk_source_missing_model():
    source = VoskSttSource("does/not/exist")
    with pytest.raises(TranscriptionUnavailable):
        run(source.transcribe(b"\x00\x00" * 1600))


def test_create_source():
    assert create_source("browser").name == "browser"
    assert create_source("DEMO").name == "demo"
    assert create_source("vosk").name == "vosk"
    assert create_source("unimplemented").name == "unimplemented"
    with pytest.raises(UnknownSourceError):
        create_source("whisper")
    with pytest.raises(UnknownSourceError):
        create_source(5)
