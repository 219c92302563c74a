from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.pipeline.scribe import Scribe, get_scribe
from app.storage.session_registry import list_sessions

router = APIRouter(prefix="/api", tags=["sessions"])


class DemoTranscriptionRequest(BaseModel):
    text: str


@router.get("/health")
def health():
    return {
        "status": "healthy",
        "activeSessions": len(list_sessions()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/sessions")
def active_sessions():
    return {"sessions": [s.summary() for s in list_sessions()]}


@router.post("/demo-transcription")
def demo_transcription(
    body: DemoTranscriptionRequest,
    scribe: Scribe = Depends(get_scribe),
):
    """
    Run the whole pipeline on a pasted transcript without opening a session.
    """
    extraction, note = scribe.analyze(body.text)
    return {
        "originalText": body.text,
        "medicalNotes": scribe.medical_notes(body.text, extraction),
        "soapNotes": note.to_dict(),
    }
