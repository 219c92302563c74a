from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from app.core.session_models import DictationSession
from app.exceptions import SessionNotFound
from app.models import SoapNote
from app.pipeline.scribe import Scribe, get_scribe
from app.storage.report_pdf import render_soap_pdf
from app.storage.session_registry import get_session

router = APIRouter(prefix="/sessions", tags=["notes"])


async def _current_note(session_id: str, scribe: Scribe) -> Tuple[DictationSession, SoapNote]:
    try:
        session = get_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")

    async with session.lock:
        _, note = scribe.analyze(session.transcript)
        session.soap_note = note

    return session, note


@router.get("/{session_id}/soap-note")
async def soap_note(session_id: str, scribe: Scribe = Depends(get_scribe)):
    session, note = await _current_note(session_id, scribe)
    return {"sessionId": session.session_id, "soapNotes": note.to_dict()}


@router.get("/{session_id}/soap-note.pdf")
async def soap_note_pdf(session_id: str, scribe: Scribe = Depends(get_scribe)):
    session, note = await _current_note(session_id, scribe)
    pdf = render_soap_pdf(note, session)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{session.session_id}_soap.pdf"'},
    )
