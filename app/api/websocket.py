from datetime import datetime, timezone
from typing import Any, Dict, Optional
import json
import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.asr.base import TranscriptionSource
from app.asr.sources import create_source
from app.core.session_models import DictationSession, TranscriptChunk
from app.exceptions import DictationError, InvalidEventError, SessionNotFound
from app.pipeline.scribe import Scribe, get_scribe
from app.storage.session_registry import (
    get_session,
    register_session,
    remove_session,
    sessions_for_socket,
)

logger = logging.getLogger("mediscribe.ws")

# --------------------
# FRAME PARSING
# --------------------

def parse_frame(msg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a raw websocket message into an event dict.

    Binary frames are audio for the active session; text frames are JSON
    with a "type" field. A bare "stop" is accepted as end-session.
    """
    if msg.get("bytes") is not None:
        return {"type": "audio", "payload": msg["bytes"]}

    raw = (msg.get("text") or "").strip()
    if raw == "stop":
        return {"type": "end-session"}

    try:
        event = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidEventError("Frames must be JSON objects")

    if not isinstance(event, dict) or not isinstance(event.get("type"), str):
        raise InvalidEventError("Event is missing a 'type'")
    return event


# --------------------
# CONNECTION
# --------------------

class DictationConnection:
    """Per-socket state: the live session and its transcription source."""

    def __init__(self, ws: WebSocket, scribe: Scribe):
        self.ws = ws
        self.scribe = scribe
        self.socket_id = uuid.uuid4().hex
        self.session: Optional[DictationSession] = None
        self.source: Optional[TranscriptionSource] = None

    async def send(self, event_type: str, **data):
        await self.ws.send_json({"type": event_type, **data})

    def _session_for(self, event: Dict[str, Any]) -> DictationSession:
        session_id = event.get("sessionId")
        if session_id is not None and not isinstance(session_id, str):
            raise InvalidEventError("sessionId must be a string")
        if session_id:
            return get_session(session_id)
        if self.session is None:
            raise SessionNotFound("No active session found")
        return self.session

    async def dispatch(self, event: Dict[str, Any]):
        handlers = {
            "start-session": self.start_session,
            "transcript-append": self.append,
            "audio": self.append,
            "note-request": self.note_request,
            "end-session": self.end_session,
        }
        handler = handlers.get(event["type"])
        if handler is None:
            raise InvalidEventError(f"Unknown event type {event['type']!r}")
        await handler(event)

    async def start_session(self, event: Dict[str, Any]):
        source_name = event.get("source")
        if source_name is not None and not isinstance(source_name, str):
            raise InvalidEventError("source must be a string")
        source = create_source(source_name)

        if self.session is not None:
            remove_session(self.session.session_id)

        now = datetime.now(timezone.utc)
        session = DictationSession(
            session_id=now.strftime("%Y-%m-%d_%H-%M-%S_%f"),
            doctor_name=str(event.get("doctorName") or "Unknown"),
            patient_id=str(event.get("patientId") or "Unknown"),
            source_name=source.name,
            started_at=now,
            socket_id=self.socket_id,
        )
        register_session(session)
        self.session = session
        self.source = source

        logger.info(
            "Session started: %s for Dr. %s (source=%s)",
            session.session_id,
            session.doctor_name,
            source.name,
        )
        await self.send("session-started", sessionId=session.session_id, source=source.name)

    async def append(self, event: Dict[str, Any]):
        session = self._session_for(event)
        if self.source is None or session is not self.session:
            raise SessionNotFound("No active session found")

        payload = event.get("payload") if event["type"] == "audio" else event
        result = await self.source.transcribe(payload)
        if result is None:
            return

        if result.partial:
            await self.send("partial", text=result.text)
            return

        async with session.lock:
            transcript = session.append(
                TranscriptChunk(
                    text=result.text,
                    timestamp=result.timestamp,
                    confidence=result.confidence,
                )
            )
            extraction, note = self.scribe.analyze(transcript)
            session.medical_notes = self.scribe.medical_notes(transcript, extraction)
            session.soap_note = note
            medical_notes = session.medical_notes

        await self.send(
            "transcription-update",
            text=result.text,
            fullTranscription=transcript,
            medicalNotes=medical_notes,
            medicalTermsDetected=list(result.medical_terms_detected),
            confidence=result.confidence,
        )

    async def note_request(self, event: Dict[str, Any]):
        session = self._session_for(event)

        async with session.lock:
            _, note = self.scribe.analyze(session.transcript)
            session.soap_note = note

        await self.send(
            "soap-notes-generated",
            sessionId=session.session_id,
            soapNotes=note.to_dict(),
            session=session.summary(),
        )

    async def end_session(self, event: Dict[str, Any]):
        session = self._session_for(event)

        async with session.lock:
            session.ended_at = datetime.now(timezone.utc)
            summary = session.medical_notes

        remove_session(session.session_id)
        if session is self.session:
            self.session = None
            self.source = None

        logger.info("Session ended: %s", session.session_id)
        await self.send(
            "session-ended",
            sessionId=session.session_id,
            duration=session.duration_ms(),
            summary=summary,
        )

    def close(self):
        for session in sessions_for_socket(self.socket_id):
            remove_session(session.session_id)
        self.session = None
        self.source = None


# --------------------
# ROUTER
# --------------------

ws_router = APIRouter()

@ws_router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, scribe: Scribe = Depends(get_scribe)):
    await ws.accept()
    conn = DictationConnection(ws, scribe)
    logger.info("Doctor connected: %s", conn.socket_id)

    try:
        while True:
            msg = await ws.receive()
            if msg["type"] == "websocket.disconnect":
                break

            try:
                await conn.dispatch(parse_frame(msg))
            except DictationError as e:
                # transcript is untouched, the client may keep dictating
                logger.warning("Event rejected on %s: %s", conn.socket_id, e)
                await conn.send("error", message=str(e))

    except WebSocketDisconnect:
        pass
    finally:
        conn.close()
        logger.info("Doctor disconnected: %s", conn.socket_id)
