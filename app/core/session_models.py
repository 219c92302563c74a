from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import asyncio

from app.models import SoapNote


@dataclass(frozen=True)
class TranscriptChunk:
    text: str
    timestamp: str
    confidence: float


@dataclass
class DictationSession:
    session_id: str
    doctor_name: str
    patient_id: str
    source_name: str
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    chunks: List[TranscriptChunk] = field(default_factory=list)
    medical_notes: Dict[str, Any] = field(default_factory=dict)
    soap_note: Optional[SoapNote] = None
    ended_at: Optional[datetime] = None
    socket_id: Optional[str] = None

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def transcript(self) -> str:
        return " ".join(c.text for c in self.chunks)

    def append(self, chunk: TranscriptChunk) -> str:
        self.chunks.append(chunk)
        return self.transcript

    def duration_ms(self, now: Optional[datetime] = None) -> int:
        end = now or self.ended_at or datetime.now(timezone.utc)
        return int((end - self.started_at).total_seconds() * 1000)

    def summary(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "doctorName": self.doctor_name,
            "patientId": self.patient_id,
            "source": self.source_name,
            "startTime": self.started_at.isoformat(),
            "duration": self.duration_ms(),
        }
