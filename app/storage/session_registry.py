from typing import Dict, List
from app.core.session_models import DictationSession
from app.exceptions import SessionNotFound

_sessions: Dict[str, DictationSession] = {}

def register_session(session: DictationSession):
    _sessions[session.session_id] = session

def get_session(session_id: str) -> DictationSession:
    try:
        return _sessions[session_id]
    except KeyError:
        raise SessionNotFound(f"Session not found: {session_id}")

def remove_session(session_id: str):
    _sessions.pop(session_id, None)

def list_sessions() -> List[DictationSession]:
    return list(_sessions.values())

def sessions_for_socket(socket_id: str) -> List[DictationSession]:
    return [s for s in _sessions.values() if s.socket_id == socket_id]

def clear_sessions():
    _sessions.clear()
