class DictationError(Exception):
    pass

class SessionNotFound(DictationError):
    """No live session for the given id or socket."""
    pass

class TranscriptionUnavailable(DictationError):
    """The transcription source cannot produce text (missing model, not implemented)."""
    pass

class UnknownSourceError(DictationError):
    pass

class InvalidEventError(DictationError):
    """Malformed client frame: bad JSON, unknown event type, undecodable payload."""
    pass
