import os
from dotenv import load_dotenv

load_dotenv()


def _float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


class Settings:
    ENV = os.getenv("ENV", "dev")
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if o.strip()
    ]

    # confidence heuristic: "saturating" or "tiered"
    SCORING_STRATEGY = os.getenv("SCORING_STRATEGY", "saturating")

    # browser | demo | vosk | unimplemented
    TRANSCRIPTION_SOURCE = os.getenv("TRANSCRIPTION_SOURCE", "browser")
    DEMO_DELAY_MIN = _float("DEMO_DELAY_MIN", 0.5)
    DEMO_DELAY_MAX = _float("DEMO_DELAY_MAX", 1.5)
    VOSK_MODEL_PATH = os.getenv("VOSK_MODEL_PATH", "models/vosk/en/vosk-model-small-en-us-0.15")
    VOSK_SAMPLE_RATE = int(os.getenv("VOSK_SAMPLE_RATE", "16000"))

settings = Settings()
