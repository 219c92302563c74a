import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.websocket import ws_router
from app.api.sessions import router as sessions_router
from app.api.notes import router as notes_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("mediscribe")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "MediScribe server started (env=%s, source=%s, scoring=%s)",
        settings.ENV,
        settings.TRANSCRIPTION_SOURCE,
        settings.SCORING_STRATEGY,
    )
    yield
    logger.info("MediScribe server stopped")


app = FastAPI(title="MediScribe", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)
app.include_router(sessions_router)
app.include_router(notes_router)


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
    )
