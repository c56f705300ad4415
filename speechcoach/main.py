import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from speechcoach.api.v1.router import router as v1_router
from speechcoach.core.config import settings
from speechcoach.core.errors import SpeechCoachError
from speechcoach.core.logging import setup_logging

# DB (Base / engine)
from speechcoach.db.base import Base
from speechcoach.db.session import engine

# register models on Base.metadata
import speechcoach.db.models  # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Speech Coach API",
    version="0.1.0",
    description="Upload practice recordings, get them analysed and graded.",
)

origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix="/api/v1")


@app.exception_handler(SpeechCoachError)
async def handle_speech_coach_error(request: Request, exc: SpeechCoachError):
    if exc.status_code >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.on_event("startup")
def on_startup():
    # development convenience; deployments run alembic migrations
    Base.metadata.create_all(bind=engine)


@app.get("/health")
def health():
    return {"ok": True}
