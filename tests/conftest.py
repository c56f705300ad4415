import copy
import json
import os

import pytest

# before any speechcoach import: the app engine must never touch a file DB
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from speechcoach.api.deps import get_oracle
from speechcoach.crud.project import create_project
from speechcoach.crud.upload import create_upload
from speechcoach.db.base import Base
from speechcoach.db.session import get_db
from speechcoach.main import app
from speechcoach.schemas.project import ProjectCreate
from speechcoach.services.analysis_oracle import AnalysisOracle
from speechcoach.utils.audio import sha256_hex

import speechcoach.db.models  # noqa: F401

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

TEST_ENGINE = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=TEST_ENGINE)

# 8 words, 1 filler, one long gap
SAMPLE_ANALYSIS = {
    "transcript": "Hello everyone. Um, today we talk about focus.",
    "timestampedTranscript": [
        {"startTime": "00:00", "endTime": "00:02", "text": "Hello everyone."},
        {"startTime": "00:02", "endTime": "00:06", "text": "Um, today we talk about focus."},
    ],
    "durationSeconds": 65,
    "wordCount": 999,
    "wpm": 999,
    "fillerWords": [{"word": "um", "timestamp": "00:02"}],
    "totalFillerWords": 1,
    "gaps": [{"timestamp": "00:10", "duration": 4.5, "type": "long"}],
    "averageGapDuration": 4.5,
    "speechSegments": [
        {
            "type": "introduction",
            "startTime": "00:00",
            "endTime": "00:06",
            "content": "Greeting and topic",
            "coherenceScore": 8,
        }
    ],
    "coherenceIssues": [
        {
            "startTime": "00:02",
            "endTime": "00:03",
            "issue": "Filler at sentence start",
            "suggestion": "Start with the topic",
            "severity": "low",
        }
    ],
    "overallCoherenceScore": 8,
    "suggestions": ["Drop the opening filler.", "Slow down in the body."],
}


def make_analysis(**overrides) -> dict:
    data = copy.deepcopy(SAMPLE_ANALYSIS)
    data.update(overrides)
    return data


class FakeOracle(AnalysisOracle):
    """Returns a canned answer (or raises it) and counts calls."""

    def __init__(self, response=None):
        self.response = json.dumps(SAMPLE_ANALYSIS) if response is None else response
        self.calls = []

    def analyze(self, prompt, audio, mime_type, json_schema):
        self.calls.append({"prompt": prompt, "audio": audio, "mime_type": mime_type, "schema": json_schema})
        if isinstance(self.response, Exception):
            raise self.response
        if isinstance(self.response, dict):
            return json.dumps(self.response)
        return self.response


@pytest.fixture
def db():
    Base.metadata.create_all(bind=TEST_ENGINE)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def client(db, oracle):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oracle] = lambda: oracle
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"X-User-Id": USER_ID}


@pytest.fixture
def project(db):
    return create_project(db, USER_ID, ProjectCreate(name="Conference talk"))


@pytest.fixture
def upload(db, project):
    data = b"ID3\x03\x00fake-mp3-bytes"
    return create_upload(
        db,
        user_id=USER_ID,
        project_id=project.id,
        file_name="talk.mp3",
        data=data,
        file_hash=sha256_hex(data),
        content_type="audio/mpeg",
    )
