import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from speechcoach.db.base import Base
from speechcoach.db.models.project import utc_now


class SpeechAnalysis(Base):
    """
    Cached oracle analysis for one upload.

    upload_id is unique: there is at most one live analysis per upload and
    writes replace every column.
    """
    __tablename__ = "speech_analyses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    upload_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audio_uploads.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )

    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    timestamped_transcript: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    duration_seconds: Mapped[float] = mapped_column(Float, nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False)
    wpm: Mapped[float] = mapped_column(Float, nullable=False)

    filler_words: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_filler_words: Mapped[int] = mapped_column(Integer, nullable=False)

    gaps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    average_gap_duration: Mapped[float] = mapped_column(Float, nullable=False)

    speech_segments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    coherence_issues: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    overall_coherence_score: Mapped[float] = mapped_column(Float, nullable=False)
    suggestions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # derived; NULL means "not scored yet" and is backfilled on read
    performance: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    upload: Mapped["AudioUpload"] = relationship("AudioUpload", back_populates="analysis")
