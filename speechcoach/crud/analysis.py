from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from speechcoach.db.models.speech_analysis import SpeechAnalysis
from speechcoach.db.models.upload import AudioUpload
from speechcoach.schemas.analysis import AnalysisResult, PerformanceMetrics, SpeechAnalysisPayload

logger = logging.getLogger(__name__)


def get_analysis(db: Session, upload_id: str) -> SpeechAnalysis | None:
    stmt = select(SpeechAnalysis).where(SpeechAnalysis.upload_id == upload_id)
    return db.execute(stmt).scalars().first()


def _columns(payload: SpeechAnalysisPayload, performance: PerformanceMetrics | None) -> dict:
    data = payload.model_dump(mode="json", by_alias=True)
    return {
        "transcript": payload.transcript,
        "timestamped_transcript": data["timestampedTranscript"],
        "duration_seconds": payload.duration_seconds,
        "word_count": payload.word_count,
        "wpm": payload.wpm,
        "filler_words": data["fillerWords"],
        "total_filler_words": payload.total_filler_words,
        "gaps": data["gaps"],
        "average_gap_duration": payload.average_gap_duration,
        "speech_segments": data["speechSegments"],
        "coherence_issues": data["coherenceIssues"],
        "overall_coherence_score": payload.overall_coherence_score,
        "suggestions": data["suggestions"],
        "performance": performance.model_dump(mode="json", by_alias=True) if performance else None,
    }


def put_analysis(
    db: Session,
    upload_id: str,
    payload: SpeechAnalysisPayload,
    performance: PerformanceMetrics | None,
) -> SpeechAnalysis:
    """
    Create or fully replace the analysis for an upload.

    Every column is rewritten, including timestampedTranscript when the new
    answer has none. Concurrent writers are last-write-wins: losing the race
    on the first insert turns into an overwrite of the winner's row.
    """
    values = _columns(payload, performance)

    record = get_analysis(db, upload_id)
    if record is None:
        record = SpeechAnalysis(upload_id=upload_id, **values)
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Concurrent first write for upload %s, overwriting", upload_id)
            record = get_analysis(db, upload_id)
            if record is None:
                raise
            for key, value in values.items():
                setattr(record, key, value)
            db.commit()
    else:
        for key, value in values.items():
            setattr(record, key, value)
        db.commit()

    db.refresh(record)
    return record


def save_performance(db: Session, record: SpeechAnalysis, performance: PerformanceMetrics) -> SpeechAnalysis:
    record.performance = performance.model_dump(mode="json", by_alias=True)
    db.commit()
    db.refresh(record)
    return record


def clear_performance_for_project(db: Session, project_id: str) -> int:
    """Drop cached grades of every analysis in a project; they get recomputed on next read."""
    upload_ids = select(AudioUpload.id).where(AudioUpload.project_id == project_id)
    result = db.execute(
        update(SpeechAnalysis)
        .where(SpeechAnalysis.upload_id.in_(upload_ids))
        .values(performance=None)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def to_payload(record: SpeechAnalysis) -> SpeechAnalysisPayload:
    return SpeechAnalysisPayload.model_validate({
        "transcript": record.transcript,
        "timestampedTranscript": record.timestamped_transcript,
        "durationSeconds": record.duration_seconds,
        "wordCount": record.word_count,
        "wpm": record.wpm,
        "fillerWords": record.filler_words or [],
        "totalFillerWords": record.total_filler_words,
        "gaps": record.gaps or [],
        "averageGapDuration": record.average_gap_duration,
        "speechSegments": record.speech_segments or [],
        "coherenceIssues": record.coherence_issues or [],
        "overallCoherenceScore": record.overall_coherence_score,
        "suggestions": record.suggestions or [],
    })


def to_result(record: SpeechAnalysis) -> AnalysisResult:
    payload = to_payload(record)
    performance = PerformanceMetrics.model_validate(record.performance) if record.performance else None
    return AnalysisResult(**payload.model_dump(), performance=performance)
