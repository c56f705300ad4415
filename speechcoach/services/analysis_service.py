"""
Analysis pipeline for one upload.

    cache check -> (cached result | oracle call -> validate -> normalize -> score -> persist)

A failure in the oracle call, validation or persistence ends the request with
no analysis written. There is no retry inside the pipeline; a retry is a new
request with retry=True, which skips the cache and overwrites the stored row.
Two such requests racing on one upload both call the oracle and the later
write wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from speechcoach.core.errors import InternalError, NotFound, OracleUnavailable, SchemaViolation, SpeechCoachError
from speechcoach.crud.analysis import get_analysis, put_analysis, save_performance, to_payload, to_result
from speechcoach.crud.project import get_project
from speechcoach.crud.upload import get_upload
from speechcoach.db.models.project import Project
from speechcoach.db.models.speech_analysis import SpeechAnalysis
from speechcoach.db.models.upload import AudioUpload
from speechcoach.schemas.analysis import AnalysisResult, AnalyzeResponse, oracle_json_schema, validate_analysis
from speechcoach.services.analysis_oracle import ANALYSIS_PROMPT, AnalysisOracle
from speechcoach.services.scoring import grade_band, score_analysis
from speechcoach.services.word_count import normalize_counts
from speechcoach.utils.audio import oracle_mime_type

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    upload_id: str
    file_name: str
    analysis: AnalysisResult
    cached: bool

    def to_response(self) -> AnalyzeResponse:
        performance = self.analysis.performance
        return AnalyzeResponse(
            upload_id=self.upload_id,
            file_name=self.file_name,
            cached=self.cached,
            analysis=self.analysis,
            grade_band=grade_band(performance.overall_grade) if performance else None,
        )


class AnalysisService:
    def __init__(self, oracle: AnalysisOracle, prompt: str = ANALYSIS_PROMPT):
        self.oracle = oracle
        self.prompt = prompt

    def analyze(
        self,
        db: Session,
        user_id: str,
        project_id: str,
        upload_id: str,
        retry: bool = False,
    ) -> AnalysisOutcome:
        try:
            project = get_project(db, project_id, user_id)
            if project is None:
                raise NotFound("Project not found")

            upload = get_upload(db, upload_id, user_id, project_id)
            if upload is None:
                raise NotFound("Upload not found")

            record = get_analysis(db, upload.id)
            if record is not None and not retry:
                return self._from_cache(db, project, upload, record)
            return self._run(db, project, upload)
        except SpeechCoachError:
            raise
        except Exception as e:
            db.rollback()
            logger.exception("Analysis of upload %s (project %s) failed", upload_id, project_id)
            raise InternalError() from e

    def _from_cache(
        self, db: Session, project: Project, upload: AudioUpload, record: SpeechAnalysis
    ) -> AnalysisOutcome:
        logger.info("Returning cached analysis for upload %s", upload.id)
        if record.performance is None:
            # written before scoring existed, or its project target changed since
            performance = score_analysis(to_payload(record), project.timeframe)
            record = save_performance(db, record, performance)
            logger.info("Backfilled performance for upload %s (grade %s)", upload.id, performance.overall_grade)

        return AnalysisOutcome(
            upload_id=upload.id,
            file_name=upload.file_name,
            analysis=to_result(record),
            cached=True,
        )

    def _call_oracle(self, upload: AudioUpload) -> str:
        mime_type = oracle_mime_type(upload.file_name)
        logger.info("Analysing upload %s (%s, %s)", upload.id, upload.file_name, mime_type)
        try:
            raw = self.oracle.analyze(self.prompt, upload.file_data, mime_type, oracle_json_schema())
        except OracleUnavailable:
            raise
        except (ConnectionError, TimeoutError, OSError) as e:
            raise OracleUnavailable(f"Analysis model unreachable: {e}") from e

        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise OracleUnavailable("No response from AI")
        return raw

    def _run(self, db: Session, project: Project, upload: AudioUpload) -> AnalysisOutcome:
        raw = self._call_oracle(upload)

        try:
            payload = validate_analysis(raw)
        except SchemaViolation as e:
            logger.warning("Analysis for upload %s failed validation on %s", upload.id, e.fields)
            raise
        payload = normalize_counts(payload)
        performance = score_analysis(payload, project.timeframe)

        try:
            record = put_analysis(db, upload.id, payload, performance)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Saving analysis for upload %s failed", upload.id)
            raise InternalError() from e
        logger.info("Saved analysis for upload %s (grade %s)", upload.id, performance.overall_grade)

        return AnalysisOutcome(
            upload_id=upload.id,
            file_name=upload.file_name,
            analysis=to_result(record),
            cached=False,
        )
