"""
Analysis result contract.

These models are both the JSON schema handed to the analysis model and the
gate its answer has to pass before anything downstream sees it.
"""
from __future__ import annotations

import json
import re
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from speechcoach.core.errors import SchemaViolation


def _json_number(v: Any) -> Any:
    if isinstance(v, (bool, str, bytes)):
        raise ValueError("Input should be a number")
    return v


# strict: JSON numbers only, no bools or numeric strings
Number = Annotated[float, Field(strict=True)]
NonNegNumber = Annotated[float, Field(strict=True, ge=0)]
# whole numbers, 130.0 included
Count = Annotated[int, BeforeValidator(_json_number), Field(ge=0)]
Score10 = Annotated[float, Field(strict=True, ge=0, le=10)]

Timestamp = Annotated[str, Field(description="Timestamp in format MM:SS")]
# sentence bounds get compared, so they must parse: MM:SS, H:MM:SS, optional fractional seconds
CLOCK_PATTERN = r"^(\d+:)?\d{1,2}:\d{2}(\.\d+)?$"
Clock = Annotated[str, Field(pattern=CLOCK_PATTERN, description="Timestamp in format MM:SS")]

GapType = Literal["short", "medium", "long", "excessive"]
SegmentType = Literal["introduction", "body", "conclusion", "transition"]
Severity = Literal["low", "medium", "high"]

SENTENCE_END = re.compile(r"[.!?](\s|$)")


def clock_to_seconds(value: str) -> float:
    """'01:05' -> 65.0, '1:02:03' -> 3723.0"""
    total = 0.0
    for part in value.split(":"):
        total = total * 60 + float(part)
    return total


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimestampedSentence(CamelModel):
    start_time: Clock
    end_time: Clock
    text: str = Field(description="Exactly one complete sentence ending with '.', '!' or '?'")

    @field_validator("text")
    @classmethod
    def _one_sentence(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("text must not be empty")
        if len(SENTENCE_END.findall(stripped)) != 1:
            raise ValueError("text must contain exactly one complete sentence ending with '.', '!' or '?'")
        return v

    @model_validator(mode="after")
    def _ordered(self) -> "TimestampedSentence":
        if clock_to_seconds(self.end_time) <= clock_to_seconds(self.start_time):
            raise ValueError("endTime must be after startTime")
        return self


class FillerWord(CamelModel):
    word: str
    timestamp: Timestamp


class Gap(CamelModel):
    timestamp: Timestamp
    duration: NonNegNumber = Field(description="Duration of the pause in seconds")
    type: GapType


class SpeechSegment(CamelModel):
    type: SegmentType
    start_time: Timestamp
    end_time: Timestamp
    content: str
    coherence_score: Score10


class CoherenceIssue(CamelModel):
    start_time: Timestamp
    end_time: Timestamp
    issue: str
    suggestion: str
    severity: Severity


class SpeechAnalysisPayload(CamelModel):
    """What the analysis model has to return for one recording."""

    transcript: str
    timestamped_transcript: list[TimestampedSentence] | None = None
    duration_seconds: NonNegNumber
    word_count: Count
    wpm: NonNegNumber
    filler_words: list[FillerWord]
    total_filler_words: Count
    gaps: list[Gap]
    average_gap_duration: NonNegNumber
    speech_segments: list[SpeechSegment]
    coherence_issues: list[CoherenceIssue]
    overall_coherence_score: Score10
    suggestions: list[str]

    def canonical_text(self) -> str:
        if self.timestamped_transcript:
            return " ".join(s.text for s in self.timestamped_transcript)
        return self.transcript or ""


class FactorScores(CamelModel):
    time: int
    coherence: int
    filler: int
    pauses: int


class PerformanceDetails(CamelModel):
    time_goal_seconds: float | None
    time_delta_seconds: float | None
    filler_percentage: float
    long_pause_count: int
    words_per_minute: float
    average_gap_duration: float


class PerformanceMetrics(CamelModel):
    overall_grade: int
    factor_scores: FactorScores
    details: PerformanceDetails


class AnalysisResult(SpeechAnalysisPayload):
    performance: PerformanceMetrics | None = None


class AnalyzeResponse(CamelModel):
    success: bool = True
    upload_id: str
    file_name: str
    cached: bool = False
    analysis: AnalysisResult
    grade_band: str | None = None


def oracle_json_schema() -> dict[str, Any]:
    return SpeechAnalysisPayload.model_json_schema(by_alias=True)


def _field_name(loc: tuple[Any, ...]) -> str:
    return ".".join(str(p) for p in loc) or "<root>"


def _cross_field_errors(data: Any) -> list[dict[str, str]]:
    if not isinstance(data, dict):
        return []
    fillers = data.get("fillerWords")
    total = data.get("totalFillerWords")
    if isinstance(total, float) and total.is_integer():
        total = int(total)
    if isinstance(fillers, list) and isinstance(total, int) and not isinstance(total, bool):
        if total != len(fillers):
            return [{
                "field": "totalFillerWords",
                "message": f"totalFillerWords ({total}) must equal the number of fillerWords entries ({len(fillers)})",
            }]
    return []


def validate_analysis(raw: Any) -> SpeechAnalysisPayload:
    """
    Validate an analysis-model answer.

    Accepts the raw JSON text (str/bytes) or an already decoded object. Raises
    SchemaViolation listing every failing field; never coerces enum or range
    violations into valid values.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaViolation([{"field": "<root>", "message": f"response is not valid JSON: {e}"}])
    else:
        data = raw

    details: list[dict[str, str]] = []
    payload: SpeechAnalysisPayload | None = None
    try:
        # aliases only: the model has to answer in the wire names
        payload = SpeechAnalysisPayload.model_validate(data, by_alias=True, by_name=False)
    except ValidationError as e:
        details.extend({"field": _field_name(err["loc"]), "message": err["msg"]} for err in e.errors())

    details.extend(_cross_field_errors(data))
    if details or payload is None:
        raise SchemaViolation(details)
    return payload
