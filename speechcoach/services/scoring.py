"""
Performance grade for an analysed recording.

Four factor scores in [0, 100], each rounded half-up, and an overall grade that
is the rounded plain mean of the four. Pure and deterministic: the dashboard
runs the same arithmetic and must land on the same integers.

  time       full credit without a target, otherwise loses 100 points per
             20% of the target (at least 1 s) away from it
  coherence  overallCoherenceScore scaled from 0-10 to 0-100
  filler     loses 5 points per percent of words that are fillers
  pauses     loses 10 points per long or excessive gap
"""
from __future__ import annotations

from speechcoach.schemas.analysis import (
    FactorScores,
    PerformanceDetails,
    PerformanceMetrics,
    SpeechAnalysisPayload,
)
from speechcoach.utils.rounding import clamp, round_half_up

TIME_TOLERANCE_RATIO = 0.2
MIN_TIME_TOLERANCE_SECONDS = 1.0
FILLER_PENALTY_PER_PERCENT = 5
LONG_PAUSE_PENALTY = 10
LONG_PAUSE_TYPES = ("long", "excessive")


def time_goal_seconds(timeframe_ms: int | float | None) -> float | None:
    if not timeframe_ms or timeframe_ms <= 0:
        return None
    return timeframe_ms / 1000


def filler_percentage(analysis: SpeechAnalysisPayload) -> float:
    # no words -> no filler, not a division error
    if analysis.word_count <= 0:
        return 0.0
    return analysis.total_filler_words / analysis.word_count * 100


def long_pause_count(analysis: SpeechAnalysisPayload) -> int:
    return sum(1 for g in analysis.gaps if g.type in LONG_PAUSE_TYPES)


def time_score(duration_seconds: float, timeframe_ms: int | float | None) -> float:
    goal = time_goal_seconds(timeframe_ms)
    if goal is None:
        return 100.0
    diff = abs(duration_seconds - goal)
    tolerance = max(goal * TIME_TOLERANCE_RATIO, MIN_TIME_TOLERANCE_SECONDS)
    return clamp(100 - (diff / tolerance) * 100, 0, 100)


def factor_scores(analysis: SpeechAnalysisPayload, timeframe_ms: int | float | None) -> FactorScores:
    coherence = clamp(analysis.overall_coherence_score / 10 * 100, 0, 100)
    filler = clamp(100 - filler_percentage(analysis) * FILLER_PENALTY_PER_PERCENT, 0, 100)
    pauses = clamp(100 - long_pause_count(analysis) * LONG_PAUSE_PENALTY, 0, 100)
    return FactorScores(
        time=round_half_up(time_score(analysis.duration_seconds, timeframe_ms)),
        coherence=round_half_up(coherence),
        filler=round_half_up(filler),
        pauses=round_half_up(pauses),
    )


def overall_grade(scores: FactorScores) -> int:
    return round_half_up((scores.time + scores.coherence + scores.filler + scores.pauses) / 4)


def score_analysis(analysis: SpeechAnalysisPayload, timeframe_ms: int | float | None) -> PerformanceMetrics:
    scores = factor_scores(analysis, timeframe_ms)
    goal = time_goal_seconds(timeframe_ms)
    return PerformanceMetrics(
        overall_grade=overall_grade(scores),
        factor_scores=scores,
        details=PerformanceDetails(
            time_goal_seconds=goal,
            time_delta_seconds=None if goal is None else analysis.duration_seconds - goal,
            filler_percentage=filler_percentage(analysis),
            long_pause_count=long_pause_count(analysis),
            words_per_minute=analysis.wpm,
            average_gap_duration=analysis.average_gap_duration,
        ),
    )


def grade_band(grade: int) -> str:
    if grade > 85:
        return "excellent"
    if grade >= 70:
        return "good"
    return "needs_work"
