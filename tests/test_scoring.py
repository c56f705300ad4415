import pytest

from speechcoach.schemas.analysis import SpeechAnalysisPayload
from speechcoach.services.scoring import (
    filler_percentage,
    grade_band,
    long_pause_count,
    score_analysis,
    time_score,
)


def _analysis(
    duration=65.0,
    word_count=20,
    fillers=2,
    gap_types=("long", "excessive", "medium", "short"),
    coherence=8.0,
) -> SpeechAnalysisPayload:
    return SpeechAnalysisPayload(
        transcript="",
        duration_seconds=duration,
        word_count=word_count,
        wpm=0.0,
        filler_words=[{"word": "um", "timestamp": "00:01"} for _ in range(fillers)],
        total_filler_words=fillers,
        gaps=[{"timestamp": "00:05", "duration": 3.0, "type": t} for t in gap_types],
        average_gap_duration=3.0,
        speech_segments=[],
        coherence_issues=[],
        overall_coherence_score=coherence,
        suggestions=[],
    )


def test_worked_example():
    # 65 s against a 60 s target: tolerance 12 s, 5 s off
    metrics = score_analysis(_analysis(), 60_000)

    assert metrics.factor_scores.time == 58
    assert metrics.factor_scores.coherence == 80
    assert metrics.factor_scores.filler == 50
    assert metrics.factor_scores.pauses == 80
    assert metrics.overall_grade == 67
    assert metrics.details.time_goal_seconds == 60
    assert metrics.details.time_delta_seconds == 5
    assert metrics.details.filler_percentage == 10
    assert metrics.details.long_pause_count == 2


def test_no_target_gives_full_time_score():
    metrics = score_analysis(_analysis(duration=600.0), 0)

    assert metrics.factor_scores.time == 100
    assert metrics.details.time_goal_seconds is None
    assert metrics.details.time_delta_seconds is None


def test_short_delivery_has_negative_delta():
    metrics = score_analysis(_analysis(duration=50.0), 60_000)

    assert metrics.details.time_delta_seconds == -10


def test_small_targets_use_minimum_tolerance():
    # 2 s target -> 0.4 s by ratio, 1 s minimum applies
    assert time_score(2.5, 2_000) == 50


def test_far_off_target_floors_at_zero():
    assert time_score(300, 60_000) == 0


def test_filler_score_saturates():
    metrics = score_analysis(_analysis(word_count=10, fillers=5), 0)

    assert metrics.factor_scores.filler == 0


def test_zero_words_means_no_filler_penalty():
    analysis = _analysis(word_count=0, fillers=0)

    assert filler_percentage(analysis) == 0
    assert score_analysis(analysis, 0).factor_scores.filler == 100


def test_pauses_saturate():
    analysis = _analysis(gap_types=["long"] * 12)

    assert long_pause_count(analysis) == 12
    assert score_analysis(analysis, 0).factor_scores.pauses == 0


def test_medium_and_short_gaps_are_free():
    assert score_analysis(_analysis(gap_types=["short", "medium"]), 0).factor_scores.pauses == 100


def test_scores_are_deterministic():
    analysis = _analysis(duration=61.7, word_count=137, fillers=3, coherence=7.3)

    assert score_analysis(analysis, 90_000) == score_analysis(analysis, 90_000)


@pytest.mark.parametrize("duration", [0.0, 12.5, 59.9, 60.0, 71.9, 3600.0])
@pytest.mark.parametrize("timeframe", [0, 1_000, 60_000])
def test_scores_stay_in_range(duration, timeframe):
    metrics = score_analysis(_analysis(duration=duration, coherence=10.0), timeframe)
    scores = metrics.factor_scores

    for value in (scores.time, scores.coherence, scores.filler, scores.pauses, metrics.overall_grade):
        assert isinstance(value, int)
        assert 0 <= value <= 100


def test_grade_is_rounded_mean_of_factors():
    metrics = score_analysis(_analysis(duration=61.7, word_count=137, fillers=3, coherence=7.3), 90_000)
    s = metrics.factor_scores

    assert metrics.overall_grade == int((s.time + s.coherence + s.filler + s.pauses) / 4 + 0.5)


@pytest.mark.parametrize(
    "grade,band",
    [(100, "excellent"), (86, "excellent"), (85, "good"), (70, "good"), (69, "needs_work"), (0, "needs_work")],
)
def test_grade_band(grade, band):
    assert grade_band(grade) == band
