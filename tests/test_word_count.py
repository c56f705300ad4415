import pytest

from speechcoach.schemas.analysis import validate_analysis
from speechcoach.services.word_count import count_words, normalize_counts, tokenize, words_per_minute
from speechcoach.utils.rounding import round_half_up

from conftest import make_analysis


def test_tokenize_strips_edge_punctuation():
    assert tokenize("Hello, world!  -- don't (stop)") == ["Hello", "world", "don't", "stop"]


def test_count_words_empty():
    assert count_words("") == 0
    assert count_words("  ... !! ") == 0


@pytest.mark.parametrize(
    "words,duration,expected",
    [(120, 60, 120), (130, 65, 120), (8, 65, 7), (1, 0.5, 120), (10, 0, 0), (10, -3, 0)],
)
def test_words_per_minute(words, duration, expected):
    assert words_per_minute(words, duration) == expected


def test_round_half_up_is_not_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(1.49) == 1


def test_reported_counts_are_replaced():
    payload = validate_analysis(make_analysis(wordCount=999, wpm=999))

    normalized = normalize_counts(payload)

    assert normalized.word_count == 8
    assert normalized.wpm == 7
    # everything else untouched
    assert normalized.transcript == payload.transcript
    assert normalized.gaps == payload.gaps


def test_timestamped_text_wins_over_transcript():
    sentences = [
        {"startTime": "00:00", "endTime": "00:30", "text": "One two three four five six."},
        {"startTime": "00:30", "endTime": "01:00", "text": "Seven eight nine ten!"},
    ]
    payload = validate_analysis(
        make_analysis(transcript="just three words", timestampedTranscript=sentences, durationSeconds=60)
    )

    normalized = normalize_counts(payload)

    assert normalized.word_count == 10
    assert normalized.wpm == 10


def test_transcript_used_without_timestamps():
    data = make_analysis(transcript="a b c d e f", durationSeconds=30)
    data.pop("timestampedTranscript")

    normalized = normalize_counts(validate_analysis(data))

    assert normalized.word_count == 6
    assert normalized.wpm == 12


def test_zero_duration_gives_zero_wpm():
    normalized = normalize_counts(validate_analysis(make_analysis(durationSeconds=0)))

    assert normalized.wpm == 0
