from __future__ import annotations

import logging
import re

from speechcoach.schemas.analysis import SpeechAnalysisPayload
from speechcoach.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

_EDGE_PUNCT = re.compile(r"^[^\w']+|[^\w']+$")


def tokenize(text: str) -> list[str]:
    tokens = (_EDGE_PUNCT.sub("", t) for t in (text or "").split())
    return [t for t in tokens if t]


def count_words(text: str) -> int:
    return len(tokenize(text))


def words_per_minute(word_count: int, duration_seconds: float) -> int:
    if duration_seconds <= 0:
        return 0
    return round_half_up(word_count / (duration_seconds / 60))


def normalize_counts(analysis: SpeechAnalysisPayload) -> SpeechAnalysisPayload:
    """
    Replace the model's self-reported wordCount/wpm with values computed from
    the transcript text. Always applied, the model's own counts are never kept.
    """
    word_count = count_words(analysis.canonical_text())
    wpm = words_per_minute(word_count, analysis.duration_seconds)

    if word_count != analysis.word_count or wpm != analysis.wpm:
        logger.info(
            "Overriding reported counts: wordCount %s -> %s, wpm %s -> %s",
            analysis.word_count, word_count, analysis.wpm, wpm,
        )
    return analysis.model_copy(update={"word_count": word_count, "wpm": float(wpm)})
