from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any

from openai import OpenAI, OpenAIError

from speechcoach.core.config import settings
from speechcoach.core.errors import OracleUnavailable, UnsupportedAudio
from speechcoach.utils.audio import convert_to_wav

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = """
You are an expert speech coach and speech analyst. You receive one audio recording of a
person practising a talk and return a single JSON object that follows the given schema.
Do not add any text outside the JSON.
""".strip()

ANALYSIS_PROMPT = """
Analyse the attached recording and fill in every field of the schema.

1. transcript: the complete transcript with normal punctuation, including every filler word.
   timestampedTranscript: the same speech split into sentences. Every entry is exactly ONE
   complete sentence ending in '.', '!' or '?', with startTime/endTime (MM:SS) covering it.
2. durationSeconds: total length of the recording in seconds. wordCount: number of words.
3. wpm: wordCount / (durationSeconds / 60).
4. fillerWords: one entry per occurrence (not per distinct word) of fillers such as "um", "uh",
   "like", "you know", "so", "actually", "basically", "literally", each with its MM:SS timestamp.
   totalFillerWords must equal the number of entries in fillerWords.
5. gaps: pauses of 2 seconds or more, with timestamp, duration in seconds and type:
   medium 2-4 s (hesitation), long 4-7 s, excessive 7 s or more. averageGapDuration is their mean.
6. speechSegments: split the talk into introduction / body / conclusion / transition parts with
   MM:SS start and end, a short summary of the content and a coherence score from 0 to 10.
7. coherenceIssues: stuttering, mumbling, run-on or incomplete sentences, overly complex
   sentences, awkward phrasing. Give start/end (MM:SS), the issue, a suggestion and a severity
   of low, medium or high.
8. overallCoherenceScore: coherence and flow of the whole talk from 0 to 10.
9. suggestions: 3 to 5 concrete, actionable tips to improve the delivery.
""".strip()

# input_audio only takes wav or mp3
_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
}


class AnalysisOracle(ABC):
    """
    The external transcription/analysis model.

    Untrusted: implementations return the model's raw text and leave
    validation to the caller. Transport failures raise OracleUnavailable.
    """

    @abstractmethod
    def analyze(self, prompt: str, audio: bytes, mime_type: str, json_schema: dict[str, Any]) -> str:
        ...


class OpenAIAnalysisOracle(AnalysisOracle):
    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        max_output_tokens: int | None = None,
    ):
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.max_output_tokens = max_output_tokens or settings.OPENAI_MAX_OUTPUT_TOKENS

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise OracleUnavailable("OPENAI_API_KEY is not configured")
            # one attempt only, the client decides when to retry
            self._client = OpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def audio_format(mime_type: str) -> str | None:
        return _AUDIO_FORMATS.get(mime_type)

    def prepare_audio(self, audio: bytes, mime_type: str) -> tuple[bytes, str]:
        """Return (bytes, format) the model accepts; anything but wav/mp3 is transcoded to wav."""
        fmt = self.audio_format(mime_type)
        if fmt is not None:
            return audio, fmt

        try:
            wav = convert_to_wav(audio, suffix="." + mime_type.split("/")[-1])
        except (RuntimeError, OSError) as e:
            logger.warning("Converting %s audio to wav failed: %s", mime_type, e)
            raise UnsupportedAudio(f"Could not convert {mime_type} audio for analysis") from e
        logger.info("Converted %s audio to wav (%d -> %d bytes)", mime_type, len(audio), len(wav))
        return wav, "wav"

    def build_messages(self, prompt: str, audio: bytes, mime_type: str) -> list[dict]:
        audio, fmt = self.prepare_audio(audio, mime_type)
        return [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "input_audio",
                        "input_audio": {
                            "data": base64.b64encode(audio).decode("ascii"),
                            "format": fmt,
                        },
                    },
                ],
            },
        ]

    def analyze(self, prompt: str, audio: bytes, mime_type: str, json_schema: dict[str, Any]) -> str:
        client = self.client
        logger.info("Calling %s (%s, %d bytes)", self.model, mime_type, len(audio))
        try:
            completion = client.chat.completions.create(
                model=self.model,
                modalities=["text"],
                messages=self.build_messages(prompt, audio, mime_type),
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "speech_analysis", "schema": json_schema},
                },
                max_completion_tokens=self.max_output_tokens,
            )
        except OpenAIError as e:
            logger.error("Analysis model request failed: %s", e)
            raise OracleUnavailable(f"Analysis model request failed: {e}") from e

        text = completion.choices[0].message.content if completion.choices else None
        if not text or not text.strip():
            logger.error("Analysis model returned no text")
            raise OracleUnavailable("No response from AI")
        return text.strip()
