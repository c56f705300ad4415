import hashlib
import os
import subprocess
import tempfile
from pathlib import PurePath

import imageio_ffmpeg

# what the analysis model is told the audio is
ORACLE_MIME_TYPES = {
    "mp3": "audio/mp3",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "aiff": "audio/aiff",
}
DEFAULT_ORACLE_MIME_TYPE = "audio/mpeg"

# Content-Type when streaming an upload back to the browser
PLAYBACK_CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
}


def file_extension(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lstrip(".").lower()


def oracle_mime_type(file_name: str) -> str:
    return ORACLE_MIME_TYPES.get(file_extension(file_name), DEFAULT_ORACLE_MIME_TYPE)


def playback_content_type(file_name: str) -> str:
    return PLAYBACK_CONTENT_TYPES.get(file_extension(file_name), "application/octet-stream")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def convert_to_wav(data: bytes, suffix: str = "") -> bytes:
    """Transcode any ffmpeg-readable audio to 16 kHz mono WAV."""
    src_path = None
    wav_path = None
    try:
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f_src:
            f_src.write(data)
            src_path = f_src.name
        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f_wav:
            wav_path = f_wav.name

        cmd = [
            imageio_ffmpeg.get_ffmpeg_exe(), "-y", "-hide_banner", "-loglevel", "error",
            "-i", src_path, "-ac", "1", "-ar", "16000", wav_path,
        ]
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            raise RuntimeError(f"ffmpeg convert failed: {result.stderr.strip()}")

        with open(wav_path, "rb") as f:
            return f.read()
    finally:
        for path in (src_path, wav_path):
            if path and os.path.exists(path):
                os.remove(path)
