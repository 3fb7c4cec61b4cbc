"""Concrete media processing commands.

- **AudioExtractorCommand**: extracts the audio track of a video with ffmpeg
- **AudioTranscriptionCommand**: transcribes audio with Speech-to-Text v2
"""

from .audio_extractor import AudioExtractorCommand
from .audio_transcription import (
    AudioTranscriptionCommand,
    SpeechClientFactory,
    create_speech_client,
    speech_endpoint,
)
from .objects import GCS_OBJECT, GCSObject, replace_suffix

__all__ = [
    "AudioExtractorCommand",
    "AudioTranscriptionCommand",
    "GCS_OBJECT",
    "GCSObject",
    "SpeechClientFactory",
    "create_speech_client",
    "replace_suffix",
    "speech_endpoint",
]
