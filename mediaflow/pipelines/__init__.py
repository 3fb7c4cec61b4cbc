"""Pipelines assembled from the media commands."""

from mediaflow.pipelines.transcription import (
    AUDIO_FILE_KEY,
    TRANSCRIPT_FILE_KEY,
    TRANSCRIPTION_PIPELINE_NAME,
    TranscriptionPipelineFactory,
    TranscriptionPipelineSteps,
    new_context,
)

__all__ = [
    "AUDIO_FILE_KEY",
    "TRANSCRIPT_FILE_KEY",
    "TRANSCRIPTION_PIPELINE_NAME",
    "TranscriptionPipelineFactory",
    "TranscriptionPipelineSteps",
    "new_context",
]
