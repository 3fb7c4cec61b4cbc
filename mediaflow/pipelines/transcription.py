"""Video transcription pipeline.

The pipeline runs two commands over one shared context:

1. `AudioExtractor` reads the video referenced by `GCS_OBJECT` through the
   storage mount and writes the audio file URI under `audio_file`.
2. `AudioTranscription` reads `audio_file` and writes the transcript URI under
   `transcript_file` and `CTX_OUT`.

Context keys used by this pipeline:

| Key                | Type        | Written by         | Read by            |
|--------------------|-------------|--------------------|--------------------|
| `__GCS_OBJECT__`   | `GCSObject` | caller             | AudioExtractor     |
| `audio_file`       | `str`       | AudioExtractor     | AudioTranscription |
| `transcript_file`  | `str`       | AudioTranscription | caller             |
| `__OUT__`          | `str`       | AudioTranscription | caller             |
"""

from enum import Enum
from typing import Callable

from mediaflow.commands.objects import GCS_OBJECT, GCSObject
from mediaflow.lib.cor import Command, Context, ExecutionScope, Pipeline

AUDIO_FILE_KEY = "audio_file"
TRANSCRIPT_FILE_KEY = "transcript_file"

TRANSCRIPTION_PIPELINE_NAME = "transcription"

type CommandProvider = Callable[..., Command]
"""Callable building a command, such as a container provider."""


class TranscriptionPipelineSteps(Enum):
    """Command names of the transcription pipeline, in execution order."""

    AUDIO_EXTRACTOR = "AudioExtractor"
    AUDIO_TRANSCRIPTION = "AudioTranscription"


class TranscriptionPipelineFactory:
    """Factory for the video transcription pipeline.

    Commands are built through the given providers on every `create()` call,
    so each pipeline gets its own command instances while the counters stay
    shared through the metrics recorder the providers inject.

    Args:
        extractor_provider: Builds the audio extraction command. Called with
            `name` and `output_key`.
        transcriber_provider: Builds the transcription command. Called with
            `name`, `input_key` and `output_key`.
    """

    def __init__(
        self,
        extractor_provider: CommandProvider,
        transcriber_provider: CommandProvider,
    ) -> None:
        self._extractor_provider = extractor_provider
        self._transcriber_provider = transcriber_provider

    def create(self) -> Pipeline:
        pipeline = Pipeline(TRANSCRIPTION_PIPELINE_NAME)
        pipeline.add(
            self._extractor_provider(
                name=TranscriptionPipelineSteps.AUDIO_EXTRACTOR.value,
                output_key=AUDIO_FILE_KEY,
            )
        )
        pipeline.add(
            self._transcriber_provider(
                name=TranscriptionPipelineSteps.AUDIO_TRANSCRIPTION.value,
                input_key=AUDIO_FILE_KEY,
                output_key=TRANSCRIPT_FILE_KEY,
            )
        )
        return pipeline


def new_context(video: GCSObject, timeout: float | None = None) -> Context:
    """Create a fresh context for one run over `video`.

    Args:
        video: The object that triggered the run.
        timeout: Optional deadline, in seconds, for the whole run.
    """
    scope = ExecutionScope.with_timeout(timeout) if timeout is not None else ExecutionScope()
    ctx = Context(scope=scope)
    GCS_OBJECT.set(ctx, video)
    return ctx
