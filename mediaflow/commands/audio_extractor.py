"""Command extracting the audio track of a video with ffmpeg."""

import subprocess
from typing import Callable

from loguru import logger

from mediaflow.commands.objects import GCS_OBJECT, replace_suffix
from mediaflow.lib.cor import (
    CommandError,
    ConsistencyPoller,
    Context,
    ExternalToolFailure,
    Instrumentation,
    MetricsRecorder,
)
from mediaflow.settings import StorageSettings

DEFAULT_AUDIO_EXTRACTOR_ARGS = "-i {input} -q:a 0 -map a -ac 1 {output}"
"""Argument template: best VBR quality, audio stream only, downmixed to mono."""

COMMAND_SEPARATOR = " "

VIDEO_SUFFIX = ".mp4"
AUDIO_SUFFIX = ".wav"

type ProcessRunner = Callable[..., subprocess.CompletedProcess]


class AudioExtractorCommand:
    """Extracts audio from the video referenced by `GCS_OBJECT`.

    The video is read through the storage mount and the audio is written to
    the audio bucket on the same mount. On success, the `gs://` URI of the
    audio file is stored under the output key.

    Args:
        name: The command name.
        metrics: Recorder issuing the command counters.
        storage: Mount point and bucket settings.
        command_path: Path of the ffmpeg binary.
        output_key: Context key receiving the audio file URI.
        poller: When given, the command waits for the input video to be
            visible on the mount before running ffmpeg.
        args_template: Argument template with `{input}` and `{output}` fields.
        runner: Function used to run the process, `subprocess.run` by default.
    """

    def __init__(
        self,
        name: str,
        metrics: MetricsRecorder,
        storage: StorageSettings,
        *,
        command_path: str = "ffmpeg",
        output_key: str = "audio_file",
        poller: ConsistencyPoller | None = None,
        args_template: str = DEFAULT_AUDIO_EXTRACTOR_ARGS,
        runner: ProcessRunner = subprocess.run,
    ) -> None:
        self._instrumentation = Instrumentation(name, metrics, GCS_OBJECT.name, output_key)
        self._storage = storage
        self._command_path = command_path
        self._poller = poller
        self._args_template = args_template
        self._runner = runner

    @property
    def name(self) -> str:
        return self._instrumentation.name

    @property
    def input_key(self) -> str:
        return self._instrumentation.input_key

    @property
    def output_key(self) -> str:
        return self._instrumentation.output_key

    @property
    def instrumentation(self) -> Instrumentation:
        return self._instrumentation

    def build_args(self, input_path: str, output_path: str) -> list[str]:
        """Build the ffmpeg argument list from the template."""
        return [
            arg.format(input=input_path, output=output_path)
            for arg in self._args_template.split(COMMAND_SEPARATOR)
        ]

    def execute(self, ctx: Context) -> None:
        try:
            audio_uri = self._extract(ctx)
        except CommandError as e:
            self._instrumentation.record_failure(ctx, e)
            return
        self._instrumentation.record_success(ctx, audio_uri)

    def _extract(self, ctx: Context) -> str:
        video = GCS_OBJECT.get(ctx)
        scope = ctx.scope()

        input_path = self._storage.mounted_path(video.bucket, video.name)
        output_name = replace_suffix(video.name, VIDEO_SUFFIX, AUDIO_SUFFIX)
        output_path = self._storage.mounted_path(self._storage.audio_bucket, output_name)

        if self._poller is not None:
            self._poller.wait_for_file(input_path, scope)

        scope.raise_if_done()
        args = self.build_args(str(input_path), str(output_path))
        logger.info(f"Extracting audio from {input_path} to {output_path}")

        try:
            # stderr is inherited, so ffmpeg diagnostics reach the process stderr.
            self._runner(
                [self._command_path, *args],
                stdout=subprocess.PIPE,
                check=True,
                timeout=scope.remaining(),
            )
        except subprocess.CalledProcessError as e:
            raise ExternalToolFailure(
                self._command_path, f"exit status {e.returncode}", e.returncode
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalToolFailure(self._command_path, f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise ExternalToolFailure(self._command_path, f"failed to launch: {e}") from e

        return f"gs://{self._storage.audio_bucket}/{output_name}"

    def __repr__(self) -> str:
        return f"AudioExtractorCommand(name={self.name}, output_key={self.output_key})"
