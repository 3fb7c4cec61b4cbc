"""End-to-end runs of the transcription pipeline built by the container.

ffmpeg and the Speech-to-Text API are replaced by fakes; the storage mount is
a temporary directory.
"""

from pathlib import Path
import subprocess
from unittest.mock import MagicMock

from dependency_injector import providers
from google.cloud.speech_v2.types import cloud_speech
import pytest

from mediaflow.commands import GCSObject
from mediaflow.containers import Container
from mediaflow.lib.cor import (
    ERROR_COUNTER,
    SUCCESS_COUNTER,
    ConsistencyTimeout,
    ExecutionStatus,
    ExternalToolFailure,
    MissingKey,
    format_errors,
)
from mediaflow.pipelines import new_context
from mediaflow.settings import MediaflowSettings, PollingSettings, StorageSettings


class FakeFfmpeg:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[list[str]] = []

    def __call__(self, argv: list[str], **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(argv)
        if self.returncode:
            raise subprocess.CalledProcessError(self.returncode, argv)
        output = Path(argv[-1])
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(b"RIFF")
        return subprocess.CompletedProcess(argv, 0)


def speech_client_for(audio_uri: str, transcript_uri: str) -> MagicMock:
    operation = MagicMock()
    operation.result.return_value = cloud_speech.BatchRecognizeResponse(
        results={
            audio_uri: cloud_speech.BatchRecognizeFileResult(
                cloud_storage_result=cloud_speech.CloudStorageResult(
                    srt_format_uri=transcript_uri
                )
            )
        }
    )
    client = MagicMock()
    client.batch_recognize.return_value = operation
    return client


@pytest.fixture
def mount(tmp_path: Path) -> Path:
    (tmp_path / "raw").mkdir()
    (tmp_path / "raw" / "video.mp4").write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return tmp_path


@pytest.fixture
def ffmpeg() -> FakeFfmpeg:
    return FakeFfmpeg()


@pytest.fixture
def speech_client() -> MagicMock:
    return speech_client_for("gs://audio/video.wav", "gs://audio/video.srt")


@pytest.fixture
def container(mount: Path, ffmpeg: FakeFfmpeg, speech_client: MagicMock):
    container = Container()
    container.settings.override(
        MediaflowSettings(
            storage=StorageSettings(gcs_fuse_mount_point=mount, audio_bucket="audio"),
            polling=PollingSettings(file_check_retries=2, file_check_delay=0),
        )
    )
    container.speech_client_factory.override(providers.Object(lambda endpoint: speech_client))
    container.audio_extractor.add_kwargs(runner=ffmpeg)
    container.init_resources()
    yield container
    container.shutdown_resources()


def run(container: Container, name: str = "video.mp4"):
    pipeline = container.pipeline_factory().create()
    return container.executor().execute(pipeline, new_context(GCSObject("raw", name)))


class DescribeTranscriptionPipeline:
    def it_extracts_and_transcribes_the_video(
        self, container: Container, mount: Path, ffmpeg: FakeFfmpeg
    ) -> None:
        result = run(container)

        assert result.succeeded()
        assert result.context.get("audio_file") == "gs://audio/video.wav"
        assert result.context.get("transcript_file") == "gs://audio/video.srt"
        assert result.output == "gs://audio/video.srt"
        assert (mount / "audio" / "video.wav").exists()
        assert ffmpeg.calls[0][2] == str(mount / "raw" / "video.mp4")

    def it_counts_runs_per_command(self, container: Container) -> None:
        run(container)
        run(container)

        metrics = container.metrics()
        assert metrics.value(SUCCESS_COUNTER, "AudioExtractor") == 2
        assert metrics.value(SUCCESS_COUNTER, "AudioTranscription") == 2
        assert metrics.value(ERROR_COUNTER, "AudioExtractor") == 0

    def it_cascades_an_extraction_failure_to_the_transcription(
        self, container: Container, ffmpeg: FakeFfmpeg, speech_client: MagicMock
    ) -> None:
        ffmpeg.returncode = 1

        result = run(container)

        assert result.status == ExecutionStatus.COMPLETED
        assert not result.succeeded()
        assert isinstance(result.errors["AudioExtractor"][0], ExternalToolFailure)
        assert isinstance(result.errors["AudioTranscription"][0], MissingKey)
        assert result.output is None
        speech_client.batch_recognize.assert_not_called()

        lines = format_errors(result.context)
        assert len(lines) == 2
        assert lines[0].startswith("AudioExtractor: ExternalToolFailure")
        assert "<- CalledProcessError" in lines[0]

    def it_fails_when_the_video_never_shows_up_on_the_mount(
        self, container: Container, ffmpeg: FakeFfmpeg
    ) -> None:
        result = run(container, "missing.mp4")

        assert isinstance(result.errors["AudioExtractor"][0], ConsistencyTimeout)
        assert ffmpeg.calls == []
        assert container.metrics().value(ERROR_COUNTER, "AudioTranscription") == 1

    def it_keeps_runs_isolated(self, container: Container, ffmpeg: FakeFfmpeg) -> None:
        ffmpeg.returncode = 1
        failed = run(container)
        ffmpeg.returncode = 0
        succeeded = run(container)

        assert not failed.succeeded()
        assert succeeded.succeeded()
        assert not succeeded.context.has_errors()
