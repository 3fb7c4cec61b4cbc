from unittest.mock import MagicMock, patch

from loguru import logger
import pytest

from mediaflow.config.logging import LoggingObserver, configure_logging
from mediaflow.lib.cor import (
    CommandError,
    CommandTrace,
    Context,
    ExecutionResult,
    ExecutionStatus,
    FunctionCommand,
    MetricsRecorder,
    Pipeline,
    PipelineExecutor,
)
from mediaflow.settings import MediaflowSettings


@pytest.fixture
def messages():
    records: list[str] = []
    handler_id = logger.add(lambda message: records.append(message.record["message"]))
    yield records
    logger.remove(handler_id)


class DescribeLoggingObserver:
    def it_logs_command_lifecycle_events(self, messages: list[str]) -> None:
        metrics = MetricsRecorder()
        command = FunctionCommand("AudioExtractor", lambda ctx, value: None, metrics)

        PipelineExecutor([LoggingObserver()]).execute(Pipeline("transcription", [command]))

        assert "Starting pipeline 'transcription'" in messages
        assert "transcription.AudioExtractor: Starting" in messages
        assert any(m.startswith("transcription.AudioExtractor: Completed") for m in messages)
        assert "Pipeline 'transcription' finished successfully" in messages

    def it_logs_failures(self, messages: list[str]) -> None:
        pipeline = Pipeline("transcription")
        command = MagicMock()
        command.name = "AudioExtractor"
        trace = CommandTrace("AudioExtractor", 0.1, [CommandError("boom")])

        LoggingObserver().on_command_finish(pipeline, command, trace)

        assert "transcription.AudioExtractor: Failed with CommandError: boom" in messages

    def it_lists_failed_commands_when_the_pipeline_finishes(self, messages: list[str]) -> None:
        ctx = Context()
        ctx.add_error("AudioExtractor", CommandError("boom"))
        result = ExecutionResult("transcription", ExecutionStatus.COMPLETED, [], ctx)

        LoggingObserver().on_pipeline_finish(Pipeline("transcription"), result)

        assert "Pipeline 'transcription' finished with errors in: AudioExtractor" in messages


class DescribeConfigureLogging:
    def it_replaces_the_default_handler(self) -> None:
        with patch("mediaflow.config.logging.logger") as mock_logger:
            configure_logging(MediaflowSettings(log_level="debug", debug=True))

        mock_logger.remove.assert_called_once_with()
        kwargs = mock_logger.add.call_args.kwargs
        assert kwargs["level"] == "DEBUG"
        assert kwargs["serialize"] is True
        assert kwargs["diagnose"] is True
