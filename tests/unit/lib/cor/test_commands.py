from typing import Any

import pytest

from mediaflow.lib.cor import (
    ERROR_COUNTER,
    SUCCESS_COUNTER,
    Command,
    CommandError,
    Context,
    FunctionCommand,
    Instrumentation,
    MetricsRecorder,
    MissingKey,
)


@pytest.fixture
def metrics() -> MetricsRecorder:
    return MetricsRecorder()


class DescribeInstrumentation:
    def it_rejects_empty_names(self, metrics: MetricsRecorder) -> None:
        with pytest.raises(ValueError):
            Instrumentation(" ", metrics)

    def it_records_success_and_writes_the_output_key(self, metrics: MetricsRecorder) -> None:
        instrumentation = Instrumentation("Extract", metrics, output_key="audio_file")
        ctx = Context()

        instrumentation.record_success(ctx, "gs://audio/video.wav")

        assert ctx.get("audio_file") == "gs://audio/video.wav"
        assert metrics.value(SUCCESS_COUNTER, "Extract") == 1

    def it_does_not_write_without_output_key(self, metrics: MetricsRecorder) -> None:
        instrumentation = Instrumentation("Notify", metrics)
        ctx = Context()

        instrumentation.record_success(ctx, "ignored")

        assert ctx.keys() == []

    def it_records_failures_under_the_command_name(self, metrics: MetricsRecorder) -> None:
        instrumentation = Instrumentation("Extract", metrics, output_key="audio_file")
        ctx = Context()
        error = CommandError("boom")

        instrumentation.record_failure(ctx, error)

        assert ctx.errors_for("Extract") == [error]
        assert not ctx.has("audio_file")
        assert metrics.value(ERROR_COUNTER, "Extract") == 1

    def it_shares_counters_between_commands_with_the_same_name(
        self, metrics: MetricsRecorder
    ) -> None:
        first = Instrumentation("Extract", metrics)
        second = Instrumentation("Extract", metrics)

        assert first.success_counter is second.success_counter


class DescribeFunctionCommand:
    def it_satisfies_the_command_protocol(self, metrics: MetricsRecorder) -> None:
        command = FunctionCommand("Noop", lambda ctx, value: None, metrics)

        assert isinstance(command, Command)

    def it_passes_the_input_value_and_stores_the_result(self, metrics: MetricsRecorder) -> None:
        command = FunctionCommand(
            "Upper",
            lambda ctx, value: value.upper(),
            metrics,
            input_key="text",
            output_key="upper",
        )
        ctx = Context(params={"text": "hello"})

        command.execute(ctx)

        assert ctx.get("upper") == "HELLO"
        assert not ctx.has_errors()

    def it_records_missing_input_keys(self, metrics: MetricsRecorder) -> None:
        command = FunctionCommand("Upper", lambda ctx, value: value, metrics, input_key="text")
        ctx = Context()

        command.execute(ctx)

        [error] = ctx.errors_for("Upper")
        assert isinstance(error, MissingKey)
        assert metrics.value(ERROR_COUNTER, "Upper") == 1

    def it_records_command_errors_raised_by_the_function(self, metrics: MetricsRecorder) -> None:
        def fail(ctx: Context, value: Any) -> Any:
            raise CommandError("failed")

        command = FunctionCommand("Fail", fail, metrics, output_key="out")
        ctx = Context()

        command.execute(ctx)

        assert len(ctx.errors_for("Fail")) == 1
        assert not ctx.has("out")

    def it_counts_repeated_executions(self, metrics: MetricsRecorder) -> None:
        command = FunctionCommand("Echo", lambda ctx, value: value, metrics, "in", "out")

        for _ in range(3):
            command.execute(Context(params={"in": 1}))
        for _ in range(2):
            command.execute(Context())

        assert metrics.value(SUCCESS_COUNTER, "Echo") == 3
        assert metrics.value(ERROR_COUNTER, "Echo") == 2
