import pytest

from mediaflow.lib.cor import DuplicateCommandError, FunctionCommand, MetricsRecorder, Pipeline


@pytest.fixture
def metrics() -> MetricsRecorder:
    return MetricsRecorder()


class DescribePipeline:
    def it_keeps_commands_in_insertion_order(self, metrics: MetricsRecorder) -> None:
        first = FunctionCommand("first", lambda ctx, value: None, metrics)
        second = FunctionCommand("second", lambda ctx, value: None, metrics)

        pipeline = Pipeline("test").add(first).add(second)

        assert pipeline.commands == [first, second]
        assert list(pipeline) == [first, second]
        assert len(pipeline) == 2

    def it_accepts_initial_commands(self, metrics: MetricsRecorder) -> None:
        pipeline = Pipeline("test", [FunctionCommand("only", lambda ctx, value: None, metrics)])

        assert [c.name for c in pipeline] == ["only"]

    def it_rejects_duplicate_command_names(self, metrics: MetricsRecorder) -> None:
        pipeline = Pipeline("test").add(FunctionCommand("same", lambda ctx, value: None, metrics))

        with pytest.raises(DuplicateCommandError, match="same"):
            pipeline.add(FunctionCommand("same", lambda ctx, value: None, metrics))

    def it_returns_a_copy_of_its_commands(self, metrics: MetricsRecorder) -> None:
        pipeline = Pipeline("test", [FunctionCommand("only", lambda ctx, value: None, metrics)])

        pipeline.commands.clear()

        assert len(pipeline) == 1

    def it_shows_command_names_in_repr(self, metrics: MetricsRecorder) -> None:
        pipeline = Pipeline("test", [FunctionCommand("a", lambda ctx, value: None, metrics)])

        assert repr(pipeline) == "test(commands=[a])"
