import subprocess

from mediaflow.lib.cor import Context, ExternalToolFailure, MissingKey, format_errors
from mediaflow.lib.cor.reporting import describe_error


def raise_wrapped() -> ExternalToolFailure:
    try:
        try:
            raise subprocess.CalledProcessError(1, ["ffmpeg"])
        except subprocess.CalledProcessError as e:
            raise ExternalToolFailure("ffmpeg", "exit status 1", 1) from e
    except ExternalToolFailure as wrapped:
        return wrapped


class DescribeDescribeError:
    def it_renders_type_and_message(self) -> None:
        assert describe_error(ValueError("bad")) == "ValueError: bad"

    def it_appends_the_cause_chain(self) -> None:
        rendered = describe_error(raise_wrapped())

        assert rendered.startswith("ExternalToolFailure: Error running 'ffmpeg': exit status 1")
        assert " <- CalledProcessError: " in rendered

    def it_skips_suppressed_contexts(self) -> None:
        try:
            Context().get("audio_file")
        except MissingKey as e:
            error = e

        assert describe_error(error) == "MissingKey: Context key 'audio_file' is not set"


class DescribeFormatErrors:
    def it_renders_one_line_per_error(self) -> None:
        ctx = Context()
        ctx.add_error("AudioExtractor", raise_wrapped())
        ctx.add_error("AudioTranscription", MissingKey("audio_file"))

        lines = format_errors(ctx)

        assert len(lines) == 2
        assert lines[0].startswith("AudioExtractor: ExternalToolFailure")
        assert lines[1] == "AudioTranscription: MissingKey: Context key 'audio_file' is not set"

    def it_returns_nothing_for_clean_contexts(self) -> None:
        assert format_errors(Context()) == []
