"""Command transcribing an audio file with the Speech-to-Text v2 batch API."""

from typing import TYPE_CHECKING, Callable

from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.speech_v2 import SpeechClient
from google.cloud.speech_v2.types import cloud_speech
from loguru import logger

from mediaflow.lib.cor import (
    CTX_OUT,
    CommandError,
    Context,
    ContextKey,
    Instrumentation,
    MetricsRecorder,
    RemoteCallFailure,
    RemoteOperationFailure,
)
from mediaflow.settings import ApplicationSettings, StorageSettings

if TYPE_CHECKING:
    from google.api_core.operation import Operation

type SpeechClientFactory = Callable[[str], SpeechClient]
"""Builds a Speech client for a regional API endpoint."""


def speech_endpoint(location: str) -> str:
    return f"{location}-speech.googleapis.com"


def create_speech_client(endpoint: str) -> SpeechClient:
    """Create a Speech client talking to `endpoint`."""
    return SpeechClient(client_options=ClientOptions(api_endpoint=endpoint))


class AudioTranscriptionCommand:
    """Transcribes the audio file whose URI is stored under the input key.

    The transcription runs as a batch long-running operation; the command
    blocks until it completes (bounded by the context scope deadline). The
    SRT transcript is written by the service to the transcript bucket and its
    URI is stored under the output key and under `CTX_OUT`.

    Args:
        name: The command name.
        metrics: Recorder issuing the command counters.
        application: Project, location, model and language settings.
        storage: Bucket settings.
        input_key: Context key holding the `gs://` URI of the audio file.
        output_key: Context key receiving the transcript URI.
        client_factory: Builds the Speech client for an endpoint.
    """

    def __init__(
        self,
        name: str,
        metrics: MetricsRecorder,
        application: ApplicationSettings,
        storage: StorageSettings,
        *,
        input_key: str = "audio_file",
        output_key: str = "transcript_file",
        client_factory: SpeechClientFactory = create_speech_client,
    ) -> None:
        self._instrumentation = Instrumentation(name, metrics, input_key, output_key)
        self._input = ContextKey(input_key, str)
        self._application = application
        self._storage = storage
        self._client_factory = client_factory

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

    @property
    def recognizer(self) -> str:
        return (
            f"projects/{self._application.google_project_id}"
            f"/locations/{self._application.google_location}/recognizers/_"
        )

    def build_request(self, audio_uri: str) -> cloud_speech.BatchRecognizeRequest:
        """Build the batch recognition request for a single audio file."""
        config = cloud_speech.RecognitionConfig(
            auto_decoding_config=cloud_speech.AutoDetectDecodingConfig(),
            language_codes=list(self._application.language_codes),
            model=self._application.speech_model,
            features=cloud_speech.RecognitionFeatures(
                enable_word_time_offsets=True,
                enable_automatic_punctuation=True,
            ),
        )
        return cloud_speech.BatchRecognizeRequest(
            recognizer=self.recognizer,
            config=config,
            files=[cloud_speech.BatchRecognizeFileMetadata(uri=audio_uri)],
            recognition_output_config=cloud_speech.RecognitionOutputConfig(
                gcs_output_config=cloud_speech.GcsOutputConfig(
                    uri=f"gs://{self._storage.effective_transcript_bucket}",
                ),
                output_format_config=cloud_speech.OutputFormatConfig(
                    srt=cloud_speech.SrtOutputFileFormatConfig(),
                ),
            ),
        )

    def execute(self, ctx: Context) -> None:
        try:
            transcript_uri = self._transcribe(ctx)
        except CommandError as e:
            self._instrumentation.record_failure(ctx, e)
            return
        self._instrumentation.record_success(ctx, transcript_uri)
        CTX_OUT.set(ctx, transcript_uri)

    def _transcribe(self, ctx: Context) -> str:
        audio_uri = self._input.get(ctx)
        scope = ctx.scope()
        scope.raise_if_done()

        endpoint = speech_endpoint(self._application.google_location)
        try:
            client = self._client_factory(endpoint)
        except (GoogleAPIError, GoogleAuthError) as e:
            raise RemoteCallFailure("create speech client", str(e)) from e

        try:
            operation = self._submit(client, audio_uri)
            try:
                response = operation.result(timeout=scope.remaining())
            except (GoogleAPIError, TimeoutError) as e:
                raise RemoteCallFailure("wait for batch_recognize", str(e)) from e
        finally:
            client.transport.close()

        if audio_uri not in response.results:
            raise RemoteOperationFailure(audio_uri, "no result found for file")

        file_result = response.results[audio_uri]
        if file_result.error.code:
            raise RemoteOperationFailure(
                audio_uri,
                f"transcription error {file_result.error.code}: {file_result.error.message}",
            )

        transcript_uri = file_result.cloud_storage_result.srt_format_uri
        logger.info(f"Transcription result written to: {transcript_uri}")
        return transcript_uri

    def _submit(self, client: SpeechClient, audio_uri: str) -> "Operation":
        try:
            return client.batch_recognize(request=self.build_request(audio_uri))
        except GoogleAPIError as e:
            raise RemoteCallFailure("batch_recognize", str(e)) from e

    def __repr__(self) -> str:
        return f"AudioTranscriptionCommand(name={self.name}, input_key={self.input_key})"
