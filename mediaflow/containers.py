"""Dependency injection container for the mediaflow application.

This module defines the Container class which manages all application
dependencies using dependency-injector. Services are accessed through the
module-level `container` instance.
"""

from dependency_injector import containers, providers
from loguru import logger

from mediaflow.commands import (
    AudioExtractorCommand,
    AudioTranscriptionCommand,
    create_speech_client,
)
from mediaflow.config.logging import LoggingObserver
from mediaflow.config.telemetry import create_metric_readers
from mediaflow.lib.cor import ConsistencyPoller, PipelineExecutor
from mediaflow.lib.cor.metrics import init_metrics
from mediaflow.pipelines import TranscriptionPipelineFactory
from mediaflow.settings import MediaflowSettings


class Container(containers.DeclarativeContainer):
    """Main dependency injection container for the mediaflow application."""

    # Root settings - loaded from environment/.env
    settings = providers.Singleton(MediaflowSettings)

    log = providers.Object(logger)

    # --- Observability ---

    metric_readers = providers.Callable(create_metric_readers, settings.provided.metrics)

    # Meter provider shut down (and exporters flushed) on shutdown_resources()
    metrics = providers.Resource(
        init_metrics,
        readers=metric_readers,
        service_name=settings.provided.metrics.service_name,
    )

    # --- Commands ---

    poller = providers.Factory(
        ConsistencyPoller,
        attempts=settings.provided.polling.file_check_retries,
        delay=settings.provided.polling.file_check_delay,
    )

    speech_client_factory = providers.Object(create_speech_client)

    audio_extractor = providers.Factory(
        AudioExtractorCommand,
        metrics=metrics,
        storage=settings.provided.storage,
        command_path=settings.provided.application.ffmpeg_path,
        poller=poller,
    )

    audio_transcriber = providers.Factory(
        AudioTranscriptionCommand,
        metrics=metrics,
        application=settings.provided.application,
        storage=settings.provided.storage,
        client_factory=speech_client_factory,
    )

    # --- Pipelines ---

    pipeline_factory = providers.Factory(
        TranscriptionPipelineFactory,
        extractor_provider=audio_extractor.provider,
        transcriber_provider=audio_transcriber.provider,
    )

    executor = providers.Factory(
        PipelineExecutor,
        observers=providers.List(providers.Singleton(LoggingObserver)),
        metrics=metrics,
    )


def create_container() -> Container:
    """Create the DI container.

    Returns:
        Container instance. Resources are initialized on first use or by
        `init_resources()`.
    """
    container = Container()
    return container


# Global container instance
container = create_container()
