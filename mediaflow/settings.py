"""Application settings using Pydantic Settings.

This module defines the MediaflowSettings class which loads configuration
from environment variables and .env files using pydantic-settings.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediaflow.lib.cor.polling import DEFAULT_ATTEMPTS, DEFAULT_DELAY


class StorageSettings(BaseSettings):
    """Storage-related settings.

    Attributes:
        gcs_fuse_mount_point (Path): Local directory where buckets are mounted.
        audio_bucket (str): Bucket receiving extracted audio files.
        transcript_bucket (str | None): Bucket receiving transcripts. Defaults
            to the audio bucket.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIAFLOW_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    gcs_fuse_mount_point: Path = Field(
        default=Path("/mnt/gcs"),
        description="Local mount point of the GCS buckets",
    )
    audio_bucket: str = Field(default="audio", description="Bucket for extracted audio")
    transcript_bucket: str | None = Field(
        default=None,
        description="Bucket for transcripts (defaults to the audio bucket)",
    )

    @property
    def effective_transcript_bucket(self) -> str:
        return self.transcript_bucket or self.audio_bucket

    def mounted_path(self, bucket: str, object_name: str) -> Path:
        """Local path of an object as seen through the mount."""
        return self.gcs_fuse_mount_point / bucket / object_name


class ApplicationSettings(BaseSettings):
    """Settings of the external tools and remote services used by commands."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIAFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    google_project_id: str = Field(default="", description="GCP project ID")
    google_location: str = Field(default="us-central1", description="GCP region")
    ffmpeg_path: str = Field(default="ffmpeg", description="Path to the ffmpeg binary")
    language_codes: list[str] = Field(
        default_factory=lambda: ["en-US"],
        description="Language codes used for transcription",
    )
    speech_model: str = Field(default="chirp_2", description="Speech-to-Text model")


class PollingSettings(BaseSettings):
    """Settings of the consistency poller."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIAFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    file_check_retries: int = Field(
        default=DEFAULT_ATTEMPTS,
        ge=1,
        description="Number of times to check for a file",
    )
    file_check_delay: float = Field(
        default=DEFAULT_DELAY,
        ge=0,
        description="Seconds to wait between file checks",
    )


class MetricsSettings(BaseSettings):
    """OpenTelemetry export settings of the command counters.

    Attributes:
        exporter (str): "none" keeps counters in process, "console" prints
            them to stdout and "otlp" pushes them to an OTLP/HTTP collector.
        otlp_endpoint (str): Collector metrics endpoint.
        otlp_headers (dict[str, str]): Extra headers sent to the collector.
        export_interval (float): Seconds between two periodic exports.
        service_name (str): `service.name` resource attribute.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIAFLOW_METRICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    exporter: Literal["none", "console", "otlp"] = Field(
        default="none",
        description="Where command counters are exported",
    )
    otlp_endpoint: str = Field(
        default="http://localhost:4318/v1/metrics",
        description="OTLP/HTTP metrics endpoint",
    )
    otlp_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every OTLP export",
    )
    export_interval: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between periodic exports",
    )
    service_name: str = Field(default="mediaflow", description="Telemetry service name")


class MediaflowSettings(BaseSettings):
    """Root settings class that composes all settings groups."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIAFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug diagnostics in logs")
    log_level: str = Field(default="INFO", description="Minimum log level")
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error tracking")
    pipeline_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for a whole pipeline run",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
