from loguru import logger
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)

from mediaflow.settings import MetricsSettings


def create_metric_readers(settings: MetricsSettings) -> list[MetricReader]:
    """Build the periodic readers exporting the command counters.

    Returns:
        One reader for the configured exporter, or none when counters stay
        in process.
    """
    exporter: MetricExporter
    if settings.exporter == "console":
        exporter = ConsoleMetricExporter()
    elif settings.exporter == "otlp":
        exporter = OTLPMetricExporter(
            endpoint=settings.otlp_endpoint,
            headers=settings.otlp_headers or None,
        )
    else:
        return []

    logger.info(f"Exporting command counters to {settings.exporter}")
    return [
        PeriodicExportingMetricReader(
            exporter, export_interval_millis=settings.export_interval * 1000
        )
    ]
