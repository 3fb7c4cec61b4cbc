from unittest.mock import patch

from opentelemetry.sdk.metrics.export import ConsoleMetricExporter

from mediaflow.config.telemetry import create_metric_readers
from mediaflow.settings import MetricsSettings


class DescribeCreateMetricReaders:
    def it_exports_nothing_by_default(self) -> None:
        assert create_metric_readers(MetricsSettings(exporter="none")) == []

    def it_prints_to_the_console_on_request(self) -> None:
        settings = MetricsSettings(exporter="console", export_interval=5)

        with patch("mediaflow.config.telemetry.PeriodicExportingMetricReader") as reader_cls:
            [reader] = create_metric_readers(settings)

        assert reader is reader_cls.return_value
        exporter = reader_cls.call_args.args[0]
        assert isinstance(exporter, ConsoleMetricExporter)
        assert reader_cls.call_args.kwargs["export_interval_millis"] == 5000

    def it_pushes_to_an_otlp_collector(self) -> None:
        settings = MetricsSettings(
            exporter="otlp",
            otlp_endpoint="http://collector:4318/v1/metrics",
            otlp_headers={"x-team": "media"},
        )

        with (
            patch("mediaflow.config.telemetry.PeriodicExportingMetricReader") as reader_cls,
            patch("mediaflow.config.telemetry.OTLPMetricExporter") as exporter_cls,
        ):
            create_metric_readers(settings)

        exporter_cls.assert_called_once_with(
            endpoint="http://collector:4318/v1/metrics", headers={"x-team": "media"}
        )
        assert reader_cls.call_args.args[0] is exporter_cls.return_value
