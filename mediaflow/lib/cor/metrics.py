"""Per-command counters recorded through OpenTelemetry.

The `MetricsRecorder` is an explicit dependency: it owns the process
`MeterProvider`, is created once at process start (see `mediaflow.containers`),
handed to every command at construction time, and shut down on exit, which
flushes every configured exporter.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import threading

from loguru import logger
from opentelemetry.metrics import Counter as Instrument
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader, MetricReader
from opentelemetry.sdk.resources import Resource

SUCCESS_COUNTER = "command.success"
ERROR_COUNTER = "command.error"
COMMAND_ATTRIBUTE = "command"
METER_NAME = "mediaflow.commands"

type CounterValues = dict[tuple[str, str], int]


@dataclass(frozen=True)
class CounterSnapshot:
    """Point-in-time value of a single counter."""

    name: str
    command: str
    value: int


class Counter:
    """Monotonic OpenTelemetry counter bound to one command name."""

    def __init__(
        self, name: str, command: str, instrument: Instrument, recorder: "MetricsRecorder"
    ) -> None:
        self._name = name
        self._command = command
        self._instrument = instrument
        self._recorder = recorder
        self._attributes = {COMMAND_ATTRIBUTE: command}

    def add(self, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError("Counter values can only increase")
        self._instrument.add(amount, attributes=self._attributes)

    @property
    def name(self) -> str:
        return self._name

    @property
    def command(self) -> str:
        return self._command

    @property
    def value(self) -> int:
        return self._recorder.value(self._name, self._command)

    def snapshot(self) -> CounterSnapshot:
        return CounterSnapshot(self._name, self._command, self.value)

    def __repr__(self) -> str:
        return f"Counter(name={self._name}, command={self._command})"


class MetricsRecorder:
    """Issues one success and one error counter per command name.

    Both counters are OpenTelemetry instruments created on a private
    `MeterProvider`; the command name is carried as the `command` attribute.
    An in-memory reader is always registered so current values can be read
    back in process, next to the exporting `readers`. Counters are never
    reset, and counters that were never incremented are not reported.

    Args:
        readers: Additional metric readers, usually periodic exporters.
        service_name: Value of the `service.name` resource attribute.
    """

    def __init__(
        self, readers: Sequence[MetricReader] = (), service_name: str = "mediaflow"
    ) -> None:
        self._reader = InMemoryMetricReader()
        self._provider = MeterProvider(
            resource=Resource.create({"service.name": service_name}),
            metric_readers=[self._reader, *readers],
        )
        meter = self._provider.get_meter(METER_NAME)
        self._instruments: dict[str, Instrument] = {
            SUCCESS_COUNTER: meter.create_counter(
                SUCCESS_COUNTER, unit="1", description="Successful command executions"
            ),
            ERROR_COUNTER: meter.create_counter(
                ERROR_COUNTER, unit="1", description="Failed command executions"
            ),
        }
        self._counters: dict[tuple[str, str], Counter] = {}
        self._lock = threading.Lock()
        self._final: CounterValues | None = None

    def counter(self, name: str, command: str) -> Counter:
        """Get or create the counter `name` for `command`."""
        if self.closed:
            raise RuntimeError("MetricsRecorder has been shut down")
        if name not in self._instruments:
            raise ValueError(f"Unknown counter '{name}'")
        key = (name, command)
        with self._lock:
            if key not in self._counters:
                self._counters[key] = Counter(name, command, self._instruments[name], self)
            return self._counters[key]

    def command_counters(self, command: str) -> tuple[Counter, Counter]:
        """Return the `(success, error)` counters for a command."""
        return self.counter(SUCCESS_COUNTER, command), self.counter(ERROR_COUNTER, command)

    def snapshot(self) -> list[CounterSnapshot]:
        values = self._values()
        keys = sorted(values, key=lambda key: (key[1], key[0]))
        return [CounterSnapshot(name, command, values[(name, command)]) for name, command in keys]

    def value(self, name: str, command: str) -> int:
        return self._values().get((name, command), 0)

    def flush(self) -> None:
        """Push the current values through every exporting reader."""
        self._provider.force_flush()

    def shutdown(self) -> None:
        """Keep a final snapshot, then shut the provider and its exporters down."""
        if self.closed:
            return
        self._final = self._collect()
        self._provider.shutdown()
        for snapshot in self.snapshot():
            logger.debug(f"{snapshot.name}{{command={snapshot.command}}} = {snapshot.value}")

    @property
    def closed(self) -> bool:
        return self._final is not None

    def _values(self) -> CounterValues:
        return self._final if self._final is not None else self._collect()

    def _collect(self) -> CounterValues:
        values: CounterValues = {}
        data = self._reader.get_metrics_data()
        if data is None:
            return values
        for resource_metrics in data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    for point in metric.data.data_points:
                        command = point.attributes.get(COMMAND_ATTRIBUTE)
                        if command is not None:
                            values[(metric.name, str(command))] = int(point.value)
        return values


def init_metrics(
    readers: Sequence[MetricReader] = (), service_name: str = "mediaflow"
) -> Iterator[MetricsRecorder]:
    """Resource initializer tying the recorder lifecycle to the container.

    Yields the recorder on `init_resources()` and shuts its meter provider
    down on `shutdown_resources()`.
    """
    recorder = MetricsRecorder(readers, service_name)
    logger.debug(f"Metrics recorder initialized with {len(readers)} exporting reader(s)")
    try:
        yield recorder
    finally:
        recorder.shutdown()
        logger.debug("Metrics recorder shut down")
