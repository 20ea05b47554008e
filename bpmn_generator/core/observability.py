"""
Observability for the BPMN generator.

loguru is the single log sink: records written to the package's stdlib
loggers are forwarded into it, so stage logs and service logs share one
format (console or JSON lines). Spans and metrics go through OpenTelemetry
and stay in memory; read them back with ``ObservabilityManager.metric_snapshot``.

Only the CLI and API entry points initialize the manager. Until then,
library calls record nothing and leave the host's loguru sinks alone.
"""

import contextlib
import functools
import json
import logging
import sys
import time
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union

from loguru import logger
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from bpmn_generator.core.config import LOG_LEVELS, GeneratorConfig
from bpmn_generator.core.exceptions import ConfigurationError

F = TypeVar("F", bound=Callable[..., Any])

PACKAGE_LOGGER = "bpmn_generator"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> "
    "<cyan>{name}:{line}</cyan> {message}"
)


@dataclass
class ObservabilityConfig:
    """Logging, tracing and metrics settings."""

    service_name: str = "bpmn-generator"
    log_level: str = "INFO"
    json_logs: bool = False
    enable_tracing: bool = True
    console_spans: bool = False
    enable_metrics: bool = True
    # Log destination; stderr keeps stdout free for CLI artifacts
    sink: Any = None

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level {self.log_level!r}")
        if self.sink is None:
            self.sink = sys.stderr

    @classmethod
    def from_generator_config(
        cls, config: GeneratorConfig, **overrides: Any
    ) -> "ObservabilityConfig":
        """Observability settings matching a GeneratorConfig, with overrides."""
        values: Dict[str, Any] = {"log_level": config.log_level, "json_logs": config.json_logs}
        values.update(overrides)
        return cls(**values)


class LoguruHandler(logging.Handler):
    """Forwards stdlib ``logging`` records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.patch(
            lambda r: r.update(name=record.name, function=record.funcName, line=record.lineno)
        ).opt(exception=record.exc_info).log(level, record.getMessage())


def _exception_payload(exception: Any) -> Dict[str, str]:
    return {
        "type": exception.type.__name__,
        "value": str(exception.value),
        "traceback": "".join(
            traceback.format_exception(exception.type, exception.value, exception.traceback)
        ),
    }


def format_json_record(record: Dict[str, Any]) -> str:
    """loguru format function emitting one JSON object per line."""
    payload: Dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "location": f"{record['function']}:{record['line']}",
        "message": record["message"],
    }

    extra = {key: value for key, value in record["extra"].items() if not key.startswith("_")}
    if extra:
        payload["extra"] = extra
    if record["exception"]:
        payload["exception"] = _exception_payload(record["exception"])

    # loguru treats the returned string as a format template
    record["extra"]["_json"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[_json]}\n"


class ObservabilityManager:
    """Process-wide logging, tracing and metrics setup (a lazy singleton)."""

    _instance: Optional["ObservabilityManager"] = None

    def __init__(self, config: ObservabilityConfig):
        self.config = config
        self.tracer: Any = None
        self.meter: Any = None
        self.metric_reader: Optional[InMemoryMetricReader] = None
        self._counters: Dict[str, Any] = {}
        self._histograms: Dict[str, Any] = {}

        self._configure_logging()
        if config.enable_tracing:
            self._configure_tracing()
        if config.enable_metrics:
            self._configure_metrics()

        logger.debug(
            f"Observability ready for {config.service_name}: level={config.log_level}, "
            f"tracing={self.tracer is not None}, metrics={self.meter is not None}"
        )

    def _resource(self) -> Resource:
        return Resource(attributes={SERVICE_NAME: self.config.service_name})

    def _configure_logging(self) -> None:
        logger.remove()
        if self.config.json_logs:
            logger.add(
                self.config.sink,
                format=format_json_record,
                level=self.config.log_level,
                colorize=False,
            )
        else:
            logger.add(
                self.config.sink,
                format=CONSOLE_FORMAT,
                level=self.config.log_level,
                colorize=None,
                diagnose=False,
            )

        package_logger = logging.getLogger(PACKAGE_LOGGER)
        for handler in list(package_logger.handlers):
            if isinstance(handler, LoguruHandler):
                package_logger.removeHandler(handler)
        package_logger.addHandler(LoguruHandler())
        package_logger.setLevel(self.config.log_level)

    def _configure_tracing(self) -> None:
        provider = TracerProvider(resource=self._resource())
        if self.config.console_spans:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        self.tracer = provider.get_tracer(PACKAGE_LOGGER)

    def _configure_metrics(self) -> None:
        self.metric_reader = InMemoryMetricReader()
        provider = MeterProvider(resource=self._resource(), metric_readers=[self.metric_reader])
        self.meter = provider.get_meter(PACKAGE_LOGGER)

    def counter(self, name: str) -> Any:
        """Counter instrument for ``name``, created on first use."""
        if name not in self._counters:
            self._counters[name] = self.meter.create_counter(name, unit="1")
        return self._counters[name]

    def histogram(self, name: str) -> Any:
        """Millisecond histogram for ``name``, created on first use."""
        if name not in self._histograms:
            self._histograms[name] = self.meter.create_histogram(name, unit="ms")
        return self._histograms[name]

    def metric_snapshot(self) -> Dict[str, float]:
        """Totals per metric name: counter sums and histogram sums."""
        if self.metric_reader is None:
            return {}
        data = self.metric_reader.get_metrics_data()
        if data is None:
            return {}

        totals: Dict[str, float] = {}
        for resource_metrics in data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    points = metric.data.data_points
                    totals[metric.name] = sum(
                        p.sum if hasattr(p, "sum") else p.value for p in points
                    )
        return totals

    @classmethod
    def initialize(cls, config: Optional[ObservabilityConfig] = None) -> "ObservabilityManager":
        """Configure the singleton unless it already exists."""
        if cls._instance is None:
            cls._instance = cls(config or ObservabilityConfig())
        return cls._instance

    @classmethod
    def get_instance(cls) -> "ObservabilityManager":
        return cls.initialize()

    @classmethod
    def current(cls) -> Optional["ObservabilityManager"]:
        """The configured singleton, or None before an entry point initializes it."""
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next call reconfigures from scratch."""
        cls._instance = None


@contextlib.contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
    """Run the block inside an OpenTelemetry span; yields None when tracing is off."""
    manager = ObservabilityManager.current()
    tracer = manager.tracer if manager is not None else None
    if tracer is None:
        yield None
        return
    with tracer.start_as_current_span(name, attributes=attributes) as current:
        yield current


def record_metric(
    metric_name: str,
    value: Union[int, float],
    attributes: Optional[Dict[str, str]] = None,
) -> None:
    """
    Record a metric value.

    Names ending in ``_total`` are counters; everything else goes to a
    millisecond histogram of the same name.
    """
    manager = ObservabilityManager.current()
    if manager is not None and manager.meter is not None:
        if metric_name.endswith("_total"):
            manager.counter(metric_name).add(value, attributes=attributes)
        else:
            manager.histogram(metric_name).record(value, attributes=attributes)

    logger.bind(metric=metric_name, value=value).trace(f"Metric {metric_name}={value}")


def _preview(value: Any) -> str:
    return repr(value)[:200]


def log_execution(level: str = "DEBUG", include_result: bool = True) -> Callable[[F], F]:
    """
    Decorator logging a call's duration and result, or its failure.

    Args:
        level: loguru level for successful calls
        include_result: Whether to log a preview of the return value
    """

    def decorator(func: F) -> F:
        qualname = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.opt(exception=True).bind(call=qualname).error(
                    f"{qualname} failed after {elapsed_ms:.1f}ms"
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            record_metric(f"{func.__name__}_duration", elapsed_ms)
            details: Dict[str, Any] = {"call": qualname, "duration_ms": round(elapsed_ms, 3)}
            if include_result:
                details["result"] = _preview(result)
            logger.bind(**details).log(level, f"{qualname} finished in {elapsed_ms:.1f}ms")
            return result

        return wrapper  # type: ignore

    return decorator


class Timer:
    """Context manager measuring a block and recording ``<name>_duration``."""

    def __init__(self, name: str, record: bool = True):
        self.name = name
        self.record = record
        self.elapsed: float = 0.0
        self._started: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed = time.perf_counter() - self._started
        if self.record:
            record_metric(f"{self.name}_duration", self.elapsed_ms)

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000


__all__ = [
    "CONSOLE_FORMAT",
    "LoguruHandler",
    "ObservabilityConfig",
    "ObservabilityManager",
    "Timer",
    "format_json_record",
    "log_execution",
    "record_metric",
    "span",
]
