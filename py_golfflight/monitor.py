"""Operation timing for simulations and optimizer runs.

The optimizer evaluator reports through the narrow MetricsRecorder protocol, so any telemetry
backend with a `record(name, value)` method can be plugged in. PerformanceMonitor is the
in-process implementation: it times named operations and keeps per-name aggregates.

Examples:
    ```python
    monitor = PerformanceMonitor()
    with monitor.track('simulate_flight'):
        engine.simulate_flight(state, environment, properties)
    print(monitor.get_metrics()['simulate_flight'].mean)
    ```
"""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass

from typing_extensions import Callable, Dict, Iterator, Protocol, runtime_checkable

from py_golfflight.logger import logger

__all__ = (
    'MetricsRecorder',
    'OperationMetrics',
    'PerformanceMonitor',
)


@runtime_checkable
class MetricsRecorder(Protocol):
    """Anything that accepts named numeric samples."""

    def record(self, name: str, value: float) -> None:
        ...


@dataclass
class OperationMetrics:
    """Aggregated samples for one operation name, in seconds."""

    count: int = 0
    total: float = 0.0
    minimum: float = float('inf')
    maximum: float = 0.0

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.minimum = min(self.minimum, value)
        self.maximum = max(self.maximum, value)


class PerformanceMonitor:
    """Thread-safe timer and sample aggregator."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._started: Dict[str, float] = {}
        self._metrics: Dict[str, OperationMetrics] = {}

    def record(self, name: str, value: float) -> None:
        with self._lock:
            self._metrics.setdefault(name, OperationMetrics()).add(value)

    def start_operation(self, operation_id: str) -> None:
        """Start timing `operation_id`. Restarting a running id resets its start time."""
        with self._lock:
            self._started[operation_id] = self._clock()

    def end_operation(self, operation_id: str, name: str = '') -> float:
        """Stop timing `operation_id` and record the elapsed seconds under `name` (default: the id).

        Returns:
            Elapsed seconds, or 0.0 if the operation was never started.
        """
        with self._lock:
            started = self._started.pop(operation_id, None)
        if started is None:
            logger.warning(f"Operation {operation_id!r} ended without being started")
            return 0.0
        elapsed = self._clock() - started
        self.record(name or operation_id, elapsed)
        return elapsed

    @contextmanager
    def track(self, name: str) -> Iterator[None]:
        started = self._clock()
        try:
            yield
        finally:
            self.record(name, self._clock() - started)

    def get_metrics(self) -> Dict[str, OperationMetrics]:
        """Copy of the aggregates, keyed by operation name."""
        with self._lock:
            return {name: OperationMetrics(m.count, m.total, m.minimum, m.maximum)
                    for name, m in self._metrics.items()}

    def clear(self) -> None:
        with self._lock:
            self._started.clear()
            self._metrics.clear()
