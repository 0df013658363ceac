import threading

import pytest

from py_golfflight import MetricsRecorder, OperationMetrics, PerformanceMonitor


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestPerformanceMonitor:

    def test_record_aggregates(self):
        monitor = PerformanceMonitor()
        for value in (0.5, 1.5, 1.0):
            monitor.record('step', value)
        metrics = monitor.get_metrics()['step']
        assert metrics.count == 3
        assert metrics.total == pytest.approx(3.0)
        assert metrics.mean == pytest.approx(1.0)
        assert metrics.minimum == 0.5
        assert metrics.maximum == 1.5

    def test_empty_metrics_mean(self):
        assert OperationMetrics().mean == 0.0

    def test_start_and_end_operation(self):
        clock = FakeClock()
        monitor = PerformanceMonitor(clock=clock)
        monitor.start_operation('op-1')
        clock.now = 2.5
        assert monitor.end_operation('op-1', 'optimize') == pytest.approx(2.5)
        assert monitor.get_metrics()['optimize'].count == 1
        assert 'op-1' not in monitor.get_metrics()

    def test_end_operation_defaults_name_to_id(self):
        clock = FakeClock()
        monitor = PerformanceMonitor(clock=clock)
        monitor.start_operation('fire')
        clock.now = 0.25
        monitor.end_operation('fire')
        assert monitor.get_metrics()['fire'].total == pytest.approx(0.25)

    def test_end_unknown_operation(self, caplog):
        monitor = PerformanceMonitor()
        with caplog.at_level('WARNING', logger='py_golfflight'):
            assert monitor.end_operation('never-started') == 0.0
        assert 'never-started' in caplog.text
        assert monitor.get_metrics() == {}

    def test_track(self):
        clock = FakeClock()
        monitor = PerformanceMonitor(clock=clock)
        with monitor.track('simulate_flight'):
            clock.now = 0.1
        with pytest.raises(RuntimeError):
            with monitor.track('simulate_flight'):
                clock.now = 0.4
                raise RuntimeError("boom")
        metrics = monitor.get_metrics()['simulate_flight']
        assert metrics.count == 2
        assert metrics.total == pytest.approx(0.4)

    def test_get_metrics_returns_copy(self):
        monitor = PerformanceMonitor()
        monitor.record('a', 1.0)
        snapshot = monitor.get_metrics()
        snapshot['a'].add(10.0)
        assert monitor.get_metrics()['a'].count == 1

    def test_clear(self):
        monitor = PerformanceMonitor()
        monitor.record('a', 1.0)
        monitor.start_operation('b')
        monitor.clear()
        assert monitor.get_metrics() == {}
        assert monitor.end_operation('b') == 0.0

    def test_concurrent_records(self):
        monitor = PerformanceMonitor()

        def worker():
            for _ in range(1000):
                monitor.record('x', 1.0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert monitor.get_metrics()['x'].count == 4000

    def test_is_metrics_recorder(self):
        assert isinstance(PerformanceMonitor(), MetricsRecorder)
