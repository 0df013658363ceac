import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from py_golfflight import (BallProperties, Environment, EvaluationFailureError, InvalidStateError, LaunchConditions,
                           PerformanceMonitor, RK4IntegrationEngine, TrajectoryCache, TrajectoryEvaluator,
                           make_cache_key)


class CountingEngine:
    """Wraps a real engine, counting calls and optionally failing or blocking."""

    def __init__(self, fail_above_angle=None, exc_type=InvalidStateError):
        self.engine = RK4IntegrationEngine({'cStepMultiplier': 10.0})
        self.calls = 0
        self.fail_above_angle = fail_above_angle
        self.exc_type = exc_type
        self.started = threading.Event()
        self.release = threading.Event()
        self.release.set()
        self._lock = threading.Lock()

    def simulate_flight(self, initial_state, environment, properties):
        with self._lock:
            self.calls += 1
        self.started.set()
        self.release.wait(5)
        v = initial_state.velocity
        if self.fail_above_angle is not None and v.y > v.x * self.fail_above_angle:
            if self.exc_type is InvalidStateError:
                raise InvalidStateError(InvalidStateError.BELOW_GROUND)
            raise self.exc_type("engine bug")
        return self.engine.simulate_flight(initial_state, environment, properties)


@pytest.fixture
def env():
    return Environment()


@pytest.fixture
def ball():
    return BallProperties()


class TestTrajectoryEvaluator:

    def test_repeated_evaluate_returns_identical_object(self, env, ball):
        engine = CountingEngine()
        with TrajectoryEvaluator(engine, TrajectoryCache()) as evaluator:
            conditions = LaunchConditions(60.0, 12.0, spin_rate=2800.0)
            first = asyncio.run(evaluator.evaluate(conditions, env, ball))
            second = asyncio.run(evaluator.evaluate(conditions, env, ball))
        assert first is second
        assert engine.calls == 1

    def test_result_is_cached(self, env, ball):
        cache = TrajectoryCache()
        with TrajectoryEvaluator(CountingEngine(), cache) as evaluator:
            conditions = LaunchConditions(60.0, 12.0)
            result = asyncio.run(evaluator.evaluate(conditions, env, ball))
        assert cache.get(make_cache_key(conditions, env, ball)) is result

    def test_concurrent_identical_requests_share_one_simulation(self, env, ball):
        engine = CountingEngine()
        engine.release.clear()
        conditions = LaunchConditions(55.0, 18.0)

        async def run(evaluator):
            tasks = [asyncio.ensure_future(evaluator.evaluate(conditions, env, ball)) for _ in range(5)]
            await asyncio.sleep(0.05)
            engine.release.set()
            return await asyncio.gather(*tasks)

        with TrajectoryEvaluator(engine, cache=None) as evaluator:
            results = asyncio.run(run(evaluator))
        assert engine.calls == 1
        assert all(r is results[0] for r in results)

    def test_engine_error_becomes_evaluation_failure(self, env, ball):
        with TrajectoryEvaluator(CountingEngine(fail_above_angle=0.0), TrajectoryCache()) as evaluator:
            conditions = LaunchConditions(60.0, 10.0)
            with pytest.raises(EvaluationFailureError) as exc_info:
                asyncio.run(evaluator.evaluate(conditions, env, ball))
        assert isinstance(exc_info.value.cause, InvalidStateError)
        assert exc_info.value.candidate == conditions

    def test_failures_are_not_cached(self, env, ball):
        cache = TrajectoryCache()
        engine = CountingEngine(fail_above_angle=0.0)
        with TrajectoryEvaluator(engine, cache) as evaluator:
            for _ in range(2):
                with pytest.raises(EvaluationFailureError):
                    asyncio.run(evaluator.evaluate(LaunchConditions(60.0, 10.0), env, ball))
        assert engine.calls == 2
        assert len(cache) == 0

    def test_evaluate_many_marks_failures(self, env, ball):
        monitor = PerformanceMonitor()
        # tan(20°) ≈ 0.364: candidates launched above 20° fail
        engine = CountingEngine(fail_above_angle=0.364)
        candidates = [LaunchConditions(60.0, 10.0), LaunchConditions(60.0, 30.0), LaunchConditions(60.0, 15.0)]
        with TrajectoryEvaluator(engine, TrajectoryCache(), monitor=monitor) as evaluator:
            results = asyncio.run(evaluator.evaluate_many(candidates, env, ball))
        assert results[0] is not None
        assert results[1] is None
        assert results[2] is not None
        metrics = monitor.get_metrics()
        assert metrics['evaluation.failure'].count == 1
        assert metrics['evaluation.simulate'].count == 2

    def test_unexpected_errors_propagate(self, env, ball):
        engine = CountingEngine(fail_above_angle=0.0, exc_type=ZeroDivisionError)
        with TrajectoryEvaluator(engine) as evaluator:
            with pytest.raises(ZeroDivisionError):
                asyncio.run(evaluator.evaluate_many([LaunchConditions(60.0, 10.0)], env, ball))

    def test_cache_hits_are_recorded(self, env, ball):
        monitor = PerformanceMonitor()
        with TrajectoryEvaluator(CountingEngine(), TrajectoryCache(), monitor=monitor) as evaluator:
            conditions = LaunchConditions(60.0, 12.0)
            asyncio.run(evaluator.evaluate(conditions, env, ball))
            asyncio.run(evaluator.evaluate(conditions, env, ball))
        assert monitor.get_metrics()['evaluation.cache_hit'].count == 1

    def test_cancelled_caller_does_not_lose_simulation(self, env, ball):
        engine = CountingEngine()
        engine.release.clear()
        cache = TrajectoryCache()
        conditions = LaunchConditions(62.0, 11.0)
        evaluator = TrajectoryEvaluator(engine, cache)

        async def run():
            task = asyncio.ensure_future(evaluator.evaluate(conditions, env, ball))
            await asyncio.sleep(0)
            assert engine.started.wait(5)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        engine.release.set()
        evaluator.close()  # waits for the running simulation
        assert make_cache_key(conditions, env, ball) in cache
        assert engine.calls == 1

    def test_close_owned_executor_only(self, env, ball):
        executor = ThreadPoolExecutor(max_workers=2)
        try:
            evaluator = TrajectoryEvaluator(CountingEngine(), executor=executor)
            evaluator.close()
            evaluator.close()
            assert executor.submit(lambda: 42).result() == 42
            with pytest.raises(RuntimeError):
                asyncio.run(evaluator.evaluate(LaunchConditions(60.0, 12.0), env, ball))
        finally:
            executor.shutdown()
