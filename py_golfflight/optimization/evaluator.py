"""Cache-checked, concurrent trajectory evaluation shared by all optimizers.

TrajectoryEvaluator turns launch conditions into a TrajectoryResult:

1. Look the candidate up in the TrajectoryCache.
2. Join a simulation of the same candidate that is already running.
3. Otherwise submit the simulation to an executor and await it.

Completed simulations are written to the cache by the executor future's callback, so a
simulation keeps running and is cached even when the awaiting optimizer task is cancelled.
"""
from __future__ import annotations

import asyncio
import os
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from typing_extensions import Dict, List, Optional, Sequence

from py_golfflight.cache import TrajectoryCache, make_cache_key
from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.exceptions import EvaluationFailureError, InvalidInputError, SimulationRuntimeError
from py_golfflight.generics.engine import EngineProtocol
from py_golfflight.logger import logger
from py_golfflight.monitor import MetricsRecorder
from py_golfflight.trajectory_data import TrajectoryResult

__all__ = ('TrajectoryEvaluator',)

EVALUATOR_NAMESPACE = 'evaluator'


def _simulate(engine: EngineProtocol, conditions: LaunchConditions, environment: Environment,
              properties: BallProperties) -> TrajectoryResult:
    # Module level so a ProcessPoolExecutor can pickle it
    return engine.simulate_flight(conditions.initial_state(properties), environment, properties)


class TrajectoryEvaluator:
    """Memoizing, executor-backed evaluator of launch conditions.

    Attributes:
        engine: Integration engine used for simulations.
        cache: Trajectory cache, or None to disable memoization across calls.
        monitor: Optional recorder for cache hits and simulation latency.

    Examples:
        ```python
        with TrajectoryEvaluator(RK4IntegrationEngine(), TrajectoryCache()) as evaluator:
            result = asyncio.run(evaluator.evaluate(conditions, environment, properties))
        ```
    """

    def __init__(self, engine: EngineProtocol, cache: Optional[TrajectoryCache] = None,
                 executor: Optional[Executor] = None, monitor: Optional[MetricsRecorder] = None,
                 namespace: str = EVALUATOR_NAMESPACE) -> None:
        """
        Args:
            engine: Integration engine.
            cache: Shared trajectory cache.
            executor: Executor for simulations. A ThreadPoolExecutor sized to the CPU count is
                created (and owned) when not given; an injected executor is not shut down by close().
            monitor: Metrics recorder.
            namespace: Cache namespace for hit/miss accounting.
        """
        self.engine = engine
        self.cache = cache
        self.monitor = monitor
        self.namespace = namespace
        self._owns_executor = executor is None
        self._executor: Executor = executor if executor is not None else ThreadPoolExecutor(
            max_workers=os.cpu_count(), thread_name_prefix='golfflight')
        self._lock = threading.Lock()
        self._in_flight: Dict[str, Future] = {}
        self._closed = False

    def __enter__(self) -> TrajectoryEvaluator:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the owned executor, waiting for running simulations."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _record(self, name: str, value: float) -> None:
        if self.monitor is not None:
            self.monitor.record(name, value)

    def _submit(self, key: str, conditions: LaunchConditions, environment: Environment,
                properties: BallProperties) -> Future:
        with self._lock:
            future = self._in_flight.get(key)
            if future is not None:
                return future
            if self._closed:
                raise RuntimeError("TrajectoryEvaluator is closed")
            future = self._executor.submit(_simulate, self.engine, conditions, environment, properties)
            self._in_flight[key] = future

        def on_done(done: Future) -> None:
            if self.cache is not None and not done.cancelled() and done.exception() is None:
                self.cache.set(key, done.result())
            with self._lock:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

        future.add_done_callback(on_done)
        return future

    async def evaluate(self, conditions: LaunchConditions, environment: Environment,
                       properties: BallProperties) -> TrajectoryResult:
        """Simulate `conditions`, reusing cached and in-flight results.

        Returns:
            The TrajectoryResult; repeated calls for the same inputs within the cache lifetime
            return the same object.

        Raises:
            EvaluationFailureError: If the candidate cannot be simulated.
        """
        key = make_cache_key(conditions, environment, properties)
        if self.cache is not None:
            cached = self.cache.get(key, self.namespace)
            if cached is not None:
                self._record('evaluation.cache_hit', 1.0)
                return cached

        started = time.perf_counter()
        future = self._submit(key, conditions, environment, properties)
        try:
            # Cancelling the caller must not cancel a simulation other callers may share
            result: TrajectoryResult = await asyncio.shield(asyncio.wrap_future(future))
        except (SimulationRuntimeError, InvalidInputError) as exc:
            if isinstance(exc, EvaluationFailureError):
                raise
            raise EvaluationFailureError("Candidate could not be simulated", conditions, exc) from exc
        self._record('evaluation.simulate', time.perf_counter() - started)
        return result

    async def evaluate_many(self, candidates: Sequence[LaunchConditions], environment: Environment,
                            properties: BallProperties) -> List[Optional[TrajectoryResult]]:
        """Evaluate candidates concurrently.

        Returns:
            One TrajectoryResult per candidate, or None where the candidate failed.
        """
        outcomes = await asyncio.gather(
            *(self.evaluate(c, environment, properties) for c in candidates),
            return_exceptions=True,
        )
        results: List[Optional[TrajectoryResult]] = []
        for conditions, outcome in zip(candidates, outcomes):
            if isinstance(outcome, EvaluationFailureError):
                logger.warning(f"Evaluation failed for {conditions}: {outcome.cause}")
                self._record('evaluation.failure', 1.0)
                results.append(None)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
        return results
