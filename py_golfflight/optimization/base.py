"""Shared pieces of the launch-parameter optimizers.

Every optimizer searches the (launch angle, spin rate) plane around a base LaunchConditions,
keeping the other launch fields fixed, and maximizes a caller-supplied metric of the simulated
trajectory. Candidates are always clamped to SearchBounds.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Generic

from typing_extensions import Callable, List, NamedTuple, Optional, Sequence, Tuple, TypeVar

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.constants import cMaxLaunchAngle, cMaxSpinRate, cMinLaunchAngle, cMinSpinRate
from py_golfflight.exceptions import EvaluationFailureError
from py_golfflight.logger import logger
from py_golfflight.optimization.evaluator import TrajectoryEvaluator
from py_golfflight.trajectory_data import TrajectoryResult

__all__ = (
    'MetricFunction',
    'SearchBounds',
    'DEFAULT_BOUNDS',
    'OptimizationResult',
    'BaseOptimizer',
    'clamp',
    'clamp_conditions',
    'horizontal_distance',
)

MetricFunction = Callable[[TrajectoryResult], float]
ScoredCandidate = Tuple[TrajectoryResult, float]

_OptimizerConfigT = TypeVar('_OptimizerConfigT')


class SearchBounds(NamedTuple):
    """Closed search intervals for launch angle (degrees) and spin rate (rpm)."""

    min_angle: float = cMinLaunchAngle
    max_angle: float = cMaxLaunchAngle
    min_spin: float = cMinSpinRate
    max_spin: float = cMaxSpinRate


DEFAULT_BOUNDS = SearchBounds()


class OptimizationResult(NamedTuple):
    """Best candidate found by an optimizer.

    Attributes:
        trajectory: Simulated flight of the best candidate.
        metric: Metric value of `trajectory`.
        conditions: Launch conditions of the best candidate.
    """

    trajectory: TrajectoryResult
    metric: float
    conditions: LaunchConditions


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp_conditions(conditions: LaunchConditions, bounds: SearchBounds = DEFAULT_BOUNDS) -> LaunchConditions:
    """Return `conditions` with launch angle and spin rate clamped to `bounds`."""
    return replace(
        conditions,
        launch_angle=clamp(conditions.launch_angle, bounds.min_angle, bounds.max_angle),
        spin_rate=clamp(conditions.spin_rate, bounds.min_spin, bounds.max_spin),
    )


def horizontal_distance(trajectory: TrajectoryResult) -> float:
    """Distance from the origin to the last point on the ground plane, m."""
    return trajectory.points[-1].horizontal_distance


class _BestTracker:
    """Keeps the best-ever scored candidate."""

    def __init__(self) -> None:
        self.best: Optional[OptimizationResult] = None
        self.failures: int = 0
        self.evaluations: int = 0

    def update(self, conditions: LaunchConditions, score: Optional[ScoredCandidate]) -> bool:
        """Offer a candidate; returns True if it became the new best."""
        self.evaluations += 1
        if score is None:
            self.failures += 1
            return False
        trajectory, metric = score
        if self.best is None or metric > self.best.metric:
            self.best = OptimizationResult(trajectory, metric, conditions)
            return True
        return False

    def result(self, name: str) -> OptimizationResult:
        if self.best is None:
            raise EvaluationFailureError(f"{name}: all {self.evaluations} candidates failed")
        return self.best


class BaseOptimizer(ABC, Generic[_OptimizerConfigT]):
    """Base class for async launch-parameter optimizers.

    Attributes:
        evaluator: Shared, memoizing trajectory evaluator.
        bounds: Search intervals for launch angle and spin rate.
    """

    name: str = 'optimizer'

    def __init__(self, evaluator: TrajectoryEvaluator, bounds: SearchBounds = DEFAULT_BOUNDS) -> None:
        self.evaluator = evaluator
        self.bounds = bounds

    def _candidate(self, base: LaunchConditions, angle: float, spin: float) -> LaunchConditions:
        b = self.bounds
        return replace(base,
                       launch_angle=clamp(angle, b.min_angle, b.max_angle),
                       spin_rate=clamp(spin, b.min_spin, b.max_spin))

    async def _score_batch(self, candidates: Sequence[LaunchConditions], environment: Environment,
                           properties: BallProperties, metric_fn: MetricFunction) -> List[Optional[ScoredCandidate]]:
        """Evaluate candidates concurrently.

        Candidates that fail to simulate, whose metric raises, or whose metric is not finite
        score None.
        """
        results = await self.evaluator.evaluate_many(candidates, environment, properties)
        scores: List[Optional[ScoredCandidate]] = []
        for conditions, trajectory in zip(candidates, results):
            if trajectory is None:
                scores.append(None)
                continue
            try:
                metric = float(metric_fn(trajectory))
            except Exception as exc:
                logger.warning(f"{self.name}: metric failed for {conditions}: {exc!r}, candidate skipped")
                scores.append(None)
                continue
            if not math.isfinite(metric):
                logger.warning(f"{self.name}: non-finite metric {metric} for {conditions}, candidate skipped")
                scores.append(None)
                continue
            scores.append((trajectory, metric))
        return scores

    async def optimize(self, base_conditions: LaunchConditions, environment: Environment,
                       properties: BallProperties, metric_fn: MetricFunction = horizontal_distance,
                       config: Optional[_OptimizerConfigT] = None) -> OptimizationResult:
        """Search for launch conditions maximizing `metric_fn`.

        Args:
            base_conditions: Starting point; clamped to bounds and always evaluated.
            environment: Atmosphere and wind.
            properties: Ball properties.
            metric_fn: Objective to maximize. Defaults to horizontal landing distance.
            config: Algorithm configuration; defaults apply for missing values.

        Returns:
            OptimizationResult for the best candidate evaluated.

        Raises:
            EvaluationFailureError: If no candidate could be evaluated.
        """
        tracker = _BestTracker()
        await self._run(clamp_conditions(base_conditions, self.bounds), environment, properties,
                        metric_fn, config, tracker)
        result = tracker.result(self.name)
        logger.info(f"{self.name}: best metric {result.metric:.3f} at "
                    f"{result.conditions.launch_angle:.2f}°, {result.conditions.spin_rate:.0f} rpm "
                    f"({tracker.evaluations} evaluations, {tracker.failures} failed)")
        return result

    @abstractmethod
    async def _run(self, base: LaunchConditions, environment: Environment, properties: BallProperties,
                   metric_fn: MetricFunction, config: Optional[_OptimizerConfigT],
                   tracker: _BestTracker) -> None:
        raise NotImplementedError
