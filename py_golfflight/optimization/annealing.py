"""Simulated Annealing over launch angle and spin rate.

Starting from the base conditions, each iteration evaluates one neighbour within ±2.5° and
±250 rpm of the current candidate. Better neighbours are always accepted; worse ones with
probability exp(Δ/T). The temperature T is multiplied by the cooling rate every iteration and
the search stops when the iteration budget is spent or T falls below `min_temp`.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, asdict, fields

from typing_extensions import Optional, TypedDict, override

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.exceptions import InvalidInputError
from py_golfflight.logger import logger
from py_golfflight.optimization.base import BaseOptimizer, MetricFunction, _BestTracker

__all__ = (
    'SAConfig',
    'SAConfigDict',
    'DEFAULT_SA_CONFIG',
    'create_sa_config',
    'SimulatedAnnealingOptimizer',
)


@dataclass
class SAConfig:
    """Annealing parameters.

    Attributes:
        initial_temp: Starting temperature. Defaults to 100.
        cooling_rate: Temperature multiplier per iteration, in (0, 1). Defaults to 0.95.
        iterations: Maximum neighbour evaluations. Defaults to 100.
        min_temp: Search stops below this temperature. Defaults to 0.1.
        seed: Seed for the optimizer's random source; None seeds from the OS.
    """

    initial_temp: float = 100.0
    cooling_rate: float = 0.95
    iterations: int = 100
    min_temp: float = 0.1
    seed: Optional[int] = None


DEFAULT_SA_CONFIG: SAConfig = SAConfig()


class SAConfigDict(TypedDict, total=False):
    initial_temp: Optional[float]
    cooling_rate: Optional[float]
    iterations: Optional[int]
    min_temp: Optional[float]
    seed: Optional[int]


def create_sa_config(interface_config: Optional[SAConfigDict] = None) -> SAConfig:
    """Create SAConfig from optional dictionary configuration.

    Raises:
        InvalidInputError: For unknown keys, a cooling rate outside (0, 1) or a non-positive temperature.
    """
    config = asdict(DEFAULT_SA_CONFIG)
    if interface_config is not None and isinstance(interface_config, dict):
        unknown = set(interface_config) - {f.name for f in fields(SAConfig)}
        if unknown:
            raise InvalidInputError(f"Unknown annealing config keys: {sorted(unknown)}", 'annealing',
                                    sorted(unknown))
        config.update({k: v for k, v in interface_config.items() if v is not None})
    result = SAConfig(**config)
    if not 0 < result.cooling_rate < 1:
        raise InvalidInputError("cooling_rate must be between 0 and 1", 'cooling_rate', result.cooling_rate)
    if result.initial_temp <= 0 or result.min_temp <= 0:
        raise InvalidInputError("Temperatures must be positive", 'initial_temp', result.initial_temp)
    return result


class SimulatedAnnealingOptimizer(BaseOptimizer[SAConfigDict]):
    """Simulated annealing search for the launch conditions maximizing a metric."""

    name = 'SA'

    @override
    async def _run(self, base: LaunchConditions, environment: Environment, properties: BallProperties,
                   metric_fn: MetricFunction, config: Optional[SAConfigDict],
                   tracker: _BestTracker) -> None:
        cfg = create_sa_config(config)
        rng = random.Random(cfg.seed)

        current = base
        (score,) = await self._score_batch([current], environment, properties, metric_fn)
        tracker.update(current, score)
        current_metric = score[1] if score is not None else float('-inf')

        temperature = cfg.initial_temp
        for iteration in range(cfg.iterations):
            if temperature < cfg.min_temp:
                logger.debug(f"SA stopped at iteration {iteration}: temperature {temperature:.4f}")
                break
            neighbor = self._candidate(base,
                                       current.launch_angle + rng.uniform(-2.5, 2.5),
                                       current.spin_rate + rng.uniform(-250, 250))
            (score,) = await self._score_batch([neighbor], environment, properties, metric_fn)
            tracker.update(neighbor, score)
            if score is not None:
                delta = score[1] - current_metric
                if delta > 0 or rng.random() < math.exp(delta / temperature):
                    current, current_metric = neighbor, score[1]
            temperature *= cfg.cooling_rate
