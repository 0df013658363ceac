"""Differential Evolution over launch angle and spin rate.

Individual 0 starts at the base conditions; the others start within ±10° and ±500 rpm of it.
Every generation builds one trial per individual from the generation-start population:
three distinct other individuals a, b, c are drawn and each field is independently replaced,
with probability CR, by a + F·(b − c). Trials are evaluated concurrently and replace their
target when they are not worse.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, asdict, fields

from typing_extensions import List, Optional, TypedDict, override

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.exceptions import InvalidInputError
from py_golfflight.logger import logger
from py_golfflight.optimization.base import BaseOptimizer, MetricFunction, _BestTracker

__all__ = (
    'DEConfig',
    'DEConfigDict',
    'DEFAULT_DE_CONFIG',
    'create_de_config',
    'DifferentialEvolutionOptimizer',
)


@dataclass
class DEConfig:
    """Differential evolution parameters.

    Attributes:
        population_size: Individuals per generation, at least 4. Defaults to 20.
        generations: Number of generations after the initial one. Defaults to 50.
        F: Differential weight. Defaults to 0.8.
        CR: Crossover probability per field. Defaults to 0.9.
        seed: Seed for the optimizer's random source; None seeds from the OS.
    """

    population_size: int = 20
    generations: int = 50
    F: float = 0.8
    CR: float = 0.9
    seed: Optional[int] = None


DEFAULT_DE_CONFIG: DEConfig = DEConfig()


class DEConfigDict(TypedDict, total=False):
    population_size: Optional[int]
    generations: Optional[int]
    F: Optional[float]
    CR: Optional[float]
    seed: Optional[int]


def create_de_config(interface_config: Optional[DEConfigDict] = None) -> DEConfig:
    """Create DEConfig from optional dictionary configuration.

    Raises:
        InvalidInputError: For unknown keys, a population smaller than 4, or CR outside [0, 1].
    """
    config = asdict(DEFAULT_DE_CONFIG)
    if interface_config is not None and isinstance(interface_config, dict):
        unknown = set(interface_config) - {f.name for f in fields(DEConfig)}
        if unknown:
            raise InvalidInputError(f"Unknown evolution config keys: {sorted(unknown)}", 'evolution',
                                    sorted(unknown))
        config.update({k: v for k, v in interface_config.items() if v is not None})
    result = DEConfig(**config)
    if result.population_size < 4:
        raise InvalidInputError("Differential evolution needs a population of at least 4",
                                'population_size', result.population_size)
    if not 0 <= result.CR <= 1:
        raise InvalidInputError("CR must be between 0 and 1", 'CR', result.CR)
    return result


class DifferentialEvolutionOptimizer(BaseOptimizer[DEConfigDict]):
    """Differential evolution search for the launch conditions maximizing a metric."""

    name = 'DE'

    @override
    async def _run(self, base: LaunchConditions, environment: Environment, properties: BallProperties,
                   metric_fn: MetricFunction, config: Optional[DEConfigDict],
                   tracker: _BestTracker) -> None:
        cfg = create_de_config(config)
        rng = random.Random(cfg.seed)

        population: List[LaunchConditions] = [base]
        for _ in range(cfg.population_size - 1):
            population.append(self._candidate(base, base.launch_angle + rng.uniform(-10, 10),
                                              base.spin_rate + rng.uniform(-500, 500)))
        scores = await self._score_batch(population, environment, properties, metric_fn)
        for individual, score in zip(population, scores):
            tracker.update(individual, score)
        fitness = [s[1] if s is not None else float('-inf') for s in scores]

        for generation in range(cfg.generations):
            trials: List[LaunchConditions] = []
            for i, target in enumerate(population):
                a, b, c = rng.sample([p for j, p in enumerate(population) if j != i], 3)
                angle, spin = target.launch_angle, target.spin_rate
                if rng.random() < cfg.CR:
                    angle = a.launch_angle + cfg.F * (b.launch_angle - c.launch_angle)
                if rng.random() < cfg.CR:
                    spin = a.spin_rate + cfg.F * (b.spin_rate - c.spin_rate)
                trials.append(self._candidate(base, angle, spin))

            trial_scores = await self._score_batch(trials, environment, properties, metric_fn)
            for i, (trial, score) in enumerate(zip(trials, trial_scores)):
                tracker.update(trial, score)
                if score is not None and score[1] >= fitness[i]:
                    population[i] = trial
                    fitness[i] = score[1]

            best = tracker.best
            logger.debug(f"DE generation {generation}: best metric "
                         f"{best.metric if best is not None else float('nan'):.3f}")
