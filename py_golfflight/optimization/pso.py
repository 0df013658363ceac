"""Particle Swarm Optimization over launch angle and spin rate.

Each iteration evaluates the whole swarm concurrently, then updates personal and global bests
and moves every particle:

    v ← w·v + c₁·r₁·(personal_best − x) + c₂·r₂·(global_best − x)
    x ← clamp(x + v)

Particle 0 starts at the base conditions; the others start within ±10° and ±500 rpm of it.
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
    'PSOConfig',
    'PSOConfigDict',
    'DEFAULT_PSO_CONFIG',
    'create_pso_config',
    'ParticleSwarmOptimizer',
)


@dataclass
class PSOConfig:
    """Particle swarm parameters.

    Attributes:
        num_particles: Swarm size. Defaults to 20.
        iterations: Number of swarm evaluations. Defaults to 50.
        inertia: Velocity carried over between iterations (w). Defaults to 0.7.
        cognitive: Pull toward the particle's own best (c₁). Defaults to 1.5.
        social: Pull toward the swarm's best (c₂). Defaults to 1.5.
        seed: Seed for the optimizer's random source; None seeds from the OS.
    """

    num_particles: int = 20
    iterations: int = 50
    inertia: float = 0.7
    cognitive: float = 1.5
    social: float = 1.5
    seed: Optional[int] = None


DEFAULT_PSO_CONFIG: PSOConfig = PSOConfig()


class PSOConfigDict(TypedDict, total=False):
    num_particles: Optional[int]
    iterations: Optional[int]
    inertia: Optional[float]
    cognitive: Optional[float]
    social: Optional[float]
    seed: Optional[int]


def create_pso_config(interface_config: Optional[PSOConfigDict] = None) -> PSOConfig:
    """Create PSOConfig from optional dictionary configuration.

    Raises:
        InvalidInputError: For unknown keys or non-positive swarm size or iteration count.
    """
    config = asdict(DEFAULT_PSO_CONFIG)
    if interface_config is not None and isinstance(interface_config, dict):
        unknown = set(interface_config) - {f.name for f in fields(PSOConfig)}
        if unknown:
            raise InvalidInputError(f"Unknown PSO config keys: {sorted(unknown)}", 'pso', sorted(unknown))
        config.update({k: v for k, v in interface_config.items() if v is not None})
    result = PSOConfig(**config)
    if result.num_particles < 1 or result.iterations < 1:
        raise InvalidInputError("PSO needs at least one particle and one iteration", 'pso', config)
    return result


class ParticleSwarmOptimizer(BaseOptimizer[PSOConfigDict]):
    """Particle swarm search for the launch conditions maximizing a metric."""

    name = 'PSO'

    @override
    async def _run(self, base: LaunchConditions, environment: Environment, properties: BallProperties,
                   metric_fn: MetricFunction, config: Optional[PSOConfigDict],
                   tracker: _BestTracker) -> None:
        cfg = create_pso_config(config)
        rng = random.Random(cfg.seed)

        positions: List[List[float]] = [[base.launch_angle, base.spin_rate]]
        for _ in range(cfg.num_particles - 1):
            c = self._candidate(base, base.launch_angle + rng.uniform(-10, 10),
                                base.spin_rate + rng.uniform(-500, 500))
            positions.append([c.launch_angle, c.spin_rate])
        velocities = [[rng.uniform(-1, 1), rng.uniform(-250, 250)] for _ in positions]
        personal_best = [p[:] for p in positions]
        personal_best_metric = [float('-inf')] * len(positions)

        for iteration in range(cfg.iterations):
            candidates = [self._candidate(base, *p) for p in positions]
            scores = await self._score_batch(candidates, environment, properties, metric_fn)

            for i, (candidate, score) in enumerate(zip(candidates, scores)):
                tracker.update(candidate, score)
                if score is not None and score[1] > personal_best_metric[i]:
                    personal_best_metric[i] = score[1]
                    personal_best[i] = [candidate.launch_angle, candidate.spin_rate]

            best = tracker.best
            logger.debug(f"PSO iteration {iteration}: best metric "
                         f"{best.metric if best is not None else float('nan'):.3f}")

            for i, position in enumerate(positions):
                global_best = ([best.conditions.launch_angle, best.conditions.spin_rate]
                               if best is not None else personal_best[i])
                for d in range(2):
                    r1, r2 = rng.random(), rng.random()
                    velocities[i][d] = (cfg.inertia * velocities[i][d]
                                        + cfg.cognitive * r1 * (personal_best[i][d] - position[d])
                                        + cfg.social * r2 * (global_best[d] - position[d]))
                    position[d] += velocities[i][d]
                c = self._candidate(base, position[0], position[1])
                position[0], position[1] = c.launch_angle, c.spin_rate
