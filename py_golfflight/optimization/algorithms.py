"""Entry points for the three launch optimizers sharing one evaluator."""
from __future__ import annotations

from typing_extensions import Optional

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.optimization.annealing import SAConfigDict, SimulatedAnnealingOptimizer
from py_golfflight.optimization.base import (DEFAULT_BOUNDS, MetricFunction, OptimizationResult, SearchBounds,
                                             horizontal_distance)
from py_golfflight.optimization.evaluator import TrajectoryEvaluator
from py_golfflight.optimization.evolution import DEConfigDict, DifferentialEvolutionOptimizer
from py_golfflight.optimization.pso import ParticleSwarmOptimizer, PSOConfigDict

__all__ = ('OptimizationAlgorithms',)


class OptimizationAlgorithms:
    """PSO, simulated annealing and differential evolution over one shared evaluator.

    Examples:
        ```python
        algorithms = OptimizationAlgorithms(evaluator)
        result = await algorithms.particle_swarm_optimization(
            base, environment, properties, horizontal_distance, {'num_particles': 10, 'seed': 1})
        ```
    """

    def __init__(self, evaluator: TrajectoryEvaluator, bounds: SearchBounds = DEFAULT_BOUNDS) -> None:
        self.evaluator = evaluator
        self.pso = ParticleSwarmOptimizer(evaluator, bounds)
        self.annealing = SimulatedAnnealingOptimizer(evaluator, bounds)
        self.evolution = DifferentialEvolutionOptimizer(evaluator, bounds)

    async def particle_swarm_optimization(self, base_conditions: LaunchConditions, environment: Environment,
                                          properties: BallProperties,
                                          metric_fn: MetricFunction = horizontal_distance,
                                          config: Optional[PSOConfigDict] = None) -> OptimizationResult:
        return await self.pso.optimize(base_conditions, environment, properties, metric_fn, config)

    async def simulated_annealing(self, base_conditions: LaunchConditions, environment: Environment,
                                  properties: BallProperties,
                                  metric_fn: MetricFunction = horizontal_distance,
                                  config: Optional[SAConfigDict] = None) -> OptimizationResult:
        return await self.annealing.optimize(base_conditions, environment, properties, metric_fn, config)

    async def differential_evolution(self, base_conditions: LaunchConditions, environment: Environment,
                                     properties: BallProperties,
                                     metric_fn: MetricFunction = horizontal_distance,
                                     config: Optional[DEConfigDict] = None) -> OptimizationResult:
        return await self.evolution.optimize(base_conditions, environment, properties, metric_fn, config)
