"""Launch-parameter optimizers.

All optimizers search launch angle in [0°, 45°] and spin rate in [1000, 5000] rpm around a base
LaunchConditions and maximize a caller-supplied metric of the simulated TrajectoryResult.
They share one TrajectoryEvaluator, so repeated candidates are simulated once.

Available Optimizers:
    - ParticleSwarmOptimizer: PSO (OptimizationAlgorithms.particle_swarm_optimization)
    - SimulatedAnnealingOptimizer: SA (OptimizationAlgorithms.simulated_annealing)
    - DifferentialEvolutionOptimizer: DE (OptimizationAlgorithms.differential_evolution)
"""

from .evaluator import *
from .base import *
from .pso import *
from .annealing import *
from .evolution import *
from .algorithms import *

__all__ = (
    'TrajectoryEvaluator',

    'MetricFunction',
    'SearchBounds',
    'DEFAULT_BOUNDS',
    'OptimizationResult',
    'BaseOptimizer',
    'clamp',
    'clamp_conditions',
    'horizontal_distance',

    'PSOConfig',
    'PSOConfigDict',
    'DEFAULT_PSO_CONFIG',
    'create_pso_config',
    'ParticleSwarmOptimizer',

    'SAConfig',
    'SAConfigDict',
    'DEFAULT_SA_CONFIG',
    'create_sa_config',
    'SimulatedAnnealingOptimizer',

    'DEConfig',
    'DEConfigDict',
    'DEFAULT_DE_CONFIG',
    'create_de_config',
    'DifferentialEvolutionOptimizer',

    'OptimizationAlgorithms',
)
