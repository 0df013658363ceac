"""Golf ball flight simulation and launch-parameter optimization."""

import importlib.metadata

__version__ = importlib.metadata.version("py_golfflight")

from .aerodynamics import AeroCoefficients, ForceModel, Forces
from .cache import CacheStats, TrajectoryCache, make_cache_key
from .conditions import (AirProperties, BallProperties, BallState, Environment, LaunchConditions, SpinState,
                         air_properties, wind_from)
from .config import (CacheConfig, CacheConfigDict, SimulationConfig, create_cache_config, find_config_file,
                     load_config)
from .engines import (create_base_engine_config, BaseEngineConfig, BaseEngineConfigDict,
                      BaseIntegrationEngine, RK4IntegrationEngine)
from .exceptions import (InvalidInputError, SimulationRuntimeError, InvalidStateError,
                         NumericalInstabilityError, EvaluationFailureError)
from .interface import FlightSimulator, _EngineLoader
from .logger import logger, enable_file_logging, disable_file_logging
from .monitor import MetricsRecorder, OperationMetrics, PerformanceMonitor
from .optimization import (OptimizationAlgorithms, OptimizationResult, TrajectoryEvaluator, SearchBounds,
                           ParticleSwarmOptimizer, SimulatedAnnealingOptimizer, DifferentialEvolutionOptimizer,
                           PSOConfigDict, SAConfigDict, DEConfigDict, horizontal_distance)
from .trajectory_data import TrajectoryMetrics, TrajectoryPoint, TrajectoryResult
from .vector import Vector

# DRY: build __all__ from global symbols
_SKIP_GLOBALS = {
    # Skip Python builtins
    "__name__", "__doc__", "__package__", "__loader__", "__spec__",
    "__file__", "__cached__", "__builtins__", "__path__", "__version__",
    # Skip imported modules
    "importlib", "aerodynamics", "cache", "conditions", "config", "engines", "exceptions",
    "interface", "monitor", "optimization", "trajectory_data", "vector",
    "constants", "generics", "visualize",
}
# Build __all__ from the module's global namespace
__all__ = [
    name for name in globals()
    if not name.startswith("_") and name not in _SKIP_GLOBALS
]
