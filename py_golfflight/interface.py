"""Flight simulator interface and engine loading system.

This module provides the `FlightSimulator` class, the primary interface for simulating
golf ball flights and optimizing launch parameters. Integration engines are plugins
discovered through Python entry points; the module relies on the EngineProtocol to ensure
that engines offer the necessary methods.

Key Classes:
    - FlightSimulator: Simulator with pluggable engine, shared trajectory cache and optimizers
    - _EngineLoader: Internal utility for discovering and loading engine plugins
"""
from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass, field
from importlib.metadata import entry_points, EntryPoint
from typing import Generic, Any

from typing_extensions import Union, Optional, TypeVar, Type, Generator

from py_golfflight.cache import TrajectoryCache
from py_golfflight.conditions import BallProperties, BallState, Environment, LaunchConditions
from py_golfflight.config import CacheConfigDict, SimulationConfig, create_cache_config, load_config
from py_golfflight.engines import RK4IntegrationEngine
from py_golfflight.generics.engine import EngineProtocol
from py_golfflight.logger import logger
from py_golfflight.monitor import PerformanceMonitor
from py_golfflight.optimization import (DEConfigDict, MetricFunction, OptimizationAlgorithms, OptimizationResult,
                                        PSOConfigDict, SAConfigDict, SearchBounds, TrajectoryEvaluator,
                                        DEFAULT_BOUNDS, horizontal_distance)
from py_golfflight.trajectory_data import TrajectoryResult

ConfigT = TypeVar('ConfigT', covariant=True)

DEFAULT_ENTRY_SUFFIX = '_engine'
DEFAULT_ENTRY_GROUP = 'py_golfflight'
DEFAULT_ENTRY: Type[EngineProtocol] = RK4IntegrationEngine

EngineProtocolType = Type[EngineProtocol[ConfigT]]
EngineProtocolEntry = Union[str, EngineProtocolType, None]


@dataclass
class _EngineLoader:
    _entry_point_group = DEFAULT_ENTRY_GROUP
    _entry_point_suffix = DEFAULT_ENTRY_SUFFIX

    @classmethod
    def _get_entries_by_group(cls) -> set:
        all_entry_points = entry_points()
        if hasattr(all_entry_points, 'select'):  # for importlib >= 5
            engine_entry_points = all_entry_points.select(group=cls._entry_point_group)
        elif hasattr(all_entry_points, 'get'):  # for importlib < 5
            engine_entry_points = all_entry_points.get(cls._entry_point_group, [])  # type: ignore[arg-type]
        else:
            raise RuntimeError('Entry point not supported')
        return set(engine_entry_points)

    @classmethod
    def iter_engines(cls) -> Generator[EntryPoint, None, None]:
        """Iterate over all available engines in the entry points."""
        for ep in cls._get_entries_by_group():
            if ep.name.endswith(cls._entry_point_suffix):
                yield ep

    @classmethod
    def _load_from_entry(cls, ep: EntryPoint) -> Optional[EngineProtocolType]:
        try:
            handle: EngineProtocolType = ep.load()
            if not isinstance(handle, EngineProtocol):
                raise TypeError(f"Unsupported engine {ep.value} does not implement EngineProtocol")
            logger.info(f"Loaded engine from: {ep.value} (Class: {handle})")
            return handle  # type: ignore
        except ImportError as e:
            logger.error(f"Error loading engine from {ep.value}: {e}")
        except AttributeError as e:
            logger.error(f"Error loading attribute from {ep.value}: {e}")
        except Exception as e:
            logger.exception(f"An unexpected error occurred loading {ep.value}: {e}")
        return None

    @classmethod
    def load(cls, entry_point: EngineProtocolEntry = DEFAULT_ENTRY) -> Type[EngineProtocol[Any]]:
        """Resolve an engine class from a class, an entry point name or a `module:Class` path.

        Raises:
            ValueError: If no engine matches the name.
            TypeError: If `entry_point` is neither a string nor an engine class.
        """
        if entry_point is None:
            entry_point = DEFAULT_ENTRY
        if isinstance(entry_point, EngineProtocol):
            return entry_point  # type: ignore
        if isinstance(entry_point, str):
            for ep in cls.iter_engines():
                if ep.name == entry_point:
                    if handle := cls._load_from_entry(ep):
                        return handle

            if ':' in entry_point:
                ep = EntryPoint(entry_point, entry_point, cls._entry_point_group)
                if handle := cls._load_from_entry(ep):
                    return handle
            raise ValueError(f"No 'engine' entry point found containing '{entry_point}'")
        raise TypeError("Invalid entry_point type, expected 'str' or 'EngineProtocol'")


@dataclass
class FlightSimulator(Generic[ConfigT]):
    """Basic interface for the flight simulator.

    A FlightSimulator owns one engine, one TrajectoryCache, one PerformanceMonitor and one
    TrajectoryEvaluator; its optimizers share them, so a candidate simulated by one optimizer
    is a cache hit for the others.

    Examples:
        ```python
        with FlightSimulator(config={'cStepMultiplier': 2.0}) as simulator:
            result = simulator.fire(LaunchConditions(70, 12, spin_rate=2800))
            best = asyncio.run(simulator.particle_swarm_optimization(LaunchConditions(70, 12)))
        ```
    """

    config: Optional[ConfigT] = field(default=None)
    engine: EngineProtocolEntry = field(default=DEFAULT_ENTRY)
    cache_config: Optional[CacheConfigDict] = field(default=None)
    settings: SimulationConfig = field(default_factory=SimulationConfig)
    bounds: SearchBounds = field(default=DEFAULT_BOUNDS)
    executor: Optional[Executor] = field(default=None, repr=False)
    monitor: PerformanceMonitor = field(default_factory=PerformanceMonitor, repr=False)
    _engine_instance: EngineProtocol[Any] = field(init=False, repr=False, compare=False)
    cache: TrajectoryCache = field(init=False, repr=False, compare=False)
    evaluator: TrajectoryEvaluator = field(init=False, repr=False, compare=False)
    algorithms: OptimizationAlgorithms = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        engine_config = self.config if self.config is not None else self.settings.engine
        self._engine_instance = _EngineLoader.load(self.engine)(engine_config)
        cache_config = create_cache_config(self.cache_config if self.cache_config is not None
                                           else self.settings.cache)
        self.cache = TrajectoryCache(cache_config.max_size_mb, cache_config.max_age_seconds)
        self.evaluator = TrajectoryEvaluator(self._engine_instance, self.cache, self.executor, self.monitor)
        self.algorithms = OptimizationAlgorithms(self.evaluator, self.bounds)

    @classmethod
    def from_config(cls, filepath: Optional[str] = None, **kwargs: Any) -> FlightSimulator:
        """Create a FlightSimulator from a TOML file found by `load_config`."""
        return cls(settings=load_config(filepath), **kwargs)

    def __getattr__(self, item: str) -> Any:
        """Delegate attribute access to the underlying engine instance.

        Raises:
            AttributeError: If the attribute is not found on either the
                `FlightSimulator` object or its `_engine_instance`.

        Examples:
            >>> simulator = FlightSimulator(engine=DEFAULT_ENTRY)
            >>> simulator.get_calc_step()
            0.0005
        """
        if item == '_engine_instance':
            raise AttributeError(item)
        if hasattr(self._engine_instance, item):
            return getattr(self._engine_instance, item)
        raise AttributeError(
            f"'{self.__class__.__name__}' object or its underlying engine "
            f"'{self._engine_instance.__class__.__name__}' has no attribute '{item}'"
        )

    def __enter__(self) -> FlightSimulator:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Stop the evaluator's executor and drop cached trajectories."""
        self.evaluator.close()
        self.cache.close()

    def simulate_flight(self, initial_state: BallState, environment: Optional[Environment] = None,
                        properties: Optional[BallProperties] = None) -> TrajectoryResult:
        """Integrate a flight from `initial_state` with the loaded engine."""
        with self.monitor.track('simulate_flight'):
            return self._engine_instance.simulate_flight(initial_state,
                                                         environment or Environment(),
                                                         properties or BallProperties())

    def fire(self, conditions: LaunchConditions, environment: Optional[Environment] = None,
             properties: Optional[BallProperties] = None) -> TrajectoryResult:
        """Simulate the flight of a ball launched with `conditions`.

        Args:
            conditions: Ball speed, launch angles and spin at the launch point.
            environment: Atmosphere and wind. Defaults to standard sea-level conditions.
            properties: Ball properties. Defaults to a regulation golf ball.

        Returns:
            TrajectoryResult from launch until ground impact or the time limit.
        """
        properties = properties or BallProperties()
        return self.simulate_flight(conditions.initial_state(properties), environment, properties)

    async def particle_swarm_optimization(self, base_conditions: LaunchConditions,
                                          environment: Optional[Environment] = None,
                                          properties: Optional[BallProperties] = None,
                                          metric_fn: MetricFunction = horizontal_distance,
                                          config: Optional[PSOConfigDict] = None) -> OptimizationResult:
        return await self.algorithms.particle_swarm_optimization(
            base_conditions, environment or Environment(), properties or BallProperties(), metric_fn,
            config if config is not None else self.settings.pso)

    async def simulated_annealing(self, base_conditions: LaunchConditions,
                                  environment: Optional[Environment] = None,
                                  properties: Optional[BallProperties] = None,
                                  metric_fn: MetricFunction = horizontal_distance,
                                  config: Optional[SAConfigDict] = None) -> OptimizationResult:
        return await self.algorithms.simulated_annealing(
            base_conditions, environment or Environment(), properties or BallProperties(), metric_fn,
            config if config is not None else self.settings.annealing)

    async def differential_evolution(self, base_conditions: LaunchConditions,
                                     environment: Optional[Environment] = None,
                                     properties: Optional[BallProperties] = None,
                                     metric_fn: MetricFunction = horizontal_distance,
                                     config: Optional[DEConfigDict] = None) -> OptimizationResult:
        return await self.algorithms.differential_evolution(
            base_conditions, environment or Environment(), properties or BallProperties(), metric_fn,
            config if config is not None else self.settings.evolution)

    @staticmethod
    def iter_engines() -> Generator[EntryPoint, None, None]:
        """Iterate all available engines in the entry points."""
        yield from _EngineLoader.iter_engines()


__all__ = ('FlightSimulator', '_EngineLoader',)
