"""Base integration engine for golf ball flight calculations.

The module serves as the core framework for the engine system, providing:
- Engine configuration management through BaseEngineConfig and BaseEngineConfigDict
- Abstract base class BaseIntegrationEngine implementing the EngineProtocol
- Launch validation and ground-impact refinement shared by concrete engines

Classes:
    BaseEngineConfig: Dataclass configuration for engine parameters
    BaseEngineConfigDict: TypedDict version for flexible configuration
    BaseIntegrationEngine: Abstract base class for integration engines

Configuration Constants:
    cStepMultiplier: Multiplier for the engine's default time step
    cMaxFlightTime: Flight time limit (s)
    cGravityConstant: Gravitational acceleration constant (m/s²)
    cImpactTolerance: Time bracket width that ends impact refinement (s)
    cMaxImpactIterations: Maximum bisection iterations for impact refinement

Architecture:
    This module follows the strategy pattern, where BaseIntegrationEngine
    provides the common interface and validation, while concrete subclasses
    implement specific numerical integration methods.

See Also:
    py_golfflight.generics.engine.EngineProtocol: Protocol interface
    py_golfflight.engines.rk4: Default engine
    py_golfflight.trajectory_data: Data structures for results
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict, fields

from typing_extensions import Callable, Optional, Tuple, TypedDict, TypeVar

from py_golfflight.aerodynamics import ForceModel
from py_golfflight.conditions import BallProperties, BallState, Environment
from py_golfflight.constants import cGravityConstant
from py_golfflight.exceptions import InvalidInputError, InvalidStateError, NumericalInstabilityError
from py_golfflight.generics.engine import EngineProtocol
from py_golfflight.trajectory_data import TrajectoryResult
from py_golfflight.vector import Vector

__all__ = (
    'create_base_engine_config',
    'BaseEngineConfig',
    'BaseEngineConfigDict',
    'DEFAULT_BASE_ENGINE_CONFIG',
    'BaseIntegrationEngine',
)

cStepMultiplier: float = 1.0  # Multiplier for engine's default step, for changing integration speed & precision
cMaxFlightTime: float = 10.0  # seconds, flight is cut off at this time
cRefineImpact: bool = True  # bisect the final step for the ground crossing
cImpactTolerance: float = 1e-6  # seconds
cMaxImpactIterations: int = 40
cTurbulence: bool = False


@dataclass
class BaseEngineConfig:
    """Configuration dataclass for flight integration engines.

    All parameters are SI.

    Attributes:
        cStepMultiplier: Multiplier for the engine's default integration time step.
                        Values < 1.0 increase precision but slow calculation.
                        Values > 1.0 decrease precision but speed calculation.
                        Defaults to 1.0.
        cMaxFlightTime: Flight time (s) at which integration stops if the ball has not landed.
                       Defaults to 10 s.
        cGravityConstant: Gravitational acceleration in m/s². Defaults to 9.81.
        cRefineImpact: Bisect the last step to locate the ground crossing. Defaults to True.
        cImpactTolerance: Bisection ends once the time bracket is narrower than this (s).
                         Defaults to 1e-6 s.
        cMaxImpactIterations: Upper bound on bisection iterations. Defaults to 40.
        cTurbulence: Perturb the wind with smoothed random turbulence. Defaults to False.
        cTurbulenceSeed: Seed for the turbulence random source; None seeds from the OS.

    Examples:
        >>> config = BaseEngineConfig(cStepMultiplier=4.0, cMaxFlightTime=8.0)
    """

    cStepMultiplier: float = cStepMultiplier
    cMaxFlightTime: float = cMaxFlightTime
    cGravityConstant: float = cGravityConstant
    cRefineImpact: bool = cRefineImpact
    cImpactTolerance: float = cImpactTolerance
    cMaxImpactIterations: int = cMaxImpactIterations
    cTurbulence: bool = cTurbulence
    cTurbulenceSeed: Optional[int] = None


#: Default configuration instance
DEFAULT_BASE_ENGINE_CONFIG: BaseEngineConfig = BaseEngineConfig()


class BaseEngineConfigDict(TypedDict, total=False):
    """TypedDict for flexible engine configuration from dictionaries.

    All fields are optional; unspecified fields use their values from
    DEFAULT_BASE_ENGINE_CONFIG when passed through create_base_engine_config().

    Examples:
        >>> config_dict: BaseEngineConfigDict = {'cStepMultiplier': 4.0}
        >>> config = create_base_engine_config(config_dict)
    """

    cStepMultiplier: Optional[float]
    cMaxFlightTime: Optional[float]
    cGravityConstant: Optional[float]
    cRefineImpact: Optional[bool]
    cImpactTolerance: Optional[float]
    cMaxImpactIterations: Optional[int]
    cTurbulence: Optional[bool]
    cTurbulenceSeed: Optional[int]


def create_base_engine_config(interface_config: Optional[BaseEngineConfigDict] = None) -> BaseEngineConfig:
    """Create BaseEngineConfig from optional dictionary configuration.

    Args:
        interface_config: Optional dictionary containing configuration overrides.
                         If None, returns the default configuration.

    Returns:
        BaseEngineConfig instance with merged configuration values.

    Raises:
        InvalidInputError: For unknown keys or non-positive step, time limit or tolerance.
    """
    config = asdict(DEFAULT_BASE_ENGINE_CONFIG)
    if interface_config is not None and isinstance(interface_config, dict):
        unknown = set(interface_config) - {f.name for f in fields(BaseEngineConfig)}
        if unknown:
            raise InvalidInputError(f"Unknown engine config keys: {sorted(unknown)}", 'engine', sorted(unknown))
        config.update({k: v for k, v in interface_config.items() if v is not None})
    result = BaseEngineConfig(**config)
    for name in ('cStepMultiplier', 'cMaxFlightTime', 'cImpactTolerance', 'cMaxImpactIterations'):
        if getattr(result, name) <= 0:
            raise InvalidInputError(f"{name} must be positive", name, getattr(result, name))
    return result


_BaseEngineConfigDictT = TypeVar("_BaseEngineConfigDictT", bound='BaseEngineConfigDict', covariant=True)

# Advances (position, velocity) by a time step
StepFunction = Callable[[float], Tuple[Vector, Vector]]


class BaseIntegrationEngine(ABC, EngineProtocol[_BaseEngineConfigDictT]):
    """All calculations are done in SI units (metres, seconds, kilograms)."""

    def __init__(self, _config: Optional[_BaseEngineConfigDictT] = None):
        """Initialize the class.

        Args:
            _config: The configuration object.
        """
        self._config: BaseEngineConfig = create_base_engine_config(_config)
        self.force_model: ForceModel = ForceModel(gravity=self._config.cGravityConstant)

    @property
    def config(self) -> BaseEngineConfig:
        return self._config

    def _flight_force_model(self) -> ForceModel:
        """Force model for a single flight.

        With turbulence enabled each flight gets its own random source seeded from
        `cTurbulenceSeed`; flights never share turbulence draws.
        """
        if not self._config.cTurbulence:
            return self.force_model
        return ForceModel(gravity=self._config.cGravityConstant,
                          rng=random.Random(self._config.cTurbulenceSeed))

    def get_calc_step(self) -> float:
        """Get step size for integration."""
        return self._config.cStepMultiplier

    def simulate_flight(self, initial_state: BallState, environment: Environment,
                        properties: BallProperties) -> TrajectoryResult:
        """Integrate a flight from `initial_state` until ground impact or the time limit.

        Args:
            initial_state: Ball state at launch. Not modified.
            environment: Atmosphere and wind.
            properties: Ball properties.

        Returns:
            TrajectoryResult with a non-empty, strictly time-ascending sequence of points.

        Raises:
            NumericalInstabilityError: If any initial coordinate is NaN or infinite,
                or the state becomes non-finite during integration.
            InvalidInputError: If the mass is not positive.
            InvalidStateError: If the ball starts below ground.
        """
        self._validate_initial_state(initial_state)
        return self._integrate(initial_state.copy(), environment, properties)

    @staticmethod
    def _validate_initial_state(state: BallState) -> None:
        if not (state.position.is_finite() and state.velocity.is_finite()):
            raise NumericalInstabilityError(state.time, f"position={state.position}, velocity={state.velocity}")
        if not state.mass > 0:
            raise InvalidInputError("Mass must be positive", 'mass', state.mass)
        if state.position.y < 0:
            raise InvalidStateError(InvalidStateError.BELOW_GROUND, state.position.y)

    def _find_impact(self, advance: StepFunction, step: float) -> Tuple[float, Vector, Vector]:
        """Bisect a step that ended below ground for the time of the ground crossing.

        Args:
            advance: Advances the state at the start of the step by a given sub-step.
            step: Length of the step that ended below ground (s).

        Returns:
            (sub-step, position, velocity) at the upper end of the final bracket,
            so the returned height is at or below ground.
        """
        lower, upper = 0.0, step
        position, velocity = advance(upper)
        for _ in range(self._config.cMaxImpactIterations):
            if upper - lower < self._config.cImpactTolerance:
                break
            middle = 0.5 * (lower + upper)
            p, v = advance(middle)
            if p.y <= 0:
                upper, position, velocity = middle, p, v
            else:
                lower = middle
        return upper, position, velocity

    @abstractmethod
    def _integrate(self, state: BallState, environment: Environment,
                   properties: BallProperties) -> TrajectoryResult:
        """Integrate a validated flight.

        Args:
            state: A copy of the launch state, which the engine may consume.
            environment: Atmosphere and wind.
            properties: Ball properties.

        Returns:
            TrajectoryResult: Object describing the flight.
        """
        raise NotImplementedError
