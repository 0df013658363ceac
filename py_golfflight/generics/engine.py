"""Engine protocol module for py_golfflight.

This module defines the EngineProtocol type protocol that all flight integration
engines must implement, so that engines can be swapped behind FlightSimulator and
the optimizer evaluator.

Classes:
    EngineProtocol: Type protocol for flight integration engines

Type Variables:
    ConfigT: Configuration type for the engine (covariant)
"""

# Standard library imports
from abc import abstractmethod
from typing import Optional, TypeVar

# Third-party imports
from typing_extensions import Protocol, runtime_checkable

# Local imports
from py_golfflight.conditions import BallProperties, BallState, Environment
from py_golfflight.trajectory_data import TrajectoryResult

__all__ = ['EngineProtocol', 'ConfigT']

# Type variable for engine configuration
ConfigT = TypeVar("ConfigT", covariant=True)


@runtime_checkable
class EngineProtocol(Protocol[ConfigT]):
    """Protocol defining the interface for golf ball flight integration engines.

    Type Parameters:
        ConfigT: The configuration type used by this engine implementation.

    Required Methods:
        - simulate_flight: Integrate a flight from an initial state to landing.

    Examples:
        ```python
        from py_golfflight.engines.base_engine import BaseEngineConfigDict

        class MyEngine(EngineProtocol[BaseEngineConfigDict]):
            def __init__(self, config: BaseEngineConfigDict):
                self.config = config

            def simulate_flight(self, initial_state, environment, properties):
                ...

        isinstance(MyEngine({}), EngineProtocol)  # True
        ```

    Note:
        Structural subtyping: any class with the required methods is compatible,
        even without inheriting from EngineProtocol.
    """

    def __init__(self, config: Optional[ConfigT] = None) -> None:
        ...

    @abstractmethod
    def simulate_flight(self, initial_state: BallState, environment: Environment,
                        properties: BallProperties) -> TrajectoryResult:
        """Integrate the ball's equations of motion until ground impact or the time limit.

        Args:
            initial_state: Position, velocity, spin and mass at launch. Not modified.
            environment: Atmosphere and wind.
            properties: Ball properties.

        Returns:
            TrajectoryResult with a non-empty, time-ascending sequence of points whose last
            point is at or below ground level, or at the time limit.

        Raises:
            InvalidStateError: If the ball starts below ground.
            NumericalInstabilityError: If the state becomes non-finite.
            InvalidInputError: For impossible physical inputs.
        """
        ...
