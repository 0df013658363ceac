"""Integration engines for golf ball flight calculations.

All engines implement the EngineProtocol interface and accept BaseEngineConfigDict
for configuration.

Available Engines:
    - BaseIntegrationEngine: Abstract base class for all integration engines
    - RK4IntegrationEngine: Fourth-order Runge-Kutta method (default, rk4_engine)

Examples:
    >>> from py_golfflight.engines import RK4IntegrationEngine, BaseEngineConfigDict
    >>> engine = RK4IntegrationEngine(BaseEngineConfigDict(cStepMultiplier=2.0))

    >>> # Using with FlightSimulator
    >>> from py_golfflight import FlightSimulator
    >>> simulator = FlightSimulator(engine="rk4_engine")  # By name

See Also:
    - py_golfflight.generics.engine.EngineProtocol: Base protocol for engines
    - py_golfflight.interface.FlightSimulator: Main interface using engines
"""

from .base_engine import *
from .rk4 import *

__all__ = (
    # Base engine infrastructure
    'create_base_engine_config',
    'BaseEngineConfig',
    'BaseEngineConfigDict',
    'DEFAULT_BASE_ENGINE_CONFIG',
    'BaseIntegrationEngine',

    # Integration engines
    'RK4IntegrationEngine',
)
