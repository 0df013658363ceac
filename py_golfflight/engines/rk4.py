"""Runge-Kutta 4th order integration engine for golf ball flight calculations.

The RK4 method is the default integration engine for py_golfflight.

Classes:
    RK4IntegrationEngine: Concrete implementation using 4th-order Runge-Kutta

Examples:
    >>> from py_golfflight import FlightSimulator
    >>> simulator = FlightSimulator()  # Uses RK4 by default

Mathematical Background:
    The joint state y = (position, velocity) evolves as dy/dt = (v, F(v)/m), where F is the
    sum of drag, lift, Magnus and gravity from the ForceModel. RK4 approximates it using:

    k₁ = f(tₙ, yₙ)
    k₂ = f(tₙ + h/2, yₙ + h·k₁/2)
    k₃ = f(tₙ + h/2, yₙ + h·k₂/2)
    k₄ = f(tₙ + h, yₙ + h·k₃)

    yₙ₊₁ = yₙ + h·(k₁ + 2k₂ + 2k₃ + k₄)/6

    Spin is held constant within a step and decays exponentially between steps.

Algorithm Properties:
    - Order: 4 (local truncation error is O(h⁵))
    - Four force evaluations per step
    - Fixed step size; the last step is shortened to hit the time limit exactly
    - Ground impact located by bisection inside the final step

See Also:
    py_golfflight.engines.base_engine.BaseIntegrationEngine: Base class
    py_golfflight.aerodynamics.ForceModel: Forces evaluated at each stage
"""
from __future__ import annotations

import threading

from typing_extensions import Any, Dict, List, Optional, Tuple, override

from py_golfflight.aerodynamics import ForceModel, Forces
from py_golfflight.conditions import BallProperties, BallState, Environment, SpinState
from py_golfflight.engines.base_engine import BaseIntegrationEngine, BaseEngineConfigDict
from py_golfflight.exceptions import NumericalInstabilityError
from py_golfflight.logger import logger
from py_golfflight.trajectory_data import TrajectoryPoint, TrajectoryResult
from py_golfflight.vector import Vector

__all__ = ('RK4IntegrationEngine',)


class RK4IntegrationEngine(BaseIntegrationEngine[BaseEngineConfigDict]):
    """Runge-Kutta 4th order integration engine for golf ball flights.

    Attributes:
        integration_step_count: Number of integration steps performed.
        trajectory_count: Number of completed flights.

    Both counters are updated under a lock, so one engine can serve concurrent flights.

    Examples:
        >>> config = BaseEngineConfigDict(cStepMultiplier=2.0)
        >>> engine = RK4IntegrationEngine(config)
    """

    DEFAULT_TIME_STEP = 0.0005

    def __init__(self, config: Optional[BaseEngineConfigDict] = None) -> None:
        """Initialize the RK4 integration engine.

        Args:
            config: Configuration dictionary containing engine parameters.
                   See BaseEngineConfigDict for available options.
        """
        super().__init__(config)
        self.integration_step_count: int = 0
        self.trajectory_count = 0  # Number of trajectories calculated
        self._counter_lock = threading.Lock()

    def __getstate__(self) -> Dict[str, Any]:
        # locks do not pickle; engines are shipped to process pools
        state = self.__dict__.copy()
        del state["_counter_lock"]
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._counter_lock = threading.Lock()

    @override
    def get_calc_step(self) -> float:
        """Get the calculation step size for RK4 integration.

        Returns:
            Time-step size (in seconds) for integration calculations.

        Examples:
            >>> engine = RK4IntegrationEngine(BaseEngineConfigDict(cStepMultiplier=2.0))
            >>> engine.get_calc_step()
            0.001
        """
        return super().get_calc_step() * self.DEFAULT_TIME_STEP

    def _rk4_step(self, force_model: ForceModel, position: Vector, velocity: Vector, k1: Vector, h: float,
                  spin: SpinState, environment: Environment, properties: BallProperties,
                  turbulence: Optional[Vector]) -> Tuple[Vector, Vector]:
        """Advance (position, velocity) by `h` seconds given the start acceleration `k1`."""
        inv_mass = 1.0 / properties.mass

        def f(v: Vector) -> Vector:  # dv/dt (acceleration)
            forces = force_model.compute_forces(v, spin, properties, environment, turbulence=turbulence)
            return forces.total() * inv_mass  # type: ignore[return-value]

        v1 = k1
        p1 = velocity
        p2 = velocity + 0.5 * h * v1  # type: ignore[operator]
        v2 = f(p2)
        p3 = velocity + 0.5 * h * v2  # type: ignore[operator]
        v3 = f(p3)
        p4 = velocity + h * v3  # type: ignore[operator]
        v4 = f(p4)
        new_velocity = velocity + (v1 + 2 * v2 + 2 * v3 + v4) * (h / 6.0)  # type: ignore[operator]
        new_position = position + (p1 + 2 * p2 + 2 * p3 + p4) * (h / 6.0)  # type: ignore[operator]
        return new_position, new_velocity

    @override
    def _integrate(self, state: BallState, environment: Environment,
                   properties: BallProperties) -> TrajectoryResult:
        """Integrate the flight until the ball goes below ground or the time limit is reached.

        Args:
            state: Validated launch state.
            environment: Atmosphere and wind.
            properties: Ball properties.

        Returns:
            TrajectoryResult: Object describing the flight.
        """
        _cMaxFlightTime = self._config.cMaxFlightTime
        _cTurbulence = self._config.cTurbulence
        _cRefineImpact = self._config.cRefineImpact
        force_model = self._flight_force_model()
        delta_time = self.get_calc_step()

        start_time = state.time
        end_time = start_time + _cMaxFlightTime
        time = start_time
        position, velocity, spin = state.position, state.velocity, state.spin
        turbulence: Optional[Vector] = None

        points: List[TrajectoryPoint] = []
        impacted = False
        integration_step_count = 0

        # region Trajectory Loop
        while True:
            # region Record current step
            if _cTurbulence:
                forces: Forces = force_model.compute_forces(velocity, spin, properties, environment,
                                                            dt=delta_time, position=position,
                                                            prev_turbulence=turbulence)
                turbulence = forces.turbulence
            else:
                forces = force_model.compute_forces(velocity, spin, properties, environment)
            points.append(TrajectoryPoint(time, position, velocity, spin, forces))
            # endregion

            if impacted or time >= end_time:
                break

            step = min(delta_time, end_time - time)
            k1 = forces.total() * (1.0 / properties.mass)

            def advance(h: float) -> Tuple[Vector, Vector]:  # pylint: disable=cell-var-from-loop
                return self._rk4_step(force_model, position, velocity, k1, h, spin,
                                      environment, properties, turbulence)

            new_position, new_velocity = advance(step)
            integration_step_count += 1

            if not (new_position.is_finite() and new_velocity.is_finite()):
                raise NumericalInstabilityError(time + step, f"position={new_position}, velocity={new_velocity}")

            if new_position.y < 0:
                impacted = True
                if _cRefineImpact:
                    step, new_position, new_velocity = self._find_impact(advance, step)

            if step < delta_time or impacted:
                time = min(time + step, end_time)
            else:
                time = min(start_time + integration_step_count * delta_time, end_time)
            spin = spin.decayed(properties.spin_decay_rate, step)
            position, velocity = new_position, new_velocity
        # endregion Trajectory Loop

        logger.debug(f"RK4 ran {integration_step_count} iterations")
        with self._counter_lock:
            self.trajectory_count += 1
            self.integration_step_count += integration_step_count
        return TrajectoryResult.from_points(points, state.mass, impacted)
