"""Classes to define the environment, the ball and its launch.

This module holds the physical inputs to a flight simulation:

- Environment: atmosphere and wind, read-only for the duration of a simulation
- AirProperties / air_properties: density and viscosity derived from an Environment
- BallProperties: mass, size and reference aerodynamic coefficients of a ball
- SpinState: spin rate and unit spin axis
- LaunchConditions: speed, angles and spin leaving the clubface
- BallState: mutable integration state (position, velocity, spin, mass)

All values are SI: metres, seconds, kilograms, m/s, °C and Pa. Angles at the public
surface are in degrees and spin rates in rpm.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import lru_cache

from typing_extensions import NamedTuple, Optional, Union

from py_golfflight.constants import (
    cBallMass,
    cBallRadius,
    cDegreesCtoK,
    cDragCoefficient,
    cGasConstantDryAir,
    cGasConstantVapor,
    cLapseRate,
    cLiftCoefficient,
    cMagnusCoefficient,
    cMolarMassDryAir,
    cMolarMassVapor,
    cPressureExponent,
    cSpinDecayRate,
    cStandardHumidity,
    cStandardPressure,
    cStandardTemperatureC,
    cStandardTemperatureK,
    cSutherlandConstantAir,
    cSutherlandConstantVapor,
    cSutherlandReferenceTemperature,
    cSutherlandReferenceViscosity,
    cVaporReferenceViscosity,
)
from py_golfflight.exceptions import InvalidInputError
from py_golfflight.vector import Vector

__all__ = (
    'Environment',
    'AirProperties',
    'air_properties',
    'wind_from',
    'BallProperties',
    'SpinState',
    'LaunchConditions',
    'BallState',
)

ZERO_VECTOR = Vector(0.0, 0.0, 0.0)
BACKSPIN_AXIS = Vector(0.0, 0.0, 1.0)


def _require_finite(name: str, value: float) -> float:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}", name, value)
    return float(value)


def wind_from(speed: float, direction_from: float) -> Vector:
    """Vector representation of a wind.

    Args:
        speed: Wind speed in m/s.
        direction_from: Direction the wind blows from, in degrees.
            0 is blowing from behind the golfer toward the target.
            90 is blowing from the golfer's left towards right.

    Returns:
        Wind velocity vector in the flight frame (m/s).

    Examples:
        >>> wind_from(5.0, 0.0)  # pure tailwind
        Vector(x=5.0, y=0.0, z=0.0)
    """
    direction_rad = math.radians(direction_from)
    # Downrange (x-axis) component:
    range_component = speed * math.cos(direction_rad)
    # Cross (z-axis) component:
    cross_component = speed * math.sin(direction_rad)
    return Vector(range_component, 0.0, cross_component)


@dataclass(frozen=True)
class Environment:
    """Atmospheric conditions and wind for a flight.

    Attributes:
        temperature: Air temperature at the course, °C.
        pressure: Barometric pressure referenced to sea level, Pa.
        humidity: Relative humidity. Accepts either a fraction [0..1] or percent [0%..100%];
            stored as a fraction.
        altitude: Course altitude above sea level, m.
        wind: Wind velocity vector, m/s.

    Raises:
        InvalidInputError: For temperatures at or below absolute zero, non-positive pressure,
            humidity outside 0..100 %, or an altitude above the barometric model.

    Examples:
        >>> env = Environment(temperature=25, humidity=60, wind=wind_from(4.0, 90))
        >>> env.humidity
        0.6
    """

    temperature: float = cStandardTemperatureC
    pressure: float = cStandardPressure
    humidity: float = cStandardHumidity
    altitude: float = 0.0
    wind: Vector = ZERO_VECTOR

    def __post_init__(self) -> None:
        temperature = _require_finite('temperature', self.temperature)
        pressure = _require_finite('pressure', self.pressure)
        humidity = _require_finite('humidity', self.humidity)
        altitude = _require_finite('altitude', self.altitude)
        if temperature + cDegreesCtoK <= 0:
            raise InvalidInputError("Temperature must be above absolute zero", 'temperature', temperature)
        if pressure <= 0:
            raise InvalidInputError("Pressure must be positive", 'pressure', pressure)
        if humidity < 0 or humidity > 100:
            raise InvalidInputError(r"Humidity must be between 0% and 100%.", 'humidity', humidity)
        if humidity > 1:  # treat as percent
            humidity /= 100.0
        if 1 - cLapseRate * altitude / cStandardTemperatureK <= 0:
            raise InvalidInputError("Altitude is above the barometric model", 'altitude', altitude)
        wind = Vector(*self.wind)
        if not wind.is_finite():
            raise InvalidInputError("Wind must be finite", 'wind', self.wind)
        object.__setattr__(self, 'temperature', temperature)
        object.__setattr__(self, 'pressure', pressure)
        object.__setattr__(self, 'humidity', humidity)
        object.__setattr__(self, 'altitude', altitude)
        object.__setattr__(self, 'wind', wind)

    @classmethod
    def standard(cls, altitude: float = 0.0, wind: Vector = ZERO_VECTOR) -> Environment:
        """Create the ISA standard atmosphere for the given altitude.

        Temperature follows the standard lapse rate; pressure stays referenced to sea level
        and humidity is zero.
        """
        return cls(
            temperature=cStandardTemperatureC - cLapseRate * altitude,
            pressure=cStandardPressure,
            humidity=0.0,
            altitude=altitude,
            wind=wind,
        )

    @property
    def station_pressure(self) -> float:
        """Absolute pressure at course altitude, Pa."""
        return self.pressure * math.pow(1 - cLapseRate * self.altitude / cStandardTemperatureK, cPressureExponent)

    @property
    def air(self) -> AirProperties:
        """Derived air properties (memoized)."""
        return air_properties(self)


class AirProperties(NamedTuple):
    """Air properties derived from an Environment.

    Attributes:
        density: Moist air density, kg/m³.
        dynamic_viscosity: Moist air dynamic viscosity, Pa·s.
        kinematic_viscosity: Moist air kinematic viscosity, m²/s.
        vapor_pressure: Partial pressure of water vapour, Pa.
        station_pressure: Absolute pressure at altitude, Pa.
    """

    density: float
    dynamic_viscosity: float
    kinematic_viscosity: float
    vapor_pressure: float
    station_pressure: float


@lru_cache(maxsize=256)
def air_properties(environment: Environment) -> AirProperties:
    """Air density and viscosity for the given environment.

    Density treats moist air as a mixture of ideal gases. Viscosity uses Sutherland's law
    for dry air and water vapour, mixed with Wilke's rule.

    Args:
        environment: Atmospheric conditions.

    Returns:
        AirProperties for the environment.
    """

    def saturation_vapor_pressure(t_c: float) -> float:
        # Buck equation, Pa
        return 611.21 * math.exp((18.678 - t_c / 234.5) * (t_c / (257.14 + t_c)))

    def sutherland(mu_ref: float, s: float, t_k: float) -> float:
        t_ref = cSutherlandReferenceTemperature
        return mu_ref * math.pow(t_k / t_ref, 1.5) * (t_ref + s) / (t_k + s)

    def wilke_phi(mu_i: float, mu_j: float, m_i: float, m_j: float) -> float:
        return (1 + math.sqrt(mu_i / mu_j) * math.pow(m_j / m_i, 0.25)) ** 2 / math.sqrt(8 * (1 + m_i / m_j))

    t_k = environment.temperature + cDegreesCtoK
    p = environment.station_pressure

    # Vapor pressure can't exceed total pressure
    e = min(environment.humidity * saturation_vapor_pressure(environment.temperature), p)
    density = (p - e) / (cGasConstantDryAir * t_k) + e / (cGasConstantVapor * t_k)

    mu_air = sutherland(cSutherlandReferenceViscosity, cSutherlandConstantAir, t_k)
    mu_vapor = sutherland(cVaporReferenceViscosity, cSutherlandConstantVapor, t_k)
    x_v = e / p
    x_a = 1.0 - x_v
    if x_v > 0:
        phi_av = wilke_phi(mu_air, mu_vapor, cMolarMassDryAir, cMolarMassVapor)
        phi_va = wilke_phi(mu_vapor, mu_air, cMolarMassVapor, cMolarMassDryAir)
        mu = x_a * mu_air / (x_a + x_v * phi_av) + x_v * mu_vapor / (x_v + x_a * phi_va)
    else:
        mu = mu_air

    return AirProperties(
        density=density,
        dynamic_viscosity=mu,
        kinematic_viscosity=mu / density,
        vapor_pressure=e,
        station_pressure=p,
    )


@dataclass(frozen=True)
class BallProperties:
    """Physical and aerodynamic properties of a ball.

    Attributes:
        mass: kg, must be positive.
        radius: m, must be positive.
        area: Cross-sectional reference area, m². Defaults to πr².
        drag_coefficient: Reference drag coefficient.
        lift_coefficient: Reference lift coefficient.
        magnus_coefficient: Reference Magnus coefficient.
        spin_decay_rate: Exponential spin decay rate, 1/s.
    """

    mass: float = cBallMass
    radius: float = cBallRadius
    area: Optional[float] = None
    drag_coefficient: float = cDragCoefficient
    lift_coefficient: float = cLiftCoefficient
    magnus_coefficient: float = cMagnusCoefficient
    spin_decay_rate: float = cSpinDecayRate

    def __post_init__(self) -> None:
        for name in ('mass', 'radius'):
            if _require_finite(name, getattr(self, name)) <= 0:
                raise InvalidInputError(f"{name} must be positive", name, getattr(self, name))
        for name in ('drag_coefficient', 'lift_coefficient', 'magnus_coefficient', 'spin_decay_rate'):
            if _require_finite(name, getattr(self, name)) < 0:
                raise InvalidInputError(f"{name} must be non-negative", name, getattr(self, name))
        if self.area is None:
            object.__setattr__(self, 'area', math.pi * self.radius ** 2)
        elif _require_finite('area', self.area) <= 0:
            raise InvalidInputError("area must be positive", 'area', self.area)

    @property
    def diameter(self) -> float:
        return 2 * self.radius


@dataclass(frozen=True)
class SpinState:
    """Spin of the ball.

    Attributes:
        rate: Spin rate in rpm, non-negative.
        axis: Spin axis, normalized on construction. `Vector(0, 0, 1)` is pure backspin
            for a ball travelling downrange.

    Raises:
        InvalidInputError: If the rate is negative or the axis has zero length.
    """

    rate: float
    axis: Vector = BACKSPIN_AXIS

    def __post_init__(self) -> None:
        rate = _require_finite('spin_rate', self.rate)
        if rate < 0:
            raise InvalidInputError("Spin rate must be non-negative", 'spin_rate', rate)
        axis = Vector(*self.axis)
        if not axis.is_finite() or axis.magnitude() < 1e-10:
            raise InvalidInputError("Spin axis must be a non-zero vector", 'spin_axis', self.axis)
        object.__setattr__(self, 'rate', rate)
        object.__setattr__(self, 'axis', axis.normalize())

    @property
    def angular_velocity(self) -> float:
        """Spin rate in rad/s."""
        return self.rate * 2 * math.pi / 60.0

    def decayed(self, decay_rate: float, dt: float) -> SpinState:
        """Return the spin after `dt` seconds of exponential decay at `decay_rate` (1/s)."""
        return SpinState(self.rate * math.exp(-decay_rate * dt), self.axis)


@dataclass(frozen=True)
class LaunchConditions:
    """Ball launch as it leaves the clubface.

    Attributes:
        ball_speed: m/s, non-negative.
        launch_angle: Vertical launch angle, degrees above horizontal.
        launch_direction: Horizontal start direction, degrees right of the target line.
        spin_rate: rpm, non-negative.
        spin_axis: Spin axis (normalized by SpinState).

    Examples:
        >>> conditions = LaunchConditions(ball_speed=70.0, launch_angle=15.0, spin_rate=2500.0)
        >>> state = conditions.initial_state(BallProperties())
    """

    ball_speed: float
    launch_angle: float
    launch_direction: float = 0.0
    spin_rate: float = 2500.0
    spin_axis: Vector = BACKSPIN_AXIS

    def __post_init__(self) -> None:
        for name in ('ball_speed', 'launch_angle', 'launch_direction', 'spin_rate'):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))
        if self.ball_speed < 0:
            raise InvalidInputError("Ball speed must be non-negative", 'ball_speed', self.ball_speed)
        if self.spin_rate < 0:
            raise InvalidInputError("Spin rate must be non-negative", 'spin_rate', self.spin_rate)
        object.__setattr__(self, 'spin_axis', Vector(*self.spin_axis))

    @property
    def velocity(self) -> Vector:
        """Initial velocity vector, m/s."""
        angle = math.radians(self.launch_angle)
        direction = math.radians(self.launch_direction)
        return Vector(
            math.cos(angle) * math.cos(direction),
            math.sin(angle),
            math.cos(angle) * math.sin(direction)
        ).mul_by_const(self.ball_speed)

    def initial_state(self, properties: BallProperties, position: Vector = ZERO_VECTOR) -> BallState:
        """Build the integration state at launch."""
        return BallState(
            position=Vector(*position),
            velocity=self.velocity,
            spin=SpinState(self.spin_rate, self.spin_axis),
            mass=properties.mass,
        )


@dataclass
class BallState:
    """Mutable integration state, created per simulation."""

    position: Vector
    velocity: Vector
    spin: SpinState
    mass: float = cBallMass
    time: float = field(default=0.0)

    def copy(self) -> BallState:
        return BallState(self.position, self.velocity, self.spin, self.mass, self.time)

    @staticmethod
    def from_vectors(position: Union[Vector, tuple], velocity: Union[Vector, tuple],
                     spin_rate: float, spin_axis: Union[Vector, tuple] = BACKSPIN_AXIS,
                     mass: float = cBallMass) -> BallState:
        """Create a state from plain tuples."""
        return BallState(Vector(*position), Vector(*velocity), SpinState(spin_rate, Vector(*spin_axis)), mass)
