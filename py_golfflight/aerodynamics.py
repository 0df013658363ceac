"""Aerodynamic force model for a spinning golf ball.

The ForceModel maps the instantaneous ball velocity and spin, the ball's properties and the
environment to the four forces acting on the ball: drag, lift, Magnus and gravity. It is a
pure function of its inputs apart from the optional turbulence perturbation, which draws from
an injected `random.Random`.

Coefficients:
    Reference coefficients from BallProperties are adjusted for Reynolds number and spin:

    - Drag: `Cd = Cd_ref · f(Re) · (1 + S)`
    - Lift: `Cl = Cl_ref · g(Re) · min(S / 0.08, 1.25)`
    - Magnus: `Cm = Cm_ref · min(π·r·rpm / (60·v), 2) · h(Re) · humidity factor`

    where `S = r·ω / v` is the spin parameter and `v` the speed relative to the air.

Directions:
    Drag opposes the air-relative velocity. Lift and Magnus act along the normalized
    `spin_axis × v_rel`, so a backspin axis `Vector(0, 0, 1)` lifts a ball travelling downrange.
    Gravity is `(0, -g·m, 0)`.

Examples:
    ```python
    model = ForceModel()
    forces = model.compute_forces(Vector(70, 0, 0), SpinState(2500), BallProperties(), Environment())
    acceleration = forces.total() * (1 / BallProperties().mass)
    ```
"""
from __future__ import annotations

import math
import random

from typing_extensions import NamedTuple, Optional

from py_golfflight.conditions import AirProperties, BallProperties, Environment, SpinState, air_properties
from py_golfflight.constants import cGravityConstant
from py_golfflight.vector import Vector

__all__ = (
    'Forces',
    'AeroCoefficients',
    'ForceModel',
)

ZERO_VECTOR = Vector(0.0, 0.0, 0.0)

# Speeds below this are treated as a ball at rest
cMinimumSpeed: float = 1e-9

# Reynolds number regimes
cReDragLow: float = 40_000
cReDragMid: float = 80_000
cReLiftMid: float = 100_000
cReLiftHigh: float = 150_000
cReMagnusLow: float = 50_000

cLiftSpinSaturation: float = 0.08  # spin parameter at which lift reaches the reference coefficient
cLiftMaxFactor: float = 1.25
cMagnusMaxSpinRatio: float = 2.0

# Turbulence
cTurbulenceWindFraction: float = 0.1
cTurbulenceHeightGain: float = 0.001  # 1/m
cTurbulenceFloor: float = 0.05  # m/s
cTurbulenceDrift: float = 0.05
cTurbulenceTimeScale: float = 0.01  # s


class Forces(NamedTuple):
    """Forces acting on the ball, in newtons.

    Attributes:
        drag: Opposes the air-relative velocity.
        lift: Spin-induced lift.
        magnus: Magnus force.
        gravity: Weight of the ball.
        turbulence: Wind perturbation used for this evaluation, if any.
            Pass it as `prev_turbulence` to the next call to continue the chain.
    """

    drag: Vector
    lift: Vector
    magnus: Vector
    gravity: Vector
    turbulence: Optional[Vector] = None

    def total(self) -> Vector:
        """Sum of drag, lift, Magnus and gravity."""
        return self.drag + self.lift + self.magnus + self.gravity

    def acceleration(self, mass: float) -> Vector:
        return self.total() * (1.0 / mass)  # type: ignore[return-value]


class AeroCoefficients(NamedTuple):
    """Adjusted aerodynamic coefficients for one flow condition."""

    reynolds: float
    spin_parameter: float
    drag: float
    lift: float
    magnus: float


class ForceModel:
    """Aerodynamic force model.

    Attributes:
        gravity: Gravitational acceleration, m/s².
        rng: Random source for turbulence; a private `random.Random` if not given.
    """

    def __init__(self, gravity: float = cGravityConstant, rng: Optional[random.Random] = None) -> None:
        self.gravity: float = gravity
        self.rng: random.Random = rng if rng is not None else random.Random()

    def gravity_force(self, mass: float) -> Vector:
        return Vector(0.0, -self.gravity * mass, 0.0)

    @staticmethod
    def coefficients(speed: float, spin: SpinState, properties: BallProperties,
                     environment: Environment, air: Optional[AirProperties] = None) -> AeroCoefficients:
        """Reynolds- and spin-adjusted coefficients for air-relative `speed` (m/s, > 0)."""
        if air is None:
            air = air_properties(environment)
        reynolds = speed * properties.diameter / air.kinematic_viscosity
        spin_parameter = properties.radius * spin.angular_velocity / speed

        if reynolds < cReDragLow:
            re_drag = 0.232 / 0.225
        elif reynolds < cReDragMid:
            re_drag = 0.228 / 0.225
        else:
            re_drag = 1.0
        cd = properties.drag_coefficient * re_drag * (1 + spin_parameter)

        if reynolds > cReLiftHigh:
            re_lift = 0.23 / 0.21
        elif reynolds > cReLiftMid:
            re_lift = 0.22 / 0.21
        else:
            re_lift = 1.0
        cl = properties.lift_coefficient * re_lift * min(spin_parameter / cLiftSpinSaturation, cLiftMaxFactor)

        spin_ratio = min(math.pi * properties.radius * spin.rate / (60.0 * speed), cMagnusMaxSpinRatio)
        if reynolds > cReLiftHigh:
            re_magnus = 1.1
        elif reynolds < cReMagnusLow:
            re_magnus = 0.9
        else:
            re_magnus = 1.0
        h = environment.humidity
        humidity_factor = 1 - 0.035 * h - 0.035 * h * h
        cm = properties.magnus_coefficient * spin_ratio * re_magnus * humidity_factor

        return AeroCoefficients(reynolds, spin_parameter, cd, cl, cm)

    def turbulence(self, environment: Environment, dt: float, position: Vector,
                   prev_turbulence: Optional[Vector] = None) -> Vector:
        """Next value of the turbulent wind perturbation, m/s.

        The first value of a chain is drawn uniformly within the turbulence intensity.
        Later values drift toward a random target near the previous value, blended with a
        cubic Hermite curve over `dt` so the perturbation stays smooth between steps.
        """
        rng = self.rng
        if prev_turbulence is None:
            sigma = (cTurbulenceWindFraction * environment.wind.magnitude()
                     * (1 + cTurbulenceHeightGain * max(position.y, 0.0)) + cTurbulenceFloor)
            return Vector(sigma * rng.uniform(-1, 1), sigma * rng.uniform(-1, 1), sigma * rng.uniform(-1, 1))

        t = min(dt / cTurbulenceTimeScale, 1.0)
        h00 = 2 * t ** 3 - 3 * t ** 2 + 1
        h01 = -2 * t ** 3 + 3 * t ** 2

        def blend(prev: float) -> float:
            target = prev + rng.uniform(-1, 1) * cTurbulenceDrift * abs(prev)
            return h00 * prev + h01 * target

        return Vector(blend(prev_turbulence.x), blend(prev_turbulence.y), blend(prev_turbulence.z))

    def compute_forces(self, velocity: Vector, spin: SpinState, properties: BallProperties,
                       environment: Environment, dt: Optional[float] = None,
                       position: Optional[Vector] = None,
                       prev_turbulence: Optional[Vector] = None,
                       turbulence: Optional[Vector] = None) -> Forces:
        """Forces on the ball for one instant of flight.

        Args:
            velocity: Ground-relative ball velocity, m/s.
            spin: Current spin state.
            properties: Ball properties.
            environment: Atmosphere and wind.
            dt: Integration step, s. Turbulence is applied only when `dt` and `position` are given.
            position: Ball position, m.
            prev_turbulence: Turbulence returned by the previous call, to continue the chain.
            turbulence: Perturbation to apply as-is, without advancing the chain.

        Returns:
            Forces in newtons. A ball at rest feels gravity only.
        """
        gravity = self.gravity_force(properties.mass)
        if velocity.magnitude() < cMinimumSpeed:
            return Forces(ZERO_VECTOR, ZERO_VECTOR, ZERO_VECTOR, gravity)

        wind = environment.wind
        if turbulence is None and dt is not None and position is not None:
            turbulence = self.turbulence(environment, dt, position, prev_turbulence)
        if turbulence is not None:
            wind = wind + turbulence

        # Air resistance seen by the ball is ground velocity minus wind velocity relative to ground
        relative_velocity = velocity - wind
        speed = relative_velocity.magnitude()
        if speed < cMinimumSpeed:
            return Forces(ZERO_VECTOR, ZERO_VECTOR, ZERO_VECTOR, gravity, turbulence)

        air = air_properties(environment)
        coeffs = self.coefficients(speed, spin, properties, environment, air)
        dynamic_pressure = 0.5 * air.density * speed * speed * properties.area

        drag = relative_velocity.mul_by_const(-dynamic_pressure * coeffs.drag / speed)
        lift_direction = spin.axis.cross(relative_velocity)
        if lift_direction.magnitude() < 1e-10 * speed:
            # Spin axis parallel to the flow
            lift = magnus = ZERO_VECTOR
        else:
            lift_direction = lift_direction.normalize()
            lift = lift_direction.mul_by_const(dynamic_pressure * coeffs.lift)
            magnus = lift_direction.mul_by_const(dynamic_pressure * coeffs.magnus)

        return Forces(drag, lift, magnus, gravity, turbulence)
