"""Trajectory data structures for golf ball flight results.

This module defines the data produced by an integration engine:

- TrajectoryPoint: one recorded integration step (time, state and forces)
- TrajectoryMetrics: summary numbers derived from the points
- TrajectoryResult: the ordered points, their metrics and the final ball state

TrajectoryResult is immutable once built and may be shared through the trajectory cache.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from typing_extensions import Iterator, NamedTuple, Sequence, Tuple, TYPE_CHECKING, Union, overload

from py_golfflight.aerodynamics import Forces
from py_golfflight.conditions import BallState, SpinState
from py_golfflight.exceptions import InvalidStateError
from py_golfflight.vector import Vector

if TYPE_CHECKING:
    from pandas import DataFrame

__all__ = (
    'TrajectoryPoint',
    'TrajectoryMetrics',
    'TrajectoryResult',
)


class TrajectoryPoint(NamedTuple):
    """Ball state at one instant of flight.

    Attributes:
        time: Flight time, s.
        position: m; x downrange, y height, z lateral.
        velocity: Ground-relative velocity, m/s.
        spin: Spin state at this instant.
        forces: Forces acting on the ball in this state, N.
    """

    time: float
    position: Vector
    velocity: Vector
    spin: SpinState
    forces: Forces

    @property
    def height(self) -> float:
        return self.position.y

    @property
    def speed(self) -> float:
        return self.velocity.magnitude()

    @property
    def horizontal_distance(self) -> float:
        """Distance from the origin projected on the ground plane, m."""
        return math.hypot(self.position.x, self.position.z)

    def in_def_units(self) -> Tuple[float, ...]:
        """Flat tuple of floats, in the column order of `TrajectoryResult.dataframe()`."""
        f = self.forces
        return (self.time, *self.position, *self.velocity, self.spin.rate,
                *f.drag, *f.lift, *f.magnus, *f.gravity)


class TrajectoryMetrics(NamedTuple):
    """Summary of a flight.

    Attributes:
        carry_distance: Horizontal distance from first to last point, m.
        max_height: Highest point reached, m.
        time_of_flight: s.
        launch_angle: Vertical angle of the initial velocity, degrees.
        landing_angle: Descent angle of the final velocity below horizontal, degrees.
        spin_rate: Initial spin rate, rpm.
        launch_direction: Horizontal angle of the initial velocity, degrees right of target.
        ball_speed: Initial speed, m/s.
    """

    carry_distance: float
    max_height: float
    time_of_flight: float
    launch_angle: float
    landing_angle: float
    spin_rate: float
    launch_direction: float
    ball_speed: float

    @classmethod
    def from_points(cls, points: Sequence[TrajectoryPoint]) -> TrajectoryMetrics:
        """Derive metrics from a non-empty, time-ordered sequence of points."""
        if not points:
            raise InvalidStateError(InvalidStateError.NO_POINTS)
        first, last = points[0], points[-1]
        v0 = first.velocity
        v1 = last.velocity
        return cls(
            carry_distance=math.hypot(last.position.x - first.position.x, last.position.z - first.position.z),
            max_height=max(p.position.y for p in points),
            time_of_flight=last.time - first.time,
            launch_angle=math.degrees(math.atan2(v0.y, math.hypot(v0.x, v0.z))),
            landing_angle=math.degrees(math.atan2(-v1.y, math.hypot(v1.x, v1.z))),
            spin_rate=first.spin.rate,
            launch_direction=math.degrees(math.atan2(v0.z, v0.x)),
            ball_speed=v0.magnitude(),
        )


@dataclass(frozen=True)
class TrajectoryResult:
    """Result of one simulated flight.

    Attributes:
        points: Non-empty, strictly time-ascending tuple of TrajectoryPoint.
        metrics: TrajectoryMetrics derived from `points`.
        final_state: Ball state at the last point.
        impacted: True if the flight ended by reaching the ground rather than the time limit.

    Examples:
        ```python
        result = engine.simulate_flight(state, environment, properties)
        print(result.metrics.carry_distance)
        for point in result:
            print(point.time, point.position)
        ```
    """

    points: Tuple[TrajectoryPoint, ...]
    metrics: TrajectoryMetrics
    final_state: BallState
    impacted: bool = True

    @classmethod
    def from_points(cls, points: Sequence[TrajectoryPoint], mass: float, impacted: bool = True) -> TrajectoryResult:
        points = tuple(points)
        metrics = TrajectoryMetrics.from_points(points)
        last = points[-1]
        final_state = BallState(last.position, last.velocity, last.spin, mass, last.time)
        return cls(points, metrics, final_state, impacted)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[TrajectoryPoint]:
        yield from self.points

    @overload
    def __getitem__(self, index: int) -> TrajectoryPoint: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[TrajectoryPoint, ...]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[TrajectoryPoint, Tuple[TrajectoryPoint, ...]]:
        return self.points[index]

    @property
    def landing_point(self) -> Vector:
        return self.points[-1].position

    def dataframe(self) -> DataFrame:
        """Return the trajectory table as a DataFrame.

        Raises:
            ImportError: If pandas is not installed.
        """
        try:
            from py_golfflight.visualize.dataframe import trajectory_as_dataframe
            return trajectory_as_dataframe(self)
        except ImportError as err:
            raise ImportError(
                "Use `pip install py_golfflight[visualize]` to get trajectory as pandas.DataFrame"
            ) from err
