"""3D Vector Mathematics.

The Vector class is implemented as an immutable NamedTuple, shared by positions, velocities,
forces, wind and spin axes throughout the flight model.

Key Features:
    - Immutable vector implementation for thread safety
    - Operator overloading for arithmetic on positions, velocities and forces
    - High-precision magnitude calculations using math.hypot()
    - Dot and cross products for projections and spin-induced force directions
    - Normalization with numerical stability for near-zero vectors

Typical Usage:
    ```python
    from py_golfflight import Vector

    position = Vector(0.0, 0.0, 0.0)
    velocity = Vector(67.6, 18.1, 0.0)  # m/s

    new_position = position + velocity * time_step
    speed = velocity.magnitude()

    # Direction of spin-induced lift for a backspinning ball
    lift_direction = Vector(0.0, 0.0, 1.0).cross(velocity).normalize()
    ```
"""
from __future__ import annotations

import math
from typing import Union, NamedTuple

__all__ = ('Vector',)


class Vector(NamedTuple):
    """Immutable 3D vector for golf ball flight calculations.

    Attributes:
        x: Downrange component (positive = toward the target).
        y: Vertical component (positive = upward).
        z: Lateral component (positive = right of the target line).

    Examples:
        ```python
        velocity = Vector(67.6, 18.1, 0.0)
        gravity = Vector(0.0, -9.81, 0.0)  # m/s²

        new_velocity = velocity + gravity * 0.001
        direction = velocity.normalize()
        ```
    """

    x: float
    y: float
    z: float

    def magnitude(self) -> float:
        """Calculate the Euclidean norm (length) of the vector.

        Returns:
            The magnitude (length) of the vector as a non-negative float.

        Note:
            Uses math.hypot() for numerical stability with extreme values.
        """
        return math.hypot(self.x, self.y, self.z)

    def mul_by_const(self, a: float) -> Vector:
        """Multiply vector by a scalar constant.

        Args:
            a: Scalar multiplier.

        Returns:
            New Vector instance with each component multiplied by the scalar.
        """
        return Vector(self.x * a, self.y * a, self.z * a)

    def mul_by_vector(self, b: Vector) -> float:
        """Calculate the dot product (scalar product) of two vectors.

        Args:
            b: The other Vector instance to compute dot product with.

        Returns:
            Scalar result of the dot product (x₁·x₂ + y₁·y₂ + z₁·z₂).
        """
        return self.x * b.x + self.y * b.y + self.z * b.z

    def cross(self, b: Vector) -> Vector:
        """Calculate the cross product of two vectors.

        The result is perpendicular to both operands and follows the right-hand rule,
        so a backspin axis `Vector(0, 0, 1)` crossed with a downrange velocity points up.

        Args:
            b: The right-hand operand.

        Returns:
            New Vector instance equal to `self × b`.

        Examples:
            ```python
            Vector(0, 0, 1).cross(Vector(1, 0, 0))  # Vector(0, 1, 0)
            ```
        """
        return Vector(
            self.y * b.z - self.z * b.y,
            self.z * b.x - self.x * b.z,
            self.x * b.y - self.y * b.x,
        )

    def add(self, b: Vector) -> Vector:
        """Add two vectors component-wise."""
        return Vector(self.x + b.x, self.y + b.y, self.z + b.z)

    def subtract(self, b: Vector) -> Vector:
        """Subtract one vector from another component-wise."""
        return Vector(self.x - b.x, self.y - b.y, self.z - b.z)

    def negate(self) -> Vector:
        """Create a vector with opposite direction (negated components)."""
        return Vector(-self.x, -self.y, -self.z)

    def normalize(self) -> Vector:
        """Create a unit vector pointing in the same direction.

        Returns:
            New Vector instance with magnitude 1.0 in the same direction.
                For near-zero vectors (magnitude < 1e-10), returns an unchanged copy.

        Note:
            Vectors with magnitude below 1e-10 are considered numerically zero
            vectors and returned unchanged rather than normalized.
        """
        m = self.magnitude()
        if math.fabs(m) < 1e-10:
            return Vector(self.x, self.y, self.z)
        return self.mul_by_const(1.0 / m)

    def is_finite(self) -> bool:
        """Return True when every component is a finite float."""
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def __mul__(self, other: Union[int, float, Vector]) -> Union[float, Vector]:  # type: ignore[override]
        """Multiply vector by scalar or calculate dot product.

        Args:
            other: Scalar (int/float) for scaling, or Vector for dot product.

        Returns:
            Vector if other is scalar, float if other is Vector (dot product).

        Raises:
            TypeError: If other is not int, float, or Vector.
        """
        if isinstance(other, (int, float)):
            return self.mul_by_const(other)
        if isinstance(other, Vector):
            return self.mul_by_vector(other)
        raise TypeError(other)

    def __add__(self, other: Vector) -> Vector:  # type: ignore[override]
        return self.add(other)

    def __radd__(self, other: Vector) -> Vector:  # type: ignore[override]
        return self.add(other)

    def __iadd__(self, other: Vector) -> Vector:  # type: ignore[override]
        """Return a new Vector; the instance itself is immutable."""
        return self.add(other)

    def __sub__(self, other: Vector) -> Vector:  # type: ignore[override]
        return self.subtract(other)

    def __isub__(self, other: Vector) -> Vector:  # type: ignore[override]
        return self.subtract(other)

    def __rmul__(self, other: Union[int, float, Vector]) -> Union[float, Vector]:  # type: ignore[override]
        return self.__mul__(other)

    def __imul__(self, other: Union[int, float, Vector]) -> Union[float, Vector]:  # type: ignore[override]
        return self.__mul__(other)

    def __neg__(self) -> Vector:  # type: ignore[override]
        return self.negate()
