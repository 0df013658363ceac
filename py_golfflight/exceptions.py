"""py_golfflight exception types.

This module provides the exception hierarchy for error conditions that can occur
while modelling forces, integrating a flight, or evaluating optimizer candidates.

Exception Hierarchy
-------------------

Exception (built-in Python)
├── ValueError
│   └── InvalidInputError
└── RuntimeError
    └── SimulationRuntimeError
        ├── InvalidStateError
        ├── NumericalInstabilityError
        └── EvaluationFailureError

Exception Types
---------------

Input-Related Exceptions:

- InvalidInputError: Raised for physically impossible or out-of-range parameters,
  such as a non-positive mass, a zero spin axis, an atmosphere below absolute zero,
  or an unknown configuration key. Contains:
  - field: Name of the offending parameter (optional)
  - value: The rejected value (optional)

Simulation-Related Exceptions:

- SimulationRuntimeError: Base class for all simulation runtime errors.
  Typically not raised directly.

- InvalidStateError: Raised when the initial flight state is degenerate, e.g. the ball
  starts below ground so no trajectory point can be produced. Contains:
  - reason: Enumerated reason
    - BELOW_GROUND: Initial position is below ground level
    - NO_POINTS: Integration produced no trajectory points

- NumericalInstabilityError: Raised when a state component becomes NaN or infinite. Contains:
  - time: Flight time at which the instability was detected
  - state: Description of the offending state

- EvaluationFailureError: Raised when an optimizer candidate cannot be simulated, or when
  every candidate of an optimization run failed. Contains:
  - candidate: The launch conditions being evaluated (optional)
  - cause: The underlying exception (optional)

A cache miss is not an error: `TrajectoryCache.get` returns None.
"""
from __future__ import annotations

from typing import Any, Optional

__all__ = (
    'InvalidInputError',
    'SimulationRuntimeError',
    'InvalidStateError',
    'NumericalInstabilityError',
    'EvaluationFailureError',
)


class InvalidInputError(ValueError):
    """Invalid physical parameter or configuration value."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field: Optional[str] = field
        self.value: Any = value
        super().__init__(message)


class SimulationRuntimeError(RuntimeError):
    """Simulation error."""


class InvalidStateError(SimulationRuntimeError):
    """Exception for degenerate initial flight states."""

    BELOW_GROUND = "Initial position below ground"
    NO_POINTS = "No trajectory points produced"

    def __init__(self, reason: str, height: Optional[float] = None):
        """
        Parameters:
        - reason: The error reason
        - height: The initial height (m), when relevant
        """
        self.reason: str = reason
        self.height: Optional[float] = height
        msg = reason
        if height is not None:
            msg += f" (y = {height} m)"
        super().__init__(msg)


class NumericalInstabilityError(SimulationRuntimeError):
    """Exception raised when the integrated state stops being finite.

    Contains:
    - Flight time when the instability was detected
    - A description of the offending state
    """

    def __init__(self, time: float, state: str = ""):
        self.time: float = time
        self.state: str = state
        msg = f"Non-finite flight state at t = {time:.6f} s"
        if state:
            msg += f": {state}"
        super().__init__(msg)


class EvaluationFailureError(SimulationRuntimeError):
    """Exception for candidates that cannot be evaluated.

    Contains:
    - The candidate launch conditions, if a single candidate failed
    - The underlying cause
    """

    def __init__(self, message: str, candidate: Any = None, cause: Optional[BaseException] = None):
        self.candidate: Any = candidate
        self.cause: Optional[BaseException] = cause
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
