"""Golf Ball Trajectory Data Export to pandas DataFrame.

Integration:
    This module is automatically used by the TrajectoryResult.dataframe() method.

Typical Usage:
    ```python
    from py_golfflight import FlightSimulator, LaunchConditions
    from py_golfflight.visualize.dataframe import trajectory_as_dataframe

    with FlightSimulator() as simulator:
        result = simulator.fire(LaunchConditions(ball_speed=70, launch_angle=15, spin_rate=2500))

    df = trajectory_as_dataframe(result)
    print(df[['time', 'x', 'y']].describe())
    df.to_csv('flight.csv')
    ```

Dependencies:
    This module requires pandas as an optional dependency. Install via:
    pip install py_golfflight[visualize]
"""

# pylint: skip-file
# Standard library imports
import warnings

# Local imports
from py_golfflight.trajectory_data import TrajectoryResult

# Handle optional pandas dependency with graceful degradation
try:
    from pandas import DataFrame
except ImportError as error:
    warnings.warn("Install pandas to convert trajectory to pandas.DataFrame", UserWarning)
    raise error

__all__ = (
    'TRAJECTORY_COLUMNS',
    'trajectory_as_dataframe',
)

TRAJECTORY_COLUMNS = (
    'time',
    'x', 'y', 'z',
    'vx', 'vy', 'vz',
    'spin_rate',
    'drag_x', 'drag_y', 'drag_z',
    'lift_x', 'lift_y', 'lift_z',
    'magnus_x', 'magnus_y', 'magnus_z',
    'gravity_x', 'gravity_y', 'gravity_z',
)


def trajectory_as_dataframe(result: TrajectoryResult) -> DataFrame:
    """Convert TrajectoryResult points to a pandas DataFrame.

    Args:
        result: Simulated flight.

    Returns:
        DataFrame with one row per TrajectoryPoint and the columns in TRAJECTORY_COLUMNS,
        all values as floats in SI units.
    """
    return DataFrame([p.in_def_units() for p in result], columns=list(TRAJECTORY_COLUMNS))
