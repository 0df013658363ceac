# pylint: skip-file

from .dataframe import (
    TRAJECTORY_COLUMNS,
    trajectory_as_dataframe,
)

__all__ = (
    'TRAJECTORY_COLUMNS',
    'trajectory_as_dataframe',
)
