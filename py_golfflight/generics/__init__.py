"""Generic type definitions for flight integration engines.

Protocol Definitions:
    EngineProtocol: Core interface for flight integration engines

Type Variables:
    ConfigT: Generic configuration type for engine parameters
"""

# Local imports
from .engine import ConfigT, EngineProtocol

__all__ = (
    'ConfigT',
    'EngineProtocol',
)
