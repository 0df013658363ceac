"""TOML configuration for engines, cache and optimizers.

Configuration lives in `.golfflight.toml` or `golfflight.toml`. Without an explicit path,
`load_config` searches the current directory and its parents. All sections are optional:

```toml
[golfflight.engine]
cStepMultiplier = 2.0
cTurbulence = true

[golfflight.cache]
max_size_mb = 50

[golfflight.pso]
num_particles = 30
seed = 7
```
"""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, asdict, field, fields

from typing_extensions import Any, Dict, Optional, TypedDict

from py_golfflight.cache import cMaxAgeSeconds, cMaxSizeMB
from py_golfflight.engines.base_engine import BaseEngineConfigDict, create_base_engine_config
from py_golfflight.exceptions import InvalidInputError
from py_golfflight.logger import logger
from py_golfflight.optimization.annealing import SAConfigDict, create_sa_config
from py_golfflight.optimization.evolution import DEConfigDict, create_de_config
from py_golfflight.optimization.pso import PSOConfigDict, create_pso_config

if sys.version_info[:2] < (3, 11):
    import tomli as tomllib
else:
    import tomllib

__all__ = (
    'CONFIG_FILENAMES',
    'CacheConfig',
    'CacheConfigDict',
    'DEFAULT_CACHE_CONFIG',
    'create_cache_config',
    'SimulationConfig',
    'find_config_file',
    'load_config',
)

CONFIG_FILENAMES = ('.golfflight.toml', 'golfflight.toml')


@dataclass
class CacheConfig:
    max_size_mb: float = cMaxSizeMB
    max_age_seconds: float = cMaxAgeSeconds


DEFAULT_CACHE_CONFIG: CacheConfig = CacheConfig()


class CacheConfigDict(TypedDict, total=False):
    max_size_mb: Optional[float]
    max_age_seconds: Optional[float]


def create_cache_config(interface_config: Optional[CacheConfigDict] = None) -> CacheConfig:
    config = asdict(DEFAULT_CACHE_CONFIG)
    if interface_config is not None and isinstance(interface_config, dict):
        unknown = set(interface_config) - {f.name for f in fields(CacheConfig)}
        if unknown:
            raise InvalidInputError(f"Unknown cache config keys: {sorted(unknown)}", 'cache', sorted(unknown))
        config.update({k: v for k, v in interface_config.items() if v is not None})
    return CacheConfig(**config)


@dataclass
class SimulationConfig:
    """Per-component configuration dictionaries, ready to pass to the component factories.

    Values are kept as the TypedDicts the components accept, so an engine or optimizer
    receives exactly the keys that were configured and defaults fill in the rest.
    """

    engine: BaseEngineConfigDict = field(default_factory=dict)  # type: ignore[assignment]
    cache: CacheConfigDict = field(default_factory=dict)  # type: ignore[assignment]
    pso: PSOConfigDict = field(default_factory=dict)  # type: ignore[assignment]
    annealing: SAConfigDict = field(default_factory=dict)  # type: ignore[assignment]
    evolution: DEConfigDict = field(default_factory=dict)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        # each factory raises InvalidInputError for unknown keys or invalid values
        create_base_engine_config(self.engine)
        create_cache_config(self.cache)
        create_pso_config(self.pso)
        create_sa_config(self.annealing)
        create_de_config(self.evolution)


def find_config_file(start_dir: Optional[str] = None) -> Optional[str]:
    """Search `start_dir` (default: current directory) and its parents for a config file.

    Returns:
        The absolute path of the first `.golfflight.toml` or `golfflight.toml` found, otherwise None.
    """
    current_dir = os.path.abspath(start_dir if start_dir is not None else os.getcwd())
    while True:
        for name in CONFIG_FILENAMES:
            candidate = os.path.join(current_dir, name)
            if os.path.exists(candidate):
                return os.path.abspath(candidate)
        parent_dir = os.path.dirname(current_dir)
        if parent_dir == current_dir:
            return None
        current_dir = parent_dir


def load_config(filepath: Optional[str] = None, suppress_warnings: bool = False) -> SimulationConfig:
    """Load SimulationConfig from a TOML file.

    Args:
        filepath: Path to configuration file. If None, searches for .golfflight.toml or golfflight.toml.
        suppress_warnings: If True, suppress warning messages.

    Returns:
        SimulationConfig; all defaults when no file is found.

    Raises:
        InvalidInputError: For unknown sections or keys, or invalid values.
    """
    if filepath is None:
        filepath = find_config_file()
    if filepath is None:
        logger.debug("No golfflight config file found, using defaults")
        return SimulationConfig()

    logger.debug(f"Found {os.path.basename(filepath)} at {os.path.dirname(filepath)}")
    with open(filepath, "rb") as fp:
        _config = tomllib.load(fp)

    section: Dict[str, Any] = _config.get('golfflight', {})
    if not section:
        if not suppress_warnings:
            logger.warning("Config has no `golfflight` section")
        return SimulationConfig()

    known = {f.name for f in fields(SimulationConfig)}
    unknown = set(section) - known
    if unknown:
        raise InvalidInputError(f"Unknown config sections: {sorted(unknown)}", 'golfflight', sorted(unknown))
    for name, value in section.items():
        if not isinstance(value, dict):
            raise InvalidInputError(f"Config section `golfflight.{name}` must be a table", name, value)
    return SimulationConfig(**{name: dict(value) for name, value in section.items()})
