"""
Landmark MCL

Monte Carlo localization of a vehicle against a known landmark map.
Provides a particle filter with a CTRV motion model and a uniform grid
space partition for fast nearest landmark association.

License: MIT
"""

__version__ = "1.0.0"

from .exceptions import (
    LocalizationError,
    InvalidGeometry,
    NotInitialized,
    InvalidConfiguration,
    TelemetryError,
)
from .config import FilterConfig, load_config, resolve_config
from .models.landmarks import Landmark, Observation, load_map
from .spatial.partition import Partition2D
from .filters.particle import ParticleFilter, Particle
from .session import LocalizationSession

__all__ = [
    'LocalizationError',
    'InvalidGeometry',
    'NotInitialized',
    'InvalidConfiguration',
    'TelemetryError',
    'FilterConfig',
    'load_config',
    'resolve_config',
    'Landmark',
    'Observation',
    'load_map',
    'Partition2D',
    'ParticleFilter',
    'Particle',
    'LocalizationSession',
]
