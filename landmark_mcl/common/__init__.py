"""
Common utilities for pose estimation.

Includes angle wrapping, circular statistics and random generator
helpers.
"""

from .angles import normalize_angle, angle_diff, circular_mean
from .rng import make_rng, spawn_generators

__all__ = [
    'normalize_angle',
    'angle_diff',
    'circular_mean',
    'make_rng',
    'spawn_generators',
]
