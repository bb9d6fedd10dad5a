"""
Vehicle and map models used by the localization filter.

This module provides the landmark map types and loader, and the CTRV
motion model with the vehicle/world frame transforms.
"""

from .landmarks import Landmark, Observation, load_map, landmarks_from_arrays, bounding_box
from .motion import ctrv_step, vehicle_to_world, world_to_vehicle, YAW_RATE_EPSILON

__all__ = [
    'Landmark',
    'Observation',
    'load_map',
    'landmarks_from_arrays',
    'bounding_box',
    'ctrv_step',
    'vehicle_to_world',
    'world_to_vehicle',
    'YAW_RATE_EPSILON',
]
