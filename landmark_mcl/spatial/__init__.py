"""
Spatial indexing for landmark association.
"""

from .partition import Partition2D, PointEntity

__all__ = [
    'Partition2D',
    'PointEntity',
]
