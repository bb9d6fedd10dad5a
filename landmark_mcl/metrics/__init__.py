"""
Diagnostics for localization evaluation.
"""

from .performance import pose_errors, pose_rmse, weight_statistics, print_metrics

__all__ = [
    'pose_errors',
    'pose_rmse',
    'weight_statistics',
    'print_metrics',
]
