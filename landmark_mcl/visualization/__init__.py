"""
Visualization utilities for localization.
"""

from .particles import plot_particles, plot_trajectory, plot_covariance_ellipse

__all__ = [
    'plot_particles',
    'plot_trajectory',
    'plot_covariance_ellipse',
]
