"""
Angle utilities for pose estimation.

Headings are kept in the half-open range (-pi, pi]. The wrap works on
scalars and numpy arrays alike, so the filter can normalise a whole
population in one call.
"""

import numpy as np


TWO_PI = 2.0 * np.pi


def normalize_angle(angle):
    """
    Wrap angle(s) into (-pi, pi].

    Parameters
    ----------
    angle : float or np.ndarray
        Angle(s) in radians, any magnitude

    Returns
    -------
    float or np.ndarray
        Wrapped angle(s); ``-pi`` maps to ``pi``

    Examples
    --------
    >>> normalize_angle(3 * np.pi)
    3.141592653589793
    >>> normalize_angle(-np.pi)
    3.141592653589793
    """
    angle = np.asarray(angle, dtype=float)
    wrapped = np.pi - np.mod(np.pi - angle, TWO_PI)
    # np.mod can round up to exactly 2*pi for inputs one ulp above pi
    wrapped = np.where(wrapped <= -np.pi, wrapped + TWO_PI, wrapped)
    # In-range values pass through untouched
    wrapped = np.where((angle > -np.pi) & (angle <= np.pi), angle, wrapped)
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def angle_diff(angle1, angle2):
    """
    Smallest signed difference ``angle1 - angle2`` in (-pi, pi].

    Handles the discontinuity at +-pi correctly.
    """
    return normalize_angle(np.asarray(angle1) - np.asarray(angle2))


def circular_mean(angles, weights=None):
    """
    Compute the circular mean of angles.

    Uses atan2(sum(w sin), sum(w cos)) so that averaging across the
    +-pi discontinuity works.

    Parameters
    ----------
    angles : np.ndarray
        Angles in radians
    weights : np.ndarray, optional
        Weight of each angle. If None, uniform weights are used.

    Returns
    -------
    float
        Mean heading in (-pi, pi]
    """
    angles = np.asarray(angles, dtype=float)
    if weights is None:
        weights = np.ones(len(angles))
    else:
        weights = np.asarray(weights, dtype=float)

    sin_sum = np.dot(np.sin(angles), weights)
    cos_sum = np.dot(np.cos(angles), weights)

    return normalize_angle(np.arctan2(sin_sum, cos_sum))
