"""
Constant turn rate and velocity (CTRV) motion model.

State: pose = [x, y, theta]
- (x, y): position in world frame
- theta: heading

Control: u = [velocity, yaw_rate], held constant over the time step.
"""

import numpy as np

# Below this yaw rate the straight-line limit is used
YAW_RATE_EPSILON = 1e-5


def ctrv_step(x, y, theta, dt, velocity, yaw_rate):
    """
    Propagate pose(s) one time step without noise.

    Works on scalars or on equally shaped arrays (a whole particle
    population at once).

    Parameters
    ----------
    x, y, theta : float or np.ndarray
        Current pose(s)
    dt : float
        Time step in seconds
    velocity : float
        Forward speed in m/s
    yaw_rate : float
        Turn rate in rad/s

    Returns
    -------
    tuple of (x, y, theta)
        Propagated pose(s). Heading is not wrapped.

    Notes
    -----
    For ``|yaw_rate| >= YAW_RATE_EPSILON`` the vehicle follows an arc:
        x' = x + v / w * (sin(theta + w dt) - sin(theta))
        y' = y + v / w * (cos(theta) - cos(theta + w dt))
    otherwise the straight-line limit:
        x' = x + v dt cos(theta)
        y' = y + v dt sin(theta)
    """
    new_theta = theta + yaw_rate * dt

    if abs(yaw_rate) >= YAW_RATE_EPSILON:
        radius = velocity / yaw_rate
        new_x = x + radius * (np.sin(new_theta) - np.sin(theta))
        new_y = y + radius * (np.cos(theta) - np.cos(new_theta))
    else:
        new_x = x + velocity * dt * np.cos(theta)
        new_y = y + velocity * dt * np.sin(theta)

    return new_x, new_y, new_theta


def vehicle_to_world(px, py, ptheta, obs_x, obs_y):
    """
    Rigid transform of a vehicle-frame point into the world frame.

    Rotation by the vehicle heading followed by translation by its
    position.
    """
    cos_t = np.cos(ptheta)
    sin_t = np.sin(ptheta)
    return (px + obs_x * cos_t - obs_y * sin_t,
            py + obs_x * sin_t + obs_y * cos_t)


def world_to_vehicle(px, py, ptheta, world_x, world_y):
    """Inverse of :func:`vehicle_to_world`."""
    dx = world_x - px
    dy = world_y - py
    cos_t = np.cos(ptheta)
    sin_t = np.sin(ptheta)
    return (dx * cos_t + dy * sin_t,
            -dx * sin_t + dy * cos_t)
