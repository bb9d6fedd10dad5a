"""
Synthetic scenarios for localization testing.

Generates a random landmark map and a CTRV vehicle trajectory through
it, with the telemetry a simulator would send: a noisy initial pose,
the noiseless controls of the previous step and noisy vehicle-frame
observations of the landmarks within sensor range.

All generators produce a consistent output format:
    - time: array of timestamps
    - controls: array of control inputs [velocity, yaw_rate]
    - ground_truth: array of true poses [x, y, theta]
    - gps: noisy initial pose [x, y, theta]
    - observations: list of per-step Observation lists
    - landmarks: list of Landmark
    - dt: time step
"""

import numpy as np

from .common.angles import normalize_angle
from .common.rng import make_rng
from .models.landmarks import Landmark, Observation
from .models.motion import ctrv_step, world_to_vehicle


def generate_landmark_map(n_landmarks=60, extent=(0.0, 0.0, 150.0, 100.0), rng=None):
    """
    Scatter landmarks uniformly over a rectangle.

    Parameters
    ----------
    n_landmarks : int, optional
        Number of landmarks (default: 60)
    extent : tuple, optional
        Rectangle ``(x0, y0, x1, y1)``
    rng : np.random.Generator, optional
        Random source

    Returns
    -------
    list of Landmark
        Landmarks with ids 1..n_landmarks
    """
    rng = make_rng(rng)
    x0, y0, x1, y1 = extent
    xs = rng.uniform(x0, x1, size=n_landmarks)
    ys = rng.uniform(y0, y1, size=n_landmarks)
    return [Landmark(i + 1, float(x), float(y)) for i, (x, y) in enumerate(zip(xs, ys))]


def observe_landmarks(pose, landmarks, sensor_range, std_landmark, rng=None):
    """
    Noisy vehicle-frame observations of landmarks in range.

    Parameters
    ----------
    pose : array_like
        True pose [x, y, theta]
    landmarks : sequence of Landmark
        Map
    sensor_range : float
        Landmarks farther than this are not observed
    std_landmark : array_like
        Observation noise std-devs [x, y]
    rng : np.random.Generator, optional
        Random source

    Returns
    -------
    list of Observation
        In map order
    """
    rng = make_rng(rng)
    x, y, theta = pose
    observations = []
    for lm in landmarks:
        if np.hypot(lm.x - x, lm.y - y) > sensor_range:
            continue
        local_x, local_y = world_to_vehicle(x, y, theta, lm.x, lm.y)
        noise = rng.normal(0.0, std_landmark)
        observations.append(Observation(float(local_x + noise[0]), float(local_y + noise[1])))
    return observations


def generate_scenario(N=100, dt=0.1, velocity=5.0, landmarks=None, start=(20.0, 50.0, 0.0),
                      sensor_range=30.0, std_pos=(0.3, 0.3, 0.01), std_landmark=(0.3, 0.3),
                      rng=None):
    """
    Generate a weaving drive through a landmark field.

    The vehicle moves at constant speed with a yaw rate that varies
    sinusoidally, so both the arc and near-straight motion branches are
    exercised.

    Parameters
    ----------
    N : int
        Number of timesteps
    dt : float
        Time step in seconds
    velocity : float
        Forward speed [m/s]
    landmarks : list of Landmark, optional
        Map; a random one is generated if None
    start : tuple
        True initial pose [x, y, theta]
    sensor_range : float
        Observation range [m]
    std_pos : array_like
        GPS noise of the initial pose estimate [x, y, theta]
    std_landmark : array_like
        Observation noise [x, y]
    rng : np.random.Generator, optional
        Random source

    Returns
    -------
    dict
        See module docstring
    """
    rng = make_rng(rng)
    if landmarks is None:
        landmarks = generate_landmark_map(rng=rng)

    time = np.arange(N) * dt

    controls = np.zeros((N, 2))
    controls[:, 0] = velocity
    controls[:, 1] = 0.15 * np.sin(2.0 * np.pi * time / 8.0)

    ground_truth = np.zeros((N, 3))
    ground_truth[0] = start
    for k in range(N - 1):
        x, y, theta = ctrv_step(*ground_truth[k], dt, *controls[k])
        ground_truth[k + 1] = [x, y, normalize_angle(theta)]

    gps = ground_truth[0] + rng.normal(0.0, std_pos)
    gps[2] = normalize_angle(gps[2])

    observations = [
        observe_landmarks(ground_truth[k], landmarks, sensor_range, std_landmark, rng)
        for k in range(N)
    ]

    return {
        'time': time,
        'controls': controls,
        'ground_truth': ground_truth,
        'gps': gps,
        'observations': observations,
        'landmarks': landmarks,
        'dt': dt,
    }


def telemetry_messages(scenario):
    """
    Yield the telemetry message of each step.

    Values are rendered as text, the way a simulator sends them.
    """
    gps = scenario['gps']
    controls = scenario['controls']

    for k, observations in enumerate(scenario['observations']):
        if k == 0:
            message = {
                'sense_x': f"{gps[0]:.4f}",
                'sense_y': f"{gps[1]:.4f}",
                'sense_theta': f"{gps[2]:.4f}",
            }
        else:
            message = {
                'previous_velocity': f"{controls[k - 1, 0]:.4f}",
                'previous_yawrate': f"{controls[k - 1, 1]:.4f}",
            }
        message['sense_observations_x'] = " ".join(f"{o.x:.4f}" for o in observations)
        message['sense_observations_y'] = " ".join(f"{o.y:.4f}" for o in observations)
        yield message


def replay(session, scenario):
    """
    Feed a scenario through a session.

    Returns
    -------
    np.ndarray
        Best particle pose per step (N, 3)
    """
    estimates = []
    for message in telemetry_messages(scenario):
        reply = session.process_telemetry(message)
        estimates.append([reply['best_particle_x'], reply['best_particle_y'],
                          reply['best_particle_theta']])
    return np.array(estimates)
