"""
In-process telemetry session.

Turns telemetry messages into filter cycles and replies with the best
particle. The first message carries a noisy pose estimate and
initializes the filter; later ones carry the previous control inputs.
Every message carries the current observations.

Message fields (numbers may be given as strings)::

    sense_x, sense_y, sense_theta          first message only
    previous_velocity, previous_yawrate    following messages
    sense_observations_x                   space separated, or a sequence
    sense_observations_y

Reply fields::

    best_particle_x, best_particle_y, best_particle_theta
    best_particle_associations, best_particle_sense_x, best_particle_sense_y
"""

import logging

from .config import FilterConfig
from .exceptions import TelemetryError
from .filters.particle import ParticleFilter
from .metrics.performance import weight_statistics
from .models.landmarks import Observation, bounding_box
from .spatial.partition import Partition2D

logger = logging.getLogger(__name__)


def _number(message, key):
    try:
        return float(message[key])
    except KeyError:
        raise TelemetryError(f"telemetry is missing '{key}'") from None
    except (TypeError, ValueError):
        raise TelemetryError(f"telemetry field '{key}' is not a number: {message[key]!r}") from None


def _values(raw, key):
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split()
    try:
        return [float(v) for v in raw]
    except (TypeError, ValueError):
        raise TelemetryError(f"telemetry field '{key}' holds non-numeric values") from None


def parse_observations(xs, ys):
    """
    Pair observation coordinates into Observation objects.

    Parameters
    ----------
    xs, ys : str or sequence
        Vehicle-frame coordinates, as space separated text or numbers

    Returns
    -------
    list of Observation
    """
    xs = _values(xs, "sense_observations_x")
    ys = _values(ys, "sense_observations_y")
    if len(xs) != len(ys):
        raise TelemetryError(
            f"observation x/y counts differ: {len(xs)} vs {len(ys)}"
        )
    return [Observation(x, y) for x, y in zip(xs, ys)]


class LocalizationSession:
    """
    Runs one predict/update/resample cycle per telemetry message.

    Parameters
    ----------
    landmarks : sequence of Landmark
        Static map; the spatial index is built from it once
    config : FilterConfig, optional
        Filter parameters (default: FilterConfig())
    rng : np.random.Generator, optional
        Random source for the filter; overrides ``config.seed``
    """

    def __init__(self, landmarks, config=None, rng=None):
        self.config = config if config is not None else FilterConfig()
        self.landmarks = list(landmarks)

        bounds = bounding_box(self.landmarks, self.config.world_margin)
        self.index = Partition2D(bounds, self.config.cell_size, self.config.max_search_dist)
        self.index.insert_all(self.landmarks)
        logger.info("World %s, %d landmarks, %dx%d cells, %d search levels",
                    bounds, len(self.index), self.index.dim_x, self.index.dim_y,
                    self.index.search_levels)

        self.filter = ParticleFilter(self.config.num_particles, rng=rng, seed=self.config.seed)
        self.cycles = 0

    def process_telemetry(self, message):
        """
        Run one filter cycle for a telemetry message.

        Parameters
        ----------
        message : dict
            Telemetry fields, see the module docstring

        Returns
        -------
        dict
            Best particle pose and its association diagnostics
        """
        # Parse everything before touching the filter
        observations = parse_observations(message.get("sense_observations_x"),
                                          message.get("sense_observations_y"))
        if not self.filter.initialized:
            pose = (_number(message, "sense_x"), _number(message, "sense_y"),
                    _number(message, "sense_theta"))
            self.filter.init(*pose, std_pos=self.config.std_pos)
        else:
            velocity = _number(message, "previous_velocity")
            yaw_rate = _number(message, "previous_yawrate")
            self.filter.predict(self.config.delta_t, velocity, yaw_rate)

        self.filter.update_weights(self.config.sensor_range, self.config.std_landmark,
                                   observations, self.index)
        self.filter.resample()
        self.cycles += 1

        stats = weight_statistics(self.filter.weights)
        logger.debug("cycle %d: highest w %.3e, average w %.3e, average objects searched %.2f",
                     self.cycles, stats["highest"], stats["mean"], self.filter.average_search())

        return self.best_particle_reply()

    def best_particle_reply(self):
        """Reply fields for the current best particle."""
        best = self.filter.best_particle()
        return {
            "best_particle_x": best.x,
            "best_particle_y": best.y,
            "best_particle_theta": best.theta,
            "best_particle_associations": ParticleFilter.get_associations(best),
            "best_particle_sense_x": ParticleFilter.get_sense_x(best),
            "best_particle_sense_y": ParticleFilter.get_sense_y(best),
        }
