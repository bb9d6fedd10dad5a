"""
Particle Filter (PF) for landmark based localization.

A Sequential Importance Resampling (SIR) filter estimating the 2-D pose
(x, y, theta) of a vehicle from vehicle-frame landmark observations and
a known map. Observations are associated with landmarks through a
:class:`~landmark_mcl.spatial.Partition2D` index.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..common.angles import angle_diff, circular_mean, normalize_angle
from ..common.rng import make_rng
from ..exceptions import InvalidConfiguration, NotInitialized
from ..models.motion import ctrv_step, vehicle_to_world

logger = logging.getLogger(__name__)

# Likelihood used for an observation with no landmark in search range
LIKELIHOOD_FLOOR = 1e-10

# Denominator of the Gaussian exponent. The textbook density uses 2;
# 20 flattens the distribution so large residuals do not drive every
# weight to zero. Weights are only compared relative to each other.
EXPONENT_DENOMINATOR = 20.0


@dataclass
class Particle:
    """
    One weighted pose hypothesis.

    ``associations``, ``sense_x`` and ``sense_y`` are rebuilt on every
    weight update: entry k belongs to the k-th observation that matched
    a landmark. Observations without a match are skipped, so the lists
    can be shorter than the observation list.
    """

    id: int
    x: float
    y: float
    theta: float
    weight: float = 1.0
    associations: List[int] = field(default_factory=list)
    sense_x: List[float] = field(default_factory=list)
    sense_y: List[float] = field(default_factory=list)

    def copy(self):
        """Copy with independent scratch lists."""
        return Particle(self.id, self.x, self.y, self.theta, self.weight,
                        list(self.associations), list(self.sense_x), list(self.sense_y))


def _normalize_weights(weights):
    """
    Scale weights to probabilities.

    Weights are divided by their maximum first so large likelihood
    products do not overflow the sum. Infinite weights dominate every
    finite one and share the mass equally. Returns None when the
    weights are all zero or contain NaN.
    """
    weights = np.asarray(weights, dtype=float)
    infinite = np.isposinf(weights)
    if infinite.any():
        return infinite / infinite.sum()

    peak = weights.max()
    if not (peak > 0 and np.isfinite(peak)):
        return None
    weights = weights / peak
    return weights / weights.sum()


class ParticleFilter:
    """
    Monte Carlo localization against a landmark map.

    Each cycle runs ``predict`` (CTRV motion model), ``update_weights``
    (nearest landmark association) and ``resample`` (multinomial).

    Parameters
    ----------
    num_particles : int
        Population size N, fixed for the filter's lifetime
    rng : np.random.Generator, optional
        Random source for noise and resampling
    seed : int, optional
        Seed for a new generator when ``rng`` is not given

    Attributes
    ----------
    particles : list of Particle
        Current population
    weights : np.ndarray
        Weight of each particle (N,), parallel to ``particles``
    std_pos : np.ndarray
        Pose noise std-devs [x, y, theta] given to ``init``, reused as
        process noise by ``predict``

    Examples
    --------
    >>> pf = ParticleFilter(num_particles=500, seed=42)
    >>> pf.init(6.3, 1.9, 0.0, std_pos=[0.3, 0.3, 0.01])
    >>> pf.predict(dt=0.1, velocity=10.0, yaw_rate=0.05)
    >>> pf.update_weights(50.0, [0.3, 0.3], observations, index)
    >>> pf.resample()
    >>> best = pf.best_particle()
    """

    def __init__(self, num_particles, rng=None, seed=None):
        if isinstance(num_particles, bool) or not isinstance(num_particles, (int, np.integer)):
            raise InvalidConfiguration(f"particle count must be an integer, got {num_particles!r}")
        if num_particles <= 0:
            raise InvalidConfiguration(f"particle count must be positive, got {num_particles}")

        self.num_particles = int(num_particles)
        self.rng = make_rng(rng, seed)

        self.particles = []
        self.weights = np.zeros(0)
        self.std_pos = None
        self.is_initialized = False

        # Association statistics
        self.searches = 0
        self.searched = 0

    @property
    def initialized(self):
        """Whether ``init`` has been called."""
        return self.is_initialized

    def _require_initialized(self, operation):
        if not self.is_initialized:
            raise NotInitialized(f"{operation}() called before init()")

    @staticmethod
    def _check_std(std, size, name, allow_zero=True):
        std = np.asarray(std, dtype=float)
        if std.shape != (size,):
            raise InvalidConfiguration(f"{name} must have {size} entries, got shape {std.shape}")
        if not np.all(np.isfinite(std)):
            raise InvalidConfiguration(f"{name} must be finite, got {std.tolist()}")
        if allow_zero and np.any(std < 0):
            raise InvalidConfiguration(f"{name} must be non-negative, got {std.tolist()}")
        if not allow_zero and np.any(std <= 0):
            raise InvalidConfiguration(f"{name} must be positive, got {std.tolist()}")
        return std

    def _draw_pose_noise(self):
        """Gaussian noise (3, N) with the std-devs given to init."""
        return self.rng.normal(0.0, 1.0, size=(3, self.num_particles)) * self.std_pos[:, None]

    def init(self, x, y, theta, std_pos):
        """
        Populate the filter around an initial pose estimate.

        Each particle's pose is drawn independently from a Gaussian
        centred on (x, y, theta); headings are wrapped to (-pi, pi] and
        all weights set to 1.

        Parameters
        ----------
        x, y : float
            Initial position [m], e.g. from GPS
        theta : float
            Initial heading [rad]
        std_pos : array_like
            Standard deviations [x [m], y [m], theta [rad]]
        """
        self.std_pos = self._check_std(std_pos, 3, "std_pos")

        noise = self._draw_pose_noise()
        xs = x + noise[0]
        ys = y + noise[1]
        thetas = normalize_angle(theta + noise[2])

        self.particles = [
            Particle(i, float(xs[i]), float(ys[i]), float(thetas[i]), 1.0)
            for i in range(self.num_particles)
        ]
        self.weights = np.ones(self.num_particles)
        self.is_initialized = True

        logger.info("Initialized %d particles around (%.3f, %.3f, %.3f)",
                    self.num_particles, x, y, theta)

    def predict(self, dt, velocity, yaw_rate):
        """
        Propagate every particle through the motion model.

        Uses the CTRV arc formula, or the straight-line limit when the
        yaw rate is near zero, then adds Gaussian process noise with the
        ``init`` std-devs and re-wraps the heading.

        Parameters
        ----------
        dt : float
            Time between steps [s]
        velocity : float
            Velocity from t to t+1 [m/s]
        yaw_rate : float
            Yaw rate from t to t+1 [rad/s]
        """
        self._require_initialized("predict")

        xs = np.array([p.x for p in self.particles])
        ys = np.array([p.y for p in self.particles])
        thetas = np.array([p.theta for p in self.particles])

        xs, ys, thetas = ctrv_step(xs, ys, thetas, dt, velocity, yaw_rate)

        noise = self._draw_pose_noise()
        xs = xs + noise[0]
        ys = ys + noise[1]
        thetas = normalize_angle(thetas + noise[2])

        for i, particle in enumerate(self.particles):
            particle.x = float(xs[i])
            particle.y = float(ys[i])
            particle.theta = float(thetas[i])

    def update_weights(self, sensor_range, std_landmark, observations, index):
        """
        Weight each particle by the likelihood of the observations.

        For every particle, each observation is moved into the world
        frame using the particle's pose and associated with the nearest
        landmark found by ``index``. A matched observation contributes a
        2-D Gaussian density of the residual with the exponent divided by
        ``EXPONENT_DENOMINATOR`` instead of 2; an unmatched one
        contributes ``LIKELIHOOD_FLOOR``. The particle weight is the
        product, 1.0 for no observations.

        Parameters
        ----------
        sensor_range : float
            Sensor range [m]. The association radius is set by the
            index's search levels, so this is only validated.
        std_landmark : array_like
            Landmark measurement std-devs [x [m], y [m]], positive
        observations : sequence
            Vehicle-frame observations with ``x``/``y`` attributes or
            (x, y) pairs
        index : Partition2D
            Landmark index; only read
        """
        self._require_initialized("update_weights")
        if not sensor_range > 0:
            raise InvalidConfiguration(f"sensor range must be positive, got {sensor_range}")
        std_x, std_y = self._check_std(std_landmark, 2, "std_landmark", allow_zero=False)

        obs_x = np.array([_coord(o, 0) for o in observations], dtype=float)
        obs_y = np.array([_coord(o, 1) for o in observations], dtype=float)

        norm = 1.0 / (2.0 * np.pi * std_x * std_y)
        weights = np.empty(self.num_particles)
        scratch = []
        searches = 0
        searched = 0

        for i, particle in enumerate(self.particles):
            world_x, world_y = vehicle_to_world(particle.x, particle.y, particle.theta,
                                                obs_x, obs_y)
            associations, sense_x, sense_y = [], [], []
            weight = 1.0

            for wx, wy in zip(world_x.tolist(), world_y.tolist()):
                nearest, _, count = index.find_nearest(wx, wy)
                searches += 1
                if nearest is None:
                    weight *= LIKELIHOOD_FLOOR
                    continue

                searched += count
                dx = (wx - nearest.x) / std_x
                dy = (wy - nearest.y) / std_y
                weight *= norm * np.exp(-(dx * dx + dy * dy) / EXPONENT_DENOMINATOR)
                associations.append(nearest.id)
                sense_x.append(wx)
                sense_y.append(wy)

            weights[i] = weight
            scratch.append((associations, sense_x, sense_y))

        for particle, weight, (associations, sense_x, sense_y) in zip(
                self.particles, weights, scratch):
            particle.weight = float(weight)
            particle.associations = associations
            particle.sense_x = sense_x
            particle.sense_y = sense_y
        self.weights = weights
        self.searches += searches
        self.searched += searched

        logger.debug("Weights updated: highest %.3e, mean %.3e, %d lookups",
                     weights.max(), weights.mean(), searches)

    def resample(self):
        """
        Draw a new population with probability proportional to weight.

        Multinomial resampling: N independent draws with replacement.
        Each new particle is a copy of its source, scratch association
        data included. Infinite weights take all the draws. If every
        weight is zero or any weight is NaN the draws are uniform.

        Returns
        -------
        np.ndarray
            Source index of each new particle (N,)
        """
        self._require_initialized("resample")

        indices = self._multinomial_resample()
        self.particles = [self.particles[i].copy() for i in indices]
        self.weights = np.array([p.weight for p in self.particles])
        return indices

    def _multinomial_resample(self):
        """
        Multinomial resampling indices.

        Returns
        -------
        np.ndarray
            Indices of resampled particles
        """
        probabilities = _normalize_weights(self.weights)
        if probabilities is None:
            logger.warning("Resampling with degenerate weights (sum=%s), drawing uniformly",
                           np.sum(self.weights))

        return self.rng.choice(self.num_particles, size=self.num_particles, p=probabilities)

    def best_particle(self):
        """Highest-weight particle; the first one wins ties."""
        self._require_initialized("best_particle")
        return max(self.particles, key=lambda p: p.weight)

    def estimate(self):
        """
        Weighted mean pose and covariance of the population.

        Headings are averaged on the circle. Falls back to uniform
        weights when all weights are zero.

        Returns
        -------
        mean : np.ndarray
            [x, y, theta] (3,)
        cov : np.ndarray
            Weighted covariance (3, 3), heading deviations wrapped
        """
        self._require_initialized("estimate")

        poses = np.array([[p.x, p.y, p.theta] for p in self.particles])
        weights = _normalize_weights([p.weight for p in self.particles])
        if weights is None:
            weights = np.full(self.num_particles, 1.0 / self.num_particles)

        mean = np.empty(3)
        mean[:2] = weights @ poses[:, :2]
        mean[2] = circular_mean(poses[:, 2], weights)

        diff = poses - mean
        diff[:, 2] = angle_diff(poses[:, 2], mean[2])
        cov = np.einsum("i,ij,ik->jk", weights, diff, diff)

        return mean, cov

    def average_search(self):
        """Entities examined per landmark lookup so far; 0 before any lookup."""
        if self.searches == 0:
            return 0.0
        return self.searched / self.searches

    def reset_statistics(self):
        self.searches = 0
        self.searched = 0

    @staticmethod
    def set_associations(particle, associations, sense_x, sense_y):
        """
        Copy of ``particle`` with replaced association data.

        Parameters
        ----------
        particle : Particle
            Particle to copy
        associations : sequence of int
            Landmark id of each association
        sense_x, sense_y : sequence of float
            World coordinates of each associated observation
        """
        updated = particle.copy()
        updated.associations = list(associations)
        updated.sense_x = list(sense_x)
        updated.sense_y = list(sense_y)
        return updated

    @staticmethod
    def get_associations(particle):
        """Landmark ids as space separated text."""
        return " ".join(str(a) for a in particle.associations)

    @staticmethod
    def get_sense_x(particle):
        """World x of associated observations as space separated text."""
        return _format_floats(particle.sense_x)

    @staticmethod
    def get_sense_y(particle):
        """World y of associated observations as space separated text."""
        return _format_floats(particle.sense_y)


def _coord(observation, axis):
    if hasattr(observation, "x"):
        return observation.y if axis else observation.x
    return observation[axis]


def _format_floats(values):
    # Six significant digits, like a C++ ostream
    return " ".join(f"{v:g}" for v in values)
