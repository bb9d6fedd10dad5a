"""
Filter configuration.

Defaults match the reference vehicle setup: 1000 particles, 0.1 s time
step, 50 m sensor range, GPS noise (0.3 m, 0.3 m, 0.01 rad) and landmark
noise (0.3 m, 0.3 m). A configuration can be loaded from a JSON file
whose keys are the field names below.
"""

import json
import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

from .exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass
class FilterConfig:
    """
    Parameters of a localization session.

    Parameters
    ----------
    num_particles : int
        Population size
    delta_t : float
        Time between telemetry messages [s]
    sensor_range : float
        Sensor range [m]
    std_pos : tuple of 3 floats
        Pose noise std-devs (x [m], y [m], theta [rad]); the heading
        std is clamped to 2*pi
    std_landmark : tuple of 2 floats
        Landmark measurement std-devs (x [m], y [m])
    cell_size : float
        Spatial index cell size [m]
    max_search_dist : float
        Landmark association search distance [m]
    world_margin : float
        Margin added around the map's bounding box [m]
    seed : int, optional
        Random seed for reproducibility
    """

    num_particles: int = 1000
    delta_t: float = 0.1
    sensor_range: float = 50.0
    std_pos: Tuple[float, float, float] = (0.3, 0.3, 0.01)
    std_landmark: Tuple[float, float] = (0.3, 0.3)
    cell_size: float = 5.0
    max_search_dist: float = 50.0
    world_margin: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self):
        try:
            self.std_pos = tuple(float(v) for v in self.std_pos)
            self.std_landmark = tuple(float(v) for v in self.std_landmark)
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"noise std-devs must be numbers: {exc}") from exc
        self.validate()

    def validate(self):
        """Check every field; raise InvalidConfiguration on the first bad one."""
        if isinstance(self.num_particles, bool) or not isinstance(self.num_particles, int):
            raise InvalidConfiguration(f"num_particles must be an integer, got {self.num_particles!r}")
        if self.num_particles <= 0:
            raise InvalidConfiguration(f"num_particles must be positive, got {self.num_particles}")

        for name in ("delta_t", "sensor_range", "cell_size", "max_search_dist"):
            value = getattr(self, name)
            if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
                raise InvalidConfiguration(f"{name} must be a positive number, got {value!r}")

        margin = self.world_margin
        if not (isinstance(margin, (int, float)) and math.isfinite(margin) and margin >= 0):
            raise InvalidConfiguration(f"world_margin must be non-negative, got {self.world_margin!r}")

        if len(self.std_pos) != 3:
            raise InvalidConfiguration(f"std_pos needs 3 values, got {len(self.std_pos)}")
        if len(self.std_landmark) != 2:
            raise InvalidConfiguration(f"std_landmark needs 2 values, got {len(self.std_landmark)}")
        if any(not math.isfinite(v) or v < 0 for v in self.std_pos):
            raise InvalidConfiguration(f"std_pos must be non-negative, got {self.std_pos}")
        if any(not math.isfinite(v) or v <= 0 for v in self.std_landmark):
            raise InvalidConfiguration(f"std_landmark must be positive, got {self.std_landmark}")

        # A heading spread beyond a full turn carries no information
        if self.std_pos[2] > 2 * math.pi:
            logger.warning("Clamping heading std %.3f to 2*pi", self.std_pos[2])
            self.std_pos = (self.std_pos[0], self.std_pos[1], 2 * math.pi)

    @classmethod
    def from_dict(cls, values):
        """
        Build a config from a mapping.

        Raises
        ------
        InvalidConfiguration
            On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidConfiguration(f"unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**values)
        except TypeError as exc:
            raise InvalidConfiguration(str(exc)) from exc

    def to_dict(self):
        values = asdict(self)
        values["std_pos"] = list(self.std_pos)
        values["std_landmark"] = list(self.std_landmark)
        return values


def load_config(path):
    """
    Load a FilterConfig from a JSON file.

    Parameters
    ----------
    path : str or Path
        JSON file holding an object keyed by FilterConfig field names

    Returns
    -------
    config : FilterConfig
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            values = json.load(f)
    except json.JSONDecodeError as exc:
        raise InvalidConfiguration(f"{path.name}: {exc}") from exc
    if not isinstance(values, dict):
        raise InvalidConfiguration(f"{path.name}: expected a JSON object")

    config = FilterConfig.from_dict(values)
    logger.info("Loaded configuration from %s", path.name)
    return config


def save_config(config, path):
    """Write a FilterConfig as JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def resolve_config(path=None, **overrides):
    """
    Build a FilterConfig from an optional JSON file and explicit values.

    Parameters
    ----------
    path : str or Path, optional
        JSON configuration file; defaults are used if None
    **overrides
        Field values that replace the file's; None values are ignored

    Returns
    -------
    config : FilterConfig
        Validated configuration (heading std clamped to 2*pi)
    """
    values = load_config(path).to_dict() if path is not None else {}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return FilterConfig.from_dict(values)
