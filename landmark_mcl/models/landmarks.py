"""
Landmark map and observation types.

The map provider hands the core an ordered list of landmarks, each with
a stable integer id and world coordinates. Observations are landmark
positions measured in the vehicle frame (x forward, y left).
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from ..exceptions import InvalidGeometry

logger = logging.getLogger(__name__)

MAP_COLUMNS = ["x", "y", "id"]


@dataclass(frozen=True)
class Landmark:
    """A map landmark at world position (x, y)."""

    id: int
    x: float
    y: float


@dataclass(frozen=True)
class Observation:
    """A landmark detection in the vehicle frame."""

    x: float
    y: float


def load_map(path):
    """
    Load a landmark map file.

    The file holds one landmark per line as whitespace separated
    ``x y id`` columns, without a header.

    Parameters
    ----------
    path : str or Path
        Map file to read

    Returns
    -------
    list of Landmark
        Landmarks in file order
    """
    path = Path(path)
    df = pd.read_csv(path, sep=r"\s+", header=None, names=MAP_COLUMNS,
                     dtype={"x": float, "y": float, "id": int},
                     float_precision="round_trip")

    landmarks = [Landmark(int(row.id), float(row.x), float(row.y))
                 for row in df.itertuples(index=False)]
    logger.info("Loaded %d landmarks from %s", len(landmarks), path.name)
    return landmarks


def landmarks_from_arrays(xs, ys, ids=None):
    """Build landmarks from coordinate arrays; ids default to 1..n."""
    if ids is None:
        ids = range(1, len(xs) + 1)
    return [Landmark(int(i), float(x), float(y)) for i, x, y in zip(ids, xs, ys)]


def bounding_box(landmarks, margin=1.0):
    """
    World rectangle enclosing all landmarks.

    Parameters
    ----------
    landmarks : sequence of Landmark
        Non-empty landmark list
    margin : float, optional
        Distance added on every side (default: 1.0)

    Returns
    -------
    tuple
        ``(x0, y0, x1, y1)``
    """
    if not landmarks:
        raise InvalidGeometry("cannot compute a bounding box of an empty map")
    if margin < 0:
        raise InvalidGeometry(f"margin must be non-negative, got {margin}")

    xs = [lm.x for lm in landmarks]
    ys = [lm.y for lm in landmarks]
    return (min(xs) - margin, min(ys) - margin,
            max(xs) + margin, max(ys) + margin)
