import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from landmark_mcl.models.landmarks import Landmark
from landmark_mcl.spatial.partition import Partition2D


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def three_points():
    return [Landmark(1, 0.0, 0.0), Landmark(2, 10.0, 0.0), Landmark(3, 0.0, 10.0)]


@pytest.fixture
def three_point_index(three_points):
    index = Partition2D((-1.0, -1.0, 11.0, 11.0), cell_size=5.0, max_dist=20.0)
    index.insert_all(three_points)
    return index


@pytest.fixture
def random_landmarks(rng):
    xs = rng.uniform(0.0, 100.0, size=200)
    ys = rng.uniform(0.0, 100.0, size=200)
    return [Landmark(i + 1, float(x), float(y)) for i, (x, y) in enumerate(zip(xs, ys))]
