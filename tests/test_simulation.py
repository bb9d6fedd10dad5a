import numpy as np
import pytest

from landmark_mcl.common.rng import spawn_generators
from landmark_mcl.config import FilterConfig
from landmark_mcl.metrics import pose_errors
from landmark_mcl.models.motion import world_to_vehicle
from landmark_mcl.session import LocalizationSession
from landmark_mcl.simulation import (
    generate_landmark_map,
    generate_scenario,
    observe_landmarks,
    replay,
    telemetry_messages,
)


@pytest.fixture
def scenario():
    scenario_rng, _ = spawn_generators(2024, 2)
    return generate_scenario(N=40, sensor_range=30.0, rng=scenario_rng)


def test_landmark_map(rng):
    landmarks = generate_landmark_map(25, extent=(0.0, 0.0, 50.0, 20.0), rng=rng)
    assert [lm.id for lm in landmarks] == list(range(1, 26))
    assert all(0.0 <= lm.x <= 50.0 and 0.0 <= lm.y <= 20.0 for lm in landmarks)


def test_noiseless_observations_in_range(three_points):
    pose = (1.0, 1.0, 0.4)
    observations = observe_landmarks(pose, three_points, 5.0, (0.0, 0.0))
    assert len(observations) == 1
    expected = world_to_vehicle(*pose, 0.0, 0.0)
    assert (observations[0].x, observations[0].y) == pytest.approx(expected)


def test_scenario_layout(scenario):
    assert scenario["ground_truth"].shape == (40, 3)
    assert scenario["controls"].shape == (40, 2)
    assert len(scenario["observations"]) == 40
    assert scenario["controls"][0, 1] == 0.0
    assert all(len(obs) > 0 for obs in scenario["observations"])


def test_telemetry_messages(scenario):
    messages = list(telemetry_messages(scenario))
    assert len(messages) == 40
    assert {"sense_x", "sense_y", "sense_theta"} <= set(messages[0])
    assert "previous_velocity" in messages[1]
    assert "sense_x" not in messages[1]
    assert len(messages[3]["sense_observations_x"].split()) == len(scenario["observations"][3])


def test_filter_tracks_vehicle(scenario):
    _, filter_rng = spawn_generators(2024, 2)
    config = FilterConfig(num_particles=100, sensor_range=30.0)
    session = LocalizationSession(scenario["landmarks"], config, rng=filter_rng)

    estimates = replay(session, scenario)

    assert estimates.shape == (40, 3)
    errors = pose_errors(estimates, scenario["ground_truth"])
    assert errors[:, 0].mean() < 1.5
    assert errors[:, 1].max() < 0.2
    assert len(session.filter.particles) == 100
    assert session.filter.average_search() > 0.0


def test_replay_is_reproducible(scenario):
    config = FilterConfig(num_particles=30, sensor_range=30.0, seed=5)
    first = replay(LocalizationSession(scenario["landmarks"], config), scenario)
    second = replay(LocalizationSession(scenario["landmarks"], config), scenario)
    np.testing.assert_array_equal(first, second)
