import json
import math

import pytest

from landmark_mcl.config import FilterConfig, load_config, resolve_config, save_config
from landmark_mcl.exceptions import InvalidConfiguration


def test_defaults():
    config = FilterConfig()
    assert config.num_particles == 1000
    assert config.delta_t == 0.1
    assert config.sensor_range == 50.0
    assert config.std_pos == (0.3, 0.3, 0.01)
    assert config.std_landmark == (0.3, 0.3)
    assert (config.cell_size, config.max_search_dist, config.world_margin) == (5.0, 50.0, 1.0)
    assert config.seed is None


@pytest.mark.parametrize("overrides", [
    {"num_particles": 0},
    {"num_particles": -3},
    {"num_particles": 10.5},
    {"delta_t": 0.0},
    {"sensor_range": -1.0},
    {"cell_size": 0.0},
    {"max_search_dist": float("nan")},
    {"world_margin": -0.5},
    {"std_pos": (0.3, 0.3)},
    {"std_pos": (0.3, -0.3, 0.01)},
    {"std_landmark": (0.3, 0.0)},
    {"std_landmark": ("a", 0.3)},
])
def test_invalid_values(overrides):
    with pytest.raises(InvalidConfiguration):
        FilterConfig(**overrides)


def test_zero_pose_noise_allowed():
    assert FilterConfig(std_pos=(0.0, 0.0, 0.0)).std_pos == (0.0, 0.0, 0.0)


def test_heading_std_clamped_to_full_turn():
    config = FilterConfig(std_pos=(0.3, 0.3, 10.0))
    assert config.std_pos[2] == pytest.approx(2 * math.pi)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(InvalidConfiguration, match="particles"):
        FilterConfig.from_dict({"particles": 10})


def test_load_config(tmp_path):
    path = tmp_path / "pf.json"
    path.write_text(json.dumps({"num_particles": 250, "std_landmark": [0.5, 0.4], "seed": 3}))
    config = load_config(path)
    assert config.num_particles == 250
    assert config.std_landmark == (0.5, 0.4)
    assert config.seed == 3
    assert config.delta_t == 0.1


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "pf.json"
    path.write_text("{not json")
    with pytest.raises(InvalidConfiguration):
        load_config(path)

    path.write_text("[1, 2]")
    with pytest.raises(InvalidConfiguration):
        load_config(path)


def test_save_then_load(tmp_path):
    config = FilterConfig(num_particles=42, sensor_range=30.0, seed=9)
    path = tmp_path / "saved.json"
    save_config(config, path)
    assert load_config(path) == config


def test_resolve_config_overrides_file(tmp_path):
    path = tmp_path / "pf.json"
    save_config(FilterConfig(num_particles=50, sensor_range=30.0, seed=3), path)

    config = resolve_config(path, num_particles=200, std_pos=[0.5, 0.5, 10.0], seed=None)

    assert config.num_particles == 200
    assert config.sensor_range == 30.0
    assert config.seed == 3
    assert config.std_pos == (0.5, 0.5, 2 * math.pi)


def test_resolve_config_without_file():
    assert resolve_config() == FilterConfig()
    with pytest.raises(InvalidConfiguration):
        resolve_config(std_landmark=[0.3, -0.3])
