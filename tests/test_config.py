import numpy as np
import pytest

from gridq.domain.types import QLearningConfig, QValues


def test_defaults_match_demo():
    config = QLearningConfig()
    assert config.grid_size == 5
    assert config.start == (0, 0)
    assert config.goal == (4, 4)
    assert config.learning_rate == 0.1
    assert config.discount_factor == 0.9
    assert config.epsilon == 0.2
    assert config.max_steps_per_episode == 30
    assert config.reward_goal == 10.0
    assert config.reward_step == -0.1


@pytest.mark.parametrize("changes", [
    {"grid_size": 0},
    {"grid_size": -3},
    {"start": (5, 0)},
    {"goal": (0, -1)},
    {"learning_rate": 0.0},
    {"learning_rate": 1.5},
    {"discount_factor": 0.0},
    {"epsilon": -0.1},
    {"epsilon": 1.01},
    {"epsilon_decay": 0.0},
    {"epsilon_min": 0.5},
    {"max_episodes": 0},
    {"max_steps_per_episode": 0},
    {"training_mode": "turbo"},
    {"step_delay_ms": -1},
])
def test_invalid_values_rejected(changes):
    with pytest.raises(ValueError):
        QLearningConfig(**changes)


def test_boundary_values_accepted():
    config = QLearningConfig(grid_size=1, start=(0, 0), goal=(0, 0),
                             learning_rate=1.0, discount_factor=1.0, epsilon=0.0)
    assert config.epsilon == 0.0


def test_coordinates_become_tuples():
    config = QLearningConfig(start=[1, 2], goal=[3, 3])
    assert config.start == (1, 2)
    assert config.goal == (3, 3)


def test_replace_validates():
    config = QLearningConfig()
    assert config.replace(epsilon=0.5).epsilon == 0.5
    assert config.epsilon == 0.2
    with pytest.raises(ValueError):
        config.replace(epsilon=2.0)
    with pytest.raises(ValueError):
        config.replace(not_a_field=1)


def test_qvalues_best_actions_in_fixed_order():
    q_values = QValues(up=1.0, down=0.0, left=1.0, right=-1.0)
    assert q_values.best_actions() == ("up", "left")
    assert q_values.max_value() == 1.0
    assert list(q_values.as_array()) == [1.0, 0.0, 1.0, -1.0]


@pytest.mark.parametrize("changes", [
    {"grid_size": 5.5},
    {"grid_size": True},
    {"start": (0.5, 0)},
    {"goal": (4, 4.0)},
    {"start": (True, 0)},
    {"start": (1, 2, 3)},
])
def test_non_integer_cells_rejected(changes):
    with pytest.raises(ValueError):
        QLearningConfig(**changes)


def test_numpy_integers_accepted():
    config = QLearningConfig(grid_size=np.int64(5), start=(np.int32(1), 0))
    assert config.start == (1, 0)
