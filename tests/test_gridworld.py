import pytest

from gridq.domain.qlearning import GridWorld
from gridq.domain.types import ACTIONS


@pytest.fixture
def world():
    return GridWorld(grid_size=5, goal=(4, 4), reward_goal=10.0, reward_step=-0.1)


@pytest.mark.parametrize("state, action", [
    ((0, 0), "left"),
    ((0, 0), "up"),
    ((0, 3), "left"),
    ((2, 0), "up"),
    ((4, 1), "right"),
    ((1, 4), "down"),
])
def test_outward_move_leaves_state_unchanged(world, state, action):
    next_state, reward = world.step(state, action)
    assert next_state == state
    assert reward == -0.1


def test_move_changes_exactly_one_axis(world):
    assert world.step((2, 2), "up")[0] == (2, 1)
    assert world.step((2, 2), "down")[0] == (2, 3)
    assert world.step((2, 2), "left")[0] == (1, 2)
    assert world.step((2, 2), "right")[0] == (3, 2)


def test_entering_goal_gives_goal_reward(world):
    next_state, reward = world.step((4, 3), "down")
    assert next_state == (4, 4)
    assert reward == 10.0

    next_state, reward = world.step((3, 4), "right")
    assert next_state == (4, 4)
    assert reward == 10.0


def test_bumping_wall_on_goal_counts_as_goal(world):
    next_state, reward = world.step((4, 4), "right")
    assert next_state == (4, 4)
    assert reward == 10.0


def test_every_non_goal_step_gives_step_penalty(world):
    for state in world.states():
        for action in ACTIONS:
            next_state, reward = world.step(state, action)
            assert world.is_valid_coord(next_state)
            expected = 10.0 if next_state == (4, 4) else -0.1
            assert reward == expected


def test_states_cover_grid(world):
    states = list(world.states())
    assert len(states) == 25
    assert len(set(states)) == 25


def test_unknown_action_raises(world):
    with pytest.raises(ValueError):
        world.step((0, 0), "jump")


def test_state_outside_grid_raises(world):
    with pytest.raises(ValueError):
        world.step((5, 0), "left")
    with pytest.raises(ValueError):
        world.step((0, -1), "up")


def test_invalid_construction():
    with pytest.raises(ValueError):
        GridWorld(grid_size=0, goal=(0, 0))
    with pytest.raises(ValueError):
        GridWorld(grid_size=3, goal=(3, 0))


def test_single_cell_grid():
    world = GridWorld(grid_size=1, goal=(0, 0))
    for action in ACTIONS:
        assert world.step((0, 0), action) == ((0, 0), 10.0)


@pytest.mark.parametrize("state", [(1.5, 2), (2, 2.0), (True, 1), (1, 2, 3), "ab"])
def test_non_integer_state_raises(world, state):
    assert not world.is_valid_coord(state)
    with pytest.raises(ValueError):
        world.step(state, "right")


def test_fractional_grid_size_rejected():
    with pytest.raises(ValueError):
        GridWorld(grid_size=5.5, goal=(4, 4))
